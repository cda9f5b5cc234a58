"""Templates and pandoc filter bundled with md2overleaf."""

from __future__ import annotations

from pathlib import Path


ASSETS_DIR = Path(__file__).parent.resolve()

CONFIG_TEMPLATE = "config.tex"
MAIN_TEMPLATE = "main.tex"
LUA_FILTER = "final_filter.lua"


__all__ = ["ASSETS_DIR", "CONFIG_TEMPLATE", "LUA_FILTER", "MAIN_TEMPLATE"]
