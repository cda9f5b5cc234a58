"""CLI command implementations."""

from __future__ import annotations

from .copy import copy_tex
from .export import export
from .settings import app as settings_app


__all__ = ["copy_tex", "export", "settings_app"]
