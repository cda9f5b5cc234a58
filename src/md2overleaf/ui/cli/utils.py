"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

from pathlib import Path

from md2overleaf.core.config import PipelineConfig, Settings, load_settings
from md2overleaf.core.user_dir import resolve_user_dir

from .state import CLIState


def settings_path(state: CLIState) -> Path:
    """Return the settings file selected by ``--config`` or the environment."""
    return resolve_user_dir(state.config_root).settings_path


def load_cli_settings(
    state: CLIState,
    *,
    upload_host: str | None = None,
    auto_open: bool | None = None,
) -> Settings:
    """Load persisted settings and apply per-run overrides."""
    settings = load_settings(settings_path(state))
    overrides: dict[str, object] = {}
    if upload_host is not None:
        overrides["upload_host"] = upload_host
    if auto_open is not None:
        overrides["auto_open"] = auto_open
    if overrides:
        settings = Settings.model_validate({**settings.model_dump(), **overrides})
    return settings


def build_pipeline_config(
    vault: Path | None = None,
    assets_dir: Path | None = None,
) -> PipelineConfig:
    """Return the pipeline configuration for the CLI options."""
    options: dict[str, object] = {}
    if vault is not None:
        options["source_root"] = vault
    if assets_dir is not None:
        options["assets_dir"] = assets_dir
    return PipelineConfig(**options)
