"""Configuration models used by the export pipeline.

Settings

`upload_host` (`str`, persisted as `uploadHost`)
: Endpoint receiving the multipart archive upload. Trailing slashes are
  stripped before use; an empty value falls back to `https://x0.at`.

`auto_open` (`bool`, persisted as `autoOpen`)
: Open the Overleaf deep link in the browser once the upload succeeds. When
  disabled the link is only reported.

PipelineConfig

`assets_dir` (`Path`)
: Directory holding `config.tex`, `main.tex` and `final_filter.lua`. Defaults
  to the templates bundled with the package.

`source_root` (`Path | None`)
: Root of the note tree (the Obsidian vault). Image references are resolved
  against it and external commands run inside it. Discovered from the note
  location when omitted.

`pandoc`, `npx` (`str`)
: Executables used for conversion and diagram rasterisation.

`tldraw_package` (`str`)
: Package name handed to `npx` for tldraw exports.

`language`, `direction` (`str`)
: Metadata forwarded to pandoc (`lang` and `dir`).

`search_path` (`str`)
: PATH used for every external command, so GUI launched hosts still find
  Homebrew and system binaries.

`converter_max_output`, `max_output` (`int`)
: Caps, in bytes, on captured subprocess output and upload responses.

`upload_timeout` (`float | None`)
: Optional timeout, in seconds, for the upload request.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from md2overleaf.assets import ASSETS_DIR, LUA_FILTER


logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_HOST = "https://x0.at"
DEFAULT_SEARCH_PATH = "/opt/homebrew/bin:/usr/local/bin:/usr/bin:/bin:/usr/sbin:/sbin"


class Settings(BaseModel):
    """User settings persisted between runs."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    upload_host: str = Field(default=DEFAULT_UPLOAD_HOST, alias="uploadHost")
    auto_open: bool = Field(default=True, alias="autoOpen")

    @field_validator("upload_host", mode="before")
    @classmethod
    def _default_blank_host(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_UPLOAD_HOST
        if isinstance(value, str) and not value.strip():
            return DEFAULT_UPLOAD_HOST
        return value

    @property
    def normalised_upload_host(self) -> str:
        """Return the upload endpoint without surrounding blanks or trailing slashes."""
        host = self.upload_host.strip().rstrip("/")
        return host or DEFAULT_UPLOAD_HOST


class PipelineConfig(BaseModel):
    """Static configuration of one export pipeline instance."""

    model_config = ConfigDict(extra="forbid")

    assets_dir: Path = ASSETS_DIR
    source_root: Path | None = None
    pandoc: str = "pandoc"
    npx: str = "npx"
    tldraw_package: str = "@tldraw/cli"
    language: str = "he"
    direction: str = "rtl"
    search_path: str = DEFAULT_SEARCH_PATH
    converter_max_output: int = 64 * 1024 * 1024
    max_output: int = 32 * 1024 * 1024
    upload_timeout: float | None = None

    @property
    def filter_path(self) -> Path:
        """Lua filter handed to pandoc."""
        return self.assets_dir / LUA_FILTER


def load_settings(path: Path) -> Settings:
    """Load settings from ``path`` and merge them with the defaults."""
    if not path.exists():
        return Settings()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return Settings()
    if not isinstance(payload, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return Settings()
    try:
        return Settings.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Ignoring invalid settings in %s: %s", path, exc)
        return Settings()


def save_settings(settings: Settings, path: Path) -> None:
    """Persist ``settings`` as JSON using the stored field names."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = settings.model_dump(by_alias=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


__all__ = [
    "DEFAULT_SEARCH_PATH",
    "DEFAULT_UPLOAD_HOST",
    "PipelineConfig",
    "Settings",
    "load_settings",
    "save_settings",
]
