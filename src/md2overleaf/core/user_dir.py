"""Resolution of the md2overleaf user directory."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path


__all__ = ["HOME_ENV_VAR", "SETTINGS_FILENAME", "Md2OverleafUserDir", "resolve_user_dir"]

HOME_ENV_VAR = "MD2OVERLEAF_HOME"
SETTINGS_FILENAME = "settings.json"


@dataclass(slots=True, frozen=True)
class Md2OverleafUserDir:
    """Resolved user root holding persisted state."""

    root: Path

    @property
    def settings_path(self) -> Path:
        """Location of the persisted settings file (parents are not created)."""
        return self.root / SETTINGS_FILENAME


def resolve_user_dir(root: str | Path | None = None) -> Md2OverleafUserDir:
    """Pick the user root: ``root``, then ``$MD2OVERLEAF_HOME``, then ``~/.md2overleaf``."""
    if root is not None:
        return Md2OverleafUserDir(Path(root).expanduser())
    env_root = os.environ.get(HOME_ENV_VAR)
    if env_root:
        return Md2OverleafUserDir(Path(env_root).expanduser())
    return Md2OverleafUserDir(Path.home() / ".md2overleaf")
