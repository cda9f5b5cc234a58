"""Export Obsidian notes to Overleaf as ready-to-compile LaTeX projects."""

from __future__ import annotations

from md2overleaf.api import ExportJob, ExportResult, ExportService, discover_source_root
from md2overleaf.core.config import PipelineConfig, Settings, load_settings, save_settings
from md2overleaf.core.exceptions import (
    ConversionError,
    ConverterOutputMissingError,
    DiagramExportError,
    Md2OverleafError,
    PackagingError,
    StageBuildError,
    UploadError,
)
from md2overleaf.core.sanitizer import sanitize_markdown
from md2overleaf.version import get_version


__version__ = get_version()

__all__ = [
    "ConversionError",
    "ConverterOutputMissingError",
    "DiagramExportError",
    "ExportJob",
    "ExportResult",
    "ExportService",
    "Md2OverleafError",
    "PackagingError",
    "PipelineConfig",
    "Settings",
    "StageBuildError",
    "UploadError",
    "__version__",
    "discover_source_root",
    "load_settings",
    "sanitize_markdown",
    "save_settings",
]
