"""Public API for embedding the md2overleaf export pipeline."""

from __future__ import annotations

from .service import ExportJob, ExportResult, ExportService, discover_source_root


__all__ = ["ExportJob", "ExportResult", "ExportService", "discover_source_root"]
