"""Export orchestration shared by the CLI and embedding integrations."""

from __future__ import annotations

from collections.abc import Callable
import contextlib
from dataclasses import dataclass
import logging
from pathlib import Path
import shutil
from typing import Any, NoReturn

import requests

from md2overleaf.core.config import PipelineConfig, Settings
from md2overleaf.core.converter import convert_markdown, ensure_converter_output
from md2overleaf.core.debug import raise_pipeline_error, record_event
from md2overleaf.core.diagnostics import DiagnosticEmitter, emit_status, ensure_emitter
from md2overleaf.core.exceptions import (
    ConversionError,
    Md2OverleafError,
    PackagingError,
    StageBuildError,
    UploadError,
)
from md2overleaf.core.packaging import build_overleaf_url, package_stage, upload_archive
from md2overleaf.core.process import build_shell_env
from md2overleaf.core.staging import StageResult, build_stage, discard_stage


logger = logging.getLogger(__name__)

WORK_DIR_NAME = ".md2overleaf"
VAULT_MARKER = ".obsidian"


def discover_source_root(note: Path) -> Path:
    """Return the closest ancestor holding an Obsidian vault, else the note's folder."""
    folder = note.resolve().parent
    for candidate in (folder, *folder.parents):
        if (candidate / VAULT_MARKER).is_dir():
            return candidate
    return folder


@dataclass(slots=True)
class ExportJob:
    """Paths derived from one note for the duration of one export."""

    note: Path
    source_root: Path
    base_name: str
    work_dir: Path

    @property
    def tex_path(self) -> Path:
        """LaTeX file written by pandoc inside the work dir."""
        return self.work_dir / f"{self.base_name}.tex"


@dataclass(slots=True)
class ExportResult:
    """Outcome of a successful upload."""

    archive_url: str
    overleaf_url: str
    opened: bool = False


class ExportService:
    """Run the note to Overleaf pipeline with guaranteed clean-up.

    ``opener`` launches the Overleaf link (the CLI passes ``typer.launch``)
    and ``clipboard`` receives the staged LaTeX for the copy action. Both are
    optional so the service can run headless.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        settings: Settings | None = None,
        *,
        emitter: DiagnosticEmitter | None = None,
        opener: Callable[[str], Any] | None = None,
        clipboard: Callable[[str], Any] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.settings = settings or Settings()
        self.emitter = ensure_emitter(emitter)
        self.opener = opener
        self.clipboard = clipboard
        self.session = session

    # ------------------------------------------------------------------ actions

    def export_to_overleaf(self, note: Path) -> ExportResult:
        """Convert, stage, package and upload ``note``, then open Overleaf."""
        job = self.prepare(note)
        stage: StageResult | None = None
        try:
            self._convert(job)
            emit_status(self.emitter, "Conversion complete. Preparing ZIP...")
            stage = self._stage(job)

            try:
                archive = package_stage(stage.stage_dir, job.work_dir)
            except PackagingError as exc:
                self._fail("Packaging failed. See the log for details.", exc)

            emit_status(self.emitter, "Uploading to Overleaf...")
            try:
                archive_url = upload_archive(
                    archive,
                    self.settings.normalised_upload_host,
                    session=self.session,
                    timeout=self.config.upload_timeout,
                    max_response=self.config.max_output,
                )
            except UploadError as exc:
                self._fail("Upload failed. See the log for details.", exc)
            record_event(self.emitter, "upload_complete", {"url": archive_url})

            overleaf_url = build_overleaf_url(archive_url, job.base_name)
            logger.info("Overleaf URL: %s", overleaf_url)
            opened = self._open(overleaf_url)
            return ExportResult(
                archive_url=archive_url,
                overleaf_url=overleaf_url,
                opened=opened,
            )
        finally:
            self.cleanup(job, stage)

    def copy_tex_to_clipboard(self, note: Path) -> str:
        """Run the pipeline up to staging and hand the final LaTeX to the clipboard."""
        job = self.prepare(note)
        stage: StageResult | None = None
        try:
            self._convert(job)
            stage = self._stage(job)
            if self.clipboard is not None:
                try:
                    self.clipboard(stage.tex)
                except Md2OverleafError as exc:
                    self._fail("Failed to copy TeX. See the log for details.", exc)
                emit_status(self.emitter, "TeX copied to clipboard.")
            return stage.tex
        finally:
            self.cleanup(job, stage)

    # ------------------------------------------------------------------ phases

    def prepare(self, note: Path) -> ExportJob:
        """Resolve paths for ``note`` and create its work directory."""
        note = Path(note)
        if not note.is_file():
            self._fail("No note to export.", Md2OverleafError(f"Note '{note}' does not exist"))
        source_root = Path(self.config.source_root or discover_source_root(note)).resolve()
        base_name = note.stem
        work_dir = source_root / WORK_DIR_NAME / base_name
        try:
            work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._fail("Unable to create the export folder.", exc)
        return ExportJob(
            note=note.resolve(),
            source_root=source_root,
            base_name=base_name,
            work_dir=work_dir,
        )

    def cleanup(self, job: ExportJob, stage: StageResult | None = None) -> None:
        """Remove the staging tree and the work dir; failures are only logged."""
        if stage is not None:
            discard_stage(stage.stage_dir)
        try:
            shutil.rmtree(job.work_dir)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Unable to clean export folder %s: %s", job.work_dir, exc)
        # Other notes may still be exporting into the shared parent.
        with contextlib.suppress(OSError):
            job.work_dir.parent.rmdir()

    def _convert(self, job: ExportJob) -> None:
        record_event(self.emitter, "converter_run", {"source": job.note.name})
        try:
            convert_markdown(
                job.note,
                job.tex_path,
                source_root=job.source_root,
                filter_path=self.config.filter_path,
                env=build_shell_env(self.config.search_path),
                executable=self.config.pandoc,
                language=self.config.language,
                direction=self.config.direction,
                max_output=self.config.converter_max_output,
            )
            logger.debug("Expecting LaTeX at %s", job.tex_path)
            ensure_converter_output(job.tex_path)
        except ConversionError as exc:
            self._fail("Pandoc conversion failed. See the log for details.", exc)

    def _stage(self, job: ExportJob) -> StageResult:
        try:
            return build_stage(
                job.tex_path,
                job.base_name,
                source_root=job.source_root,
                assets_dir=self.config.assets_dir,
                work_dir=job.work_dir,
                env=build_shell_env(self.config.search_path, {"npm_config_yes": "true"}),
                npx=self.config.npx,
                tldraw_package=self.config.tldraw_package,
                max_output=self.config.max_output,
                emitter=self.emitter,
            )
        except StageBuildError as exc:
            self._fail("Preparing the LaTeX project failed. See the log for details.", exc)

    def _open(self, url: str) -> bool:
        if not self.settings.auto_open or self.opener is None:
            emit_status(self.emitter, f"Upload complete. Overleaf URL: {url}")
            return False
        try:
            self.opener(url)
        except OSError as exc:
            self.emitter.warning(f"Unable to open a browser, visit {url}", exc)
            return False
        emit_status(self.emitter, "Opening in Overleaf...")
        return True

    def _fail(self, message: str, exc: BaseException) -> NoReturn:
        logger.debug("%s", message, exc_info=exc)
        raise_pipeline_error(self.emitter, message, exc)


__all__ = [
    "ExportJob",
    "ExportResult",
    "ExportService",
    "discover_source_root",
]
