"""Rasterise tldraw drawings embedded in notes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
from pathlib import Path
import re

from .debug import record_event
from .diagnostics import DiagnosticEmitter
from .exceptions import DiagramExportError, ProcessExecutionError
from .process import DEFAULT_MAX_OUTPUT, run_command


logger = logging.getLogger(__name__)

TLDRAW_FENCE = re.compile(r"```tldraw\s*\n(.*?)```", re.DOTALL)
DIAGRAM_DIR = "pictures"


def extract_tldraw_document(text: str) -> str | None:
    """Return the body of the first tldraw fence in ``text``, if any."""
    match = TLDRAW_FENCE.search(text)
    if match is None:
        return None
    return match.group(1)


@dataclass(slots=True)
class DiagramExporter:
    """Export tldraw drawings to PNG files inside a staging tree.

    The drawing description is written to ``work_dir`` and the PNG lands in
    ``stage_dir/pictures``. Failures never propagate: :meth:`export` returns
    ``None`` and the reason is logged.
    """

    source_root: Path
    stage_dir: Path
    work_dir: Path
    env: Mapping[str, str] | None = None
    executable: str = "npx"
    package: str = "@tldraw/cli"
    max_output: int = DEFAULT_MAX_OUTPUT
    emitter: DiagnosticEmitter | None = field(default=None, repr=False)

    def build_command(self, drawing: Path, target: Path) -> list[str]:
        """Return the ``npx`` invocation rasterising ``drawing`` to ``target``."""
        return [
            self.executable,
            "-y",
            self.package,
            "export",
            str(drawing),
            "--format",
            "png",
            "--output",
            str(target),
            "--overwrite",
        ]

    def export(self, md_path: Path) -> str | None:
        """Rasterise the drawing in ``md_path`` and return its staged relative path."""
        try:
            return self._export(md_path)
        except DiagramExportError as exc:
            logger.warning("tldraw export failed for %s: %s", md_path, exc)
            return None

    __call__ = export

    def _export(self, md_path: Path) -> str | None:
        try:
            source = md_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DiagramExportError(f"unable to read '{md_path}': {exc}") from exc

        drawing = extract_tldraw_document(source)
        if drawing is None:
            logger.info("No tldraw drawing found in %s", md_path)
            return None

        relative = f"{DIAGRAM_DIR}/{md_path.stem}.png"
        target = self.stage_dir / relative
        description = self.work_dir / f"{md_path.stem}.tldr"

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            description.parent.mkdir(parents=True, exist_ok=True)
            description.write_text(drawing, encoding="utf-8")
            run_command(
                self.build_command(description, target),
                cwd=self.source_root,
                env=self.env,
                description="tldraw CLI",
                max_output=self.max_output,
            )
        except (OSError, ProcessExecutionError) as exc:
            raise DiagramExportError(str(exc)) from exc
        finally:
            try:
                description.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Unable to remove tldraw description %s: %s", description, exc)

        if not target.is_file():
            raise DiagramExportError(f"tldraw CLI did not produce '{target}'")

        record_event(self.emitter, "diagram_exported", {"source": str(md_path), "target": relative})
        return relative


__all__ = ["DIAGRAM_DIR", "TLDRAW_FENCE", "DiagramExporter", "extract_tldraw_document"]
