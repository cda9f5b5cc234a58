"""Assemble the Overleaf project tree for one exported note."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
import re
import shutil
import tempfile

from md2overleaf.assets import CONFIG_TEMPLATE, MAIN_TEMPLATE

from .debug import record_event
from .diagnostics import DiagnosticEmitter
from .diagrams import DiagramExporter
from .exceptions import StageBuildError
from .process import DEFAULT_MAX_OUTPUT
from .rewriter import AssetCopy, rewrite_references


logger = logging.getLogger(__name__)

STAGE_PREFIX = "md2overleaf-"

_TITLE_DIRECTIVE = re.compile(r"\\title\s*\{[^}]*\}")
_INCLUDE_DIRECTIVE = re.compile(r"\\include\s*\{[^}]*\}")
_TITLE_SEPARATORS = re.compile(r"[_-]+")
_WHITESPACE = re.compile(r"\s+")
_TEX_SUFFIX = re.compile(r"\.tex$", re.IGNORECASE)
_LATEX_SPECIALS = re.compile(r"([&%$#{}])")


@dataclass(slots=True)
class StageResult:
    """Final LaTeX text and the staging directory holding the project."""

    tex: str
    stage_dir: Path


def document_title(base_name: str) -> str:
    """Return a readable title for ``base_name`` (``my_note`` gives ``my note``)."""
    title = _TITLE_SEPARATORS.sub(" ", _TEX_SUFFIX.sub("", base_name))
    title = _WHITESPACE.sub(" ", title).strip()
    return _LATEX_SPECIALS.sub(r"\\\1", title)


def render_main_template(template: str, base_name: str) -> str:
    """Point the wrapper template at the exported document."""
    include_name = _TEX_SUFFIX.sub("", base_name)
    title = document_title(base_name)
    text = _TITLE_DIRECTIVE.sub(lambda _: f"\\title{{{title}}}", template, count=1)
    return _INCLUDE_DIRECTIVE.sub(lambda _: f"\\include{{{include_name}}}", text, count=1)


def copy_assets(
    assets: Iterable[AssetCopy],
    stage_dir: Path,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> list[Path]:
    """Copy referenced images into ``stage_dir``, skipping the missing ones."""
    copied: list[Path] = []
    root = stage_dir.resolve()
    for asset in assets:
        destination = stage_dir / asset.relative
        if not destination.resolve().is_relative_to(root):
            logger.warning("Skipping image outside the project tree: %s", asset.relative)
            continue
        if not asset.source.is_file():
            logger.info("Missing referenced image: %s", asset.source)
            record_event(emitter, "asset_missing", {"path": asset.relative})
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(asset.source, destination)
        copied.append(destination)
    return copied


def install_templates(stage_dir: Path, assets_dir: Path, base_name: str) -> None:
    """Copy ``config.tex`` and write ``main.tex`` when the templates exist."""
    config_template = assets_dir / CONFIG_TEMPLATE
    if config_template.is_file():
        shutil.copy2(config_template, stage_dir / CONFIG_TEMPLATE)
    else:
        logger.warning("Missing %s template at %s", CONFIG_TEMPLATE, config_template)

    main_template = assets_dir / MAIN_TEMPLATE
    if main_template.is_file():
        rendered = render_main_template(main_template.read_text(encoding="utf-8"), base_name)
        (stage_dir / MAIN_TEMPLATE).write_text(rendered, encoding="utf-8")
    else:
        logger.warning("Missing %s template at %s", MAIN_TEMPLATE, main_template)


def discard_stage(stage_dir: Path) -> None:
    """Remove a staging directory, logging rather than raising on failure."""
    try:
        shutil.rmtree(stage_dir)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Unable to remove staging directory %s: %s", stage_dir, exc)


def build_stage(
    tex_path: Path,
    base_name: str,
    *,
    source_root: Path,
    assets_dir: Path,
    work_dir: Path,
    env: Mapping[str, str] | None = None,
    npx: str = "npx",
    tldraw_package: str = "@tldraw/cli",
    max_output: int = DEFAULT_MAX_OUTPUT,
    emitter: DiagnosticEmitter | None = None,
) -> StageResult:
    """Create a fresh staging directory holding the complete LaTeX project.

    The directory is removed before :class:`StageBuildError` propagates.
    On success the caller owns it and must delete it after use.
    """
    try:
        stage_dir = Path(tempfile.mkdtemp(prefix=STAGE_PREFIX))
    except OSError as exc:
        raise StageBuildError(f"Unable to create a staging directory: {exc}") from exc

    try:
        tex = tex_path.read_text(encoding="utf-8")
        exporter = DiagramExporter(
            source_root=source_root,
            stage_dir=stage_dir,
            work_dir=work_dir,
            env=env,
            executable=npx,
            package=tldraw_package,
            max_output=max_output,
            emitter=emitter,
        )
        result = rewrite_references(tex, source_root, export_diagram=exporter)
        copy_assets(result.assets, stage_dir, emitter=emitter)
        (stage_dir / f"{base_name}.tex").write_text(result.text, encoding="utf-8")
        install_templates(stage_dir, assets_dir, base_name)
    except StageBuildError:
        discard_stage(stage_dir)
        raise
    except Exception as exc:
        discard_stage(stage_dir)
        raise StageBuildError(f"Unable to stage '{base_name}': {exc}") from exc

    return StageResult(tex=result.text, stage_dir=stage_dir)


__all__ = [
    "STAGE_PREFIX",
    "StageResult",
    "build_stage",
    "copy_assets",
    "discard_stage",
    "document_title",
    "install_templates",
    "render_main_template",
]
