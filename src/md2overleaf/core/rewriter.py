"""Rewrite image references in pandoc output into LaTeX figures.

Pandoc leaves three kinds of image references in the LaTeX it produces from
Obsidian notes:

1. Wiki-style embeds such as ``![[pictures/plot.png]]`` which pandoc does
   not understand and escapes into ``!{[}{[}pictures/plot.png{]}{]}``.
2. Regular Markdown images under ``pictures/``, emitted as
   ``\\pandocbounded{\\includegraphics[...]{pictures/plot.png}}``.
3. Wiki-style embeds of another note under ``pictures/`` holding a tldraw
   drawing, e.g. ``!{[}{[}pictures/plan.md{]}{]}``.

Every match becomes a floating figure; static images are queued for copying
into the staging tree and drawings are rasterised on the fly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
from urllib.parse import unquote


logger = logging.getLogger(__name__)

IMAGE_EMBED_PATTERN = re.compile(r"!\{\[\}\{\[\}([^{}]+\.png)\{\]\}\{\]\}")
BOUNDED_IMAGE_PATTERN = re.compile(
    r"\\pandocbounded\{\s*\\includegraphics(?:\[[^\]]*\])?\{(pictures/[^}]+)\}\s*\}"
)
DIAGRAM_EMBED_PATTERN = re.compile(r"!\{\[\}\{\[\}(pictures/[^{}]+?\.md)\{\]\}\{\]\}")

_LATEX_ESCAPE = re.compile(r"\\([_%&#$])")
_PICTURES_PREFIX = re.compile(r"^pictures/")
_EXTENSION = re.compile(r"\.[^.]+$")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")

MISSING_DIAGRAM_MARKER = "% [md2overleaf] missing tldraw export for {path}"

DiagramExport = Callable[[Path], str | None]


@dataclass(slots=True, frozen=True)
class AssetCopy:
    """File referenced by the document that must be copied into the stage."""

    source: Path
    relative: str


@dataclass(slots=True)
class RewriteResult:
    """Rewritten LaTeX plus the assets it references."""

    text: str
    assets: list[AssetCopy] = field(default_factory=list)


def normalise_reference(raw: str) -> str:
    """Turn a path found in pandoc output back into a POSIX relative path."""
    path = _LATEX_ESCAPE.sub(r"\1", raw.strip())
    path = unquote(path)
    return path.replace("\\", "/")


def figure_label(relative: str) -> str:
    """Return the ``fig:`` label for an image path.

    Every run of characters outside ``[A-Za-z0-9]`` becomes one hyphen, edge
    hyphens included, so the label stays ASCII for any file name.
    """
    stem = _EXTENSION.sub("", _PICTURES_PREFIX.sub("", relative))
    slug = _NON_ALNUM.sub("-", stem)
    return f"fig:{slug or 'figure'}"


def figure_block(relative: str) -> str:
    """Return a centred, full-width figure with an empty caption and a label."""
    return (
        "\\begin{figure}[H]\n"
        "  \\centering\n"
        f"  \\includegraphics[width=\\linewidth]{{{relative}}}\n"
        "  \\caption{}\n"
        f"  \\label{{{figure_label(relative)}}}\n"
        "\\end{figure}"
    )


def diagram_block(relative: str) -> str:
    """Return the caption-less figure used for rasterised drawings."""
    return (
        "\\begin{figure}[H] \\centering "
        f"\\includegraphics[width=\\linewidth]{{{relative}}} "
        "\\end{figure}"
    )


def rewrite_references(
    tex: str,
    source_root: Path,
    *,
    export_diagram: DiagramExport | None = None,
) -> RewriteResult:
    """Replace image and drawing references in ``tex`` with figure blocks.

    The three reference shapes are scanned independently, in order, over the
    whole text. ``export_diagram`` receives the absolute path of each
    embedded drawing note and returns the staged PNG path, or ``None`` when
    nothing could be exported; the embed is then replaced with a LaTeX
    comment and the rewrite carries on.
    """
    assets: list[AssetCopy] = []

    def _image(match: re.Match[str]) -> str:
        relative = normalise_reference(match.group(1))
        assets.append(AssetCopy(source=source_root / relative, relative=relative))
        return figure_block(relative)

    text = IMAGE_EMBED_PATTERN.sub(_image, tex)
    text = BOUNDED_IMAGE_PATTERN.sub(_image, text)

    exported: dict[str, str | None] = {}

    def _diagram(match: re.Match[str]) -> str:
        relative = normalise_reference(match.group(1))
        if relative not in exported:
            result = export_diagram(source_root / relative) if export_diagram else None
            if result is None:
                logger.warning("Skipping tldraw embed %s: no PNG was exported", relative)
            exported[relative] = result
        png = exported[relative]
        if png is None:
            return MISSING_DIAGRAM_MARKER.format(path=relative) + "\n"
        return diagram_block(png)

    text = DIAGRAM_EMBED_PATTERN.sub(_diagram, text)
    return RewriteResult(text=text, assets=assets)


__all__ = [
    "BOUNDED_IMAGE_PATTERN",
    "DIAGRAM_EMBED_PATTERN",
    "IMAGE_EMBED_PATTERN",
    "MISSING_DIAGRAM_MARKER",
    "AssetCopy",
    "DiagramExport",
    "RewriteResult",
    "diagram_block",
    "figure_block",
    "figure_label",
    "normalise_reference",
    "rewrite_references",
]
