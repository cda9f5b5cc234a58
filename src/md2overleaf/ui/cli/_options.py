"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
UPLOAD_PANEL = "Upload"
OUTPUT_PANEL = "Output"

NoteArgument = Annotated[
    Path,
    typer.Argument(
        metavar="NOTE",
        help="Markdown note to export.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
]

VaultOption = Annotated[
    Path | None,
    typer.Option(
        "--vault",
        help=(
            "Root of the note tree used to resolve image paths. Defaults to the closest "
            "folder containing .obsidian, else the note's folder."
        ),
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

AssetsDirOption = Annotated[
    Path | None,
    typer.Option(
        "--assets-dir",
        help="Directory holding config.tex, main.tex and final_filter.lua.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

UploadHostOption = Annotated[
    str | None,
    typer.Option(
        "--upload-host",
        help="Override the configured upload endpoint for this run.",
        rich_help_panel=UPLOAD_PANEL,
    ),
]

OpenOption = Annotated[
    bool | None,
    typer.Option(
        "--open/--no-open",
        help="Open Overleaf after the upload (defaults to the autoOpen setting).",
        show_default=False,
        rich_help_panel=UPLOAD_PANEL,
    ),
]

PrintOption = Annotated[
    bool,
    typer.Option(
        "--print",
        help="Write the LaTeX to stdout instead of the clipboard.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]
