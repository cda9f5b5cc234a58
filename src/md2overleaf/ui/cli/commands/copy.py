"""Implementation of the `md2overleaf copy` command."""

from __future__ import annotations

import sys

import typer

from md2overleaf.adapters.clipboard import clipboard_command, copy_to_clipboard
from md2overleaf.api.service import ExportService
from md2overleaf.core.debug import format_user_friendly_error
from md2overleaf.core.exceptions import Md2OverleafError

from .._options import AssetsDirOption, NoteArgument, PrintOption, VaultOption
from ..diagnostics import CliEmitter
from ..state import emit_error, emit_warning, get_cli_state
from ..utils import build_pipeline_config, load_cli_settings


def copy_tex(
    note: NoteArgument,
    vault: VaultOption = None,
    assets_dir: AssetsDirOption = None,
    print_only: PrintOption = False,
) -> None:
    """Convert NOTE and copy the final LaTeX to the clipboard."""
    state = get_cli_state()
    clipboard = None
    if not print_only:
        if clipboard_command() is None:
            emit_warning("No clipboard tool found, writing the LaTeX to stdout instead.")
            print_only = True
        else:
            clipboard = copy_to_clipboard

    service = ExportService(
        build_pipeline_config(vault, assets_dir),
        load_cli_settings(state),
        emitter=CliEmitter(state),
        clipboard=clipboard,
    )

    try:
        tex = service.copy_tex_to_clipboard(note)
    except Md2OverleafError as exc:
        emit_error(format_user_friendly_error(exc, "Copy failed"), exception=exc)
        raise typer.Exit(code=1) from exc

    if print_only:
        sys.stdout.write(tex if tex.endswith("\n") else f"{tex}\n")


__all__ = ["copy_tex"]
