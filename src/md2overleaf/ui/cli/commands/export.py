"""Implementation of the `md2overleaf export` command."""

from __future__ import annotations

import typer

from md2overleaf.api.service import ExportService
from md2overleaf.core.debug import format_user_friendly_error
from md2overleaf.core.exceptions import Md2OverleafError

from .._options import AssetsDirOption, NoteArgument, OpenOption, UploadHostOption, VaultOption
from ..diagnostics import CliEmitter
from ..state import emit_error, get_cli_state
from ..utils import build_pipeline_config, load_cli_settings


def export(
    note: NoteArgument,
    vault: VaultOption = None,
    assets_dir: AssetsDirOption = None,
    upload_host: UploadHostOption = None,
    open_browser: OpenOption = None,
) -> None:
    """Convert NOTE to LaTeX, upload the project and open it in Overleaf."""
    state = get_cli_state()
    settings = load_cli_settings(state, upload_host=upload_host, auto_open=open_browser)
    service = ExportService(
        build_pipeline_config(vault, assets_dir),
        settings,
        emitter=CliEmitter(state),
        opener=typer.launch,
    )

    try:
        result = service.export_to_overleaf(note)
    except Md2OverleafError as exc:
        emit_error(format_user_friendly_error(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    state.console.print(result.overleaf_url, markup=False, highlight=False, soft_wrap=True)


__all__ = ["export"]
