"""CLI helpers for inspecting and editing persisted settings."""

from __future__ import annotations

from typing import Annotated

import typer

from md2overleaf.core.config import save_settings

from ..state import emit_error, get_cli_state
from ..utils import load_cli_settings, settings_path


app = typer.Typer(help="Inspect or change the persisted settings.", no_args_is_help=True)


@app.command("show")
def show_settings() -> None:
    """Print the effective settings and where they are stored."""
    from rich import box
    from rich.table import Table

    state = get_cli_state()
    settings = load_cli_settings(state)

    table = Table(title="md2overleaf settings", box=box.SQUARE, header_style="bold cyan")
    table.add_column("Setting", style="magenta", no_wrap=True)
    table.add_column("Value")
    table.add_row("uploadHost", settings.upload_host)
    table.add_row("autoOpen", "yes" if settings.auto_open else "no")
    table.add_row("file", str(settings_path(state)))
    state.console.print(table)


@app.command("set")
def set_settings(
    upload_host: Annotated[
        str | None,
        typer.Option("--upload-host", help="Endpoint receiving the project archive."),
    ] = None,
    auto_open: Annotated[
        bool | None,
        typer.Option(
            "--auto-open/--no-auto-open",
            help="Open Overleaf automatically after the upload.",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Update one or more settings and persist them immediately."""
    if upload_host is None and auto_open is None:
        raise typer.BadParameter("Provide --upload-host and/or --auto-open/--no-auto-open.")

    state = get_cli_state()
    settings = load_cli_settings(state, upload_host=upload_host, auto_open=auto_open)
    target = settings_path(state)
    try:
        save_settings(settings, target)
    except OSError as exc:
        emit_error(f"Unable to write settings to {target}.", exception=exc)
        raise typer.Exit(code=1) from exc
    state.console.print(f"Saved settings to {target}", markup=False, highlight=False)


__all__ = ["app", "set_settings", "show_settings"]
