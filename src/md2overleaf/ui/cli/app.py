"""Typer application wiring for the md2overleaf CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from md2overleaf.version import get_version

from .commands import copy_tex, export, settings_app
from .state import configure_logging, debug_enabled, emit_error, set_cli_state


app = typer.Typer(
    help="Send Obsidian notes to Overleaf as ready-to-compile LaTeX projects.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"md2overleaf {get_version()}")
        raise typer.Exit()


@app.callback()
def _configure(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase diagnostic output (repeat for more detail).",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show full tracebacks when an unexpected error occurs."),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
            help="Directory holding settings.json (defaults to ~/.md2overleaf).",
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug, config_root=config)
    configure_logging(state)


app.command("export")(export)
app.command("copy")(copy_tex)
app.add_typer(settings_app, name="settings")


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - last resort
        from .state import get_cli_state

        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
