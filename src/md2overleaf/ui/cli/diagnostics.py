"""Emitter rendering export progress on the CLI's stderr console."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from md2overleaf.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


# Events the user needs even without -v.
_ALWAYS_SHOWN = frozenset({"status"})
_SHOWN_AS_WARNING = frozenset({"asset_missing"})


class CliEmitter:
    """Show status lines always, skipped images as warnings, the rest with ``-v``."""

    def __init__(self, state: CLIState | None = None) -> None:
        self._state = state or get_cli_state()

    @property
    def debug_enabled(self) -> bool:
        return self._state.show_tracebacks

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message is None:
            return
        if name in _SHOWN_AS_WARNING:
            emit_warning(message)
        elif name in _ALWAYS_SHOWN or self._state.verbosity >= 1:
            render_message("info", message)


__all__ = ["CliEmitter"]
