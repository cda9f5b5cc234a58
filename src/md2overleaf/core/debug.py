"""Helpers that report pipeline failures before raising them."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NoReturn

from .diagnostics import DiagnosticEmitter, ensure_emitter
from .exceptions import Md2OverleafError, exception_hint


def mark_reported(error: BaseException) -> BaseException:
    """Flag an exception so upper layers do not report it twice."""
    error._md2overleaf_logged = True  # type: ignore[attr-defined]  # noqa: SLF001
    return error


def was_reported(error: BaseException) -> bool:
    """Return True when the exception was already surfaced to the user."""
    return bool(getattr(error, "_md2overleaf_logged", False))


def raise_pipeline_error(
    emitter: DiagnosticEmitter | None,
    message: str,
    exc: BaseException,
) -> NoReturn:
    """Emit a short error diagnostic and re-raise ``exc`` as already reported.

    Pipeline errors keep their type so callers can still tell a conversion
    failure from an upload failure. Other exceptions are wrapped in a
    :class:`Md2OverleafError` carrying ``message``.
    """
    ensure_emitter(emitter).error(message, exc)
    if isinstance(exc, Md2OverleafError):
        raise mark_reported(exc)
    error = Md2OverleafError(message)
    raise mark_reported(error) from exc


def record_event(
    emitter: DiagnosticEmitter | None,
    event: str,
    payload: Mapping[str, Any],
) -> None:
    """Forward a structured diagnostic event."""
    ensure_emitter(emitter).event(event, payload)


def format_user_friendly_error(error: BaseException, summary: str = "Export failed") -> str:
    """Return a concise failure summary suitable for end users."""
    hint = exception_hint(error.__cause__ or error)
    if hint:
        summary = f"{summary}: {hint}"
    if summary.endswith("."):
        summary = summary.rstrip(".")
    return f"{summary}. Re-run with --debug for technical details."


__all__ = [
    "format_user_friendly_error",
    "mark_reported",
    "raise_pipeline_error",
    "record_event",
    "was_reported",
]
