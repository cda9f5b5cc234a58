"""Diagnostic abstractions shared across the export pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


def ensure_emitter(emitter: DiagnosticEmitter | None) -> DiagnosticEmitter:
    """Return a usable emitter, defaulting to the null implementation."""
    return emitter if emitter is not None else NullEmitter()


def emit_status(emitter: DiagnosticEmitter | None, message: str) -> None:
    """Send a short user-facing status message."""
    ensure_emitter(emitter).event("status", {"message": message})


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "status":
        message = data.get("message")
        return str(message) if message else None

    if name == "converter_run":
        source = data.get("source") or "<unknown>"
        return f"Converting {source} with pandoc"

    if name == "diagram_exported":
        target = data.get("target") or "<unknown>"
        return f"Exported tldraw diagram: {target}"

    if name == "asset_missing":
        path = data.get("path") or "<unknown>"
        return f"Skipped missing image: {path}"

    if name == "upload_complete":
        url = data.get("url") or "<unknown>"
        return f"Uploaded archive: {url}"

    return None


__all__ = [
    "DiagnosticEmitter",
    "NullEmitter",
    "emit_status",
    "ensure_emitter",
    "format_event_message",
]
