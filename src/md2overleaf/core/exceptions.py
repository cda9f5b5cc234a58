"""Custom exception hierarchy for the export pipeline."""

from __future__ import annotations


class Md2OverleafError(RuntimeError):
    """Base exception for export pipeline failures."""


class ProcessExecutionError(Md2OverleafError):
    """Raised when an external command fails to execute properly."""


class ConversionError(Md2OverleafError):
    """Raised when pandoc fails to turn the note into LaTeX."""


class ConverterOutputMissingError(ConversionError):
    """Raised when pandoc exits cleanly but the LaTeX file is missing."""


class DiagramExportError(Md2OverleafError):
    """Raised internally when a tldraw diagram cannot be rasterised."""


class StageBuildError(Md2OverleafError):
    """Raised when the staging tree cannot be assembled."""


class PackagingError(Md2OverleafError):
    """Raised when the staging tree cannot be archived."""


class UploadError(Md2OverleafError):
    """Raised when the upload host does not answer with a URL."""

    def __init__(self, message: str, *, response: str | None = None) -> None:
        super().__init__(message)
        self.response = response


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ConversionError",
    "ConverterOutputMissingError",
    "DiagramExportError",
    "Md2OverleafError",
    "PackagingError",
    "ProcessExecutionError",
    "StageBuildError",
    "UploadError",
    "exception_hint",
    "exception_messages",
]
