"""Run pandoc on a sanitised copy of the note."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path

from .exceptions import ConversionError, ConverterOutputMissingError, ProcessExecutionError
from .process import run_command
from .sanitizer import sanitize_markdown


logger = logging.getLogger(__name__)

MARKDOWN_FORMAT = "markdown+lists_without_preceding_blankline"
CONVERTER_MAX_OUTPUT = 64 * 1024 * 1024


def sanitized_path_for(source: Path) -> Path:
    """Return the hidden sibling file that holds the sanitised note."""
    return source.with_name(f".{source.stem}.md2overleaf.sanitized.md")


def build_pandoc_command(
    input_path: Path,
    output_path: Path,
    *,
    filter_path: Path,
    executable: str = "pandoc",
    language: str = "he",
    direction: str = "rtl",
) -> list[str]:
    """Return the pandoc invocation turning ``input_path`` into LaTeX."""
    return [
        executable,
        str(input_path),
        f"--lua-filter={filter_path}",
        f"--from={MARKDOWN_FORMAT}",
        f"--metadata=lang:{language}",
        f"--metadata=dir:{direction}",
        "-o",
        str(output_path),
    ]


def convert_markdown(
    source: Path,
    output: Path,
    *,
    source_root: Path,
    filter_path: Path,
    env: Mapping[str, str] | None = None,
    executable: str = "pandoc",
    language: str = "he",
    direction: str = "rtl",
    max_output: int = CONVERTER_MAX_OUTPUT,
) -> None:
    """Sanitise ``source`` and convert it to LaTeX at ``output``.

    The sanitised text lives in a hidden file next to the note for the
    duration of the pandoc run only; it is removed whatever the outcome.
    """
    try:
        original = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConversionError(f"Unable to read note '{source}': {exc}") from exc

    sanitized = sanitized_path_for(source)
    try:
        sanitized.write_text(sanitize_markdown(original), encoding="utf-8")
        command = build_pandoc_command(
            sanitized,
            output,
            filter_path=filter_path,
            executable=executable,
            language=language,
            direction=direction,
        )
        run_command(
            command,
            cwd=source_root,
            env=env,
            description="pandoc",
            max_output=max_output,
        )
    except ProcessExecutionError as exc:
        raise ConversionError(str(exc)) from exc
    except OSError as exc:
        raise ConversionError(f"Unable to prepare '{source}' for pandoc: {exc}") from exc
    finally:
        try:
            sanitized.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Unable to remove sanitised copy %s: %s", sanitized, exc)


def ensure_converter_output(path: Path) -> Path:
    """Fail when pandoc reported success without producing ``path``."""
    if not path.is_file():
        raise ConverterOutputMissingError(f"pandoc did not produce the LaTeX file '{path}'")
    return path


__all__ = [
    "MARKDOWN_FORMAT",
    "build_pandoc_command",
    "convert_markdown",
    "ensure_converter_output",
    "sanitized_path_for",
]
