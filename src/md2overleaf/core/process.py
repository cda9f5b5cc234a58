"""Subprocess helpers shared by the pandoc, tldraw and clipboard adapters."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import os
from pathlib import Path
import subprocess

from .exceptions import ProcessExecutionError


logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT = 32 * 1024 * 1024


def build_shell_env(
    search_path: str,
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return a copy of the process environment with ``PATH`` overridden."""
    env = dict(os.environ)
    env["PATH"] = search_path
    if extra:
        env.update(extra)
    return env


def run_command(
    command: Sequence[str],
    *,
    cwd: Path,
    description: str,
    env: Mapping[str, str] | None = None,
    max_output: int = DEFAULT_MAX_OUTPUT,
    input_text: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Execute an external command, raising a process error on failure.

    Output is captured as text. When the combined stdout and stderr exceed
    ``max_output`` characters the run counts as failed.
    """
    invoked = [str(part) for part in command]
    logger.debug("running %s: %s", description, " ".join(invoked))
    try:
        result = subprocess.run(
            invoked,
            check=False,
            capture_output=True,
            text=True,
            errors="replace",
            cwd=cwd,
            env=dict(env) if env is not None else None,
            input=input_text,
        )
    except FileNotFoundError as exc:
        raise ProcessExecutionError(
            f"{description} executable '{invoked[0]}' could not be located."
        ) from exc
    except OSError as exc:
        raise ProcessExecutionError(f"Failed to execute {description}: {exc}") from exc

    captured = len(result.stdout or "") + len(result.stderr or "")
    if captured > max_output:
        raise ProcessExecutionError(
            f"{description} produced more than {max_output} characters of output"
        )

    if result.returncode != 0:
        detail = (result.stderr or "").strip() or (result.stdout or "").strip()
        message = f"{description} exited with status {result.returncode}"
        if detail:
            message = f"{message}: {detail}"
        raise ProcessExecutionError(message)

    return result


__all__ = ["DEFAULT_MAX_OUTPUT", "build_shell_env", "run_command"]
