"""System clipboard access through the platform's command-line tools."""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import sys

from md2overleaf.core.exceptions import Md2OverleafError, ProcessExecutionError
from md2overleaf.core.process import run_command


class ClipboardUnavailableError(Md2OverleafError):
    """Raised when no clipboard tool can be found or the copy fails."""


def clipboard_command() -> list[str] | None:
    """Return the command that writes stdin to the clipboard, if any."""
    if sys.platform == "darwin":
        return ["pbcopy"]
    if os.name == "nt":
        return [
            "powershell",
            "-NoProfile",
            "-Command",
            "Set-Clipboard -Value ([Console]::In.ReadToEnd())",
        ]
    if shutil.which("wl-copy"):
        return ["wl-copy"]
    if shutil.which("xclip"):
        return ["xclip", "-selection", "clipboard"]
    if shutil.which("xsel"):
        return ["xsel", "--clipboard", "--input"]
    return None


def copy_to_clipboard(text: str) -> None:
    """Place ``text`` on the system clipboard."""
    command = clipboard_command()
    if command is None:
        raise ClipboardUnavailableError(
            "No clipboard tool found (install wl-clipboard, xclip or xsel)."
        )
    try:
        run_command(command, cwd=Path.cwd(), description="clipboard", input_text=text)
    except ProcessExecutionError as exc:
        raise ClipboardUnavailableError(str(exc)) from exc


__all__ = ["ClipboardUnavailableError", "clipboard_command", "copy_to_clipboard"]
