"""Markdown clean-up applied before the note is handed to pandoc."""

from __future__ import annotations

import re


HEADING_PATTERN = re.compile(r"^\s*#{1,6}\s+\S")
DISPLAY_ALIGN_PATTERN = re.compile(
    r"\$\$\s*\\begin\{(align\*?|gather\*?|multline\*?)\}(.*?)\\end\{\1\}\s*\$\$",
    re.DOTALL,
)
_LINE_BREAK = re.compile(r"\r?\n")


def _is_blank(line: str) -> bool:
    return not line.strip()


def normalise_heading_spacing(text: str) -> str:
    """Surround every ATX heading with exactly one blank line.

    Pandoc only recognises a heading when a blank line precedes it. Blank
    runs touching a heading collapse to one line, a heading on the first
    line gets no leading blank, and consecutive headings end up separated
    by a single blank line.
    """
    output: list[str] = []
    # 0: ordinary line, 1: right after a heading, 2: after a heading's blank
    state = 0

    for line in _LINE_BREAK.split(text):
        if HEADING_PATTERN.match(line):
            while len(output) > 1 and _is_blank(output[-1]) and _is_blank(output[-2]):
                output.pop()
            if output and not _is_blank(output[-1]):
                output.append("")
            output.append(line)
            state = 1
            continue

        if _is_blank(line):
            if state == 2:
                continue
            output.append(line)
            if state == 1:
                state = 2
            continue

        if state == 1:
            output.append("")
        output.append(line)
        state = 0

    return "\n".join(output)


def unwrap_display_alignments(text: str) -> str:
    """Drop ``$$`` around alignment environments, which already imply math mode."""

    def _replace(match: re.Match[str]) -> str:
        env, body = match.group(1), match.group(2)
        return f"\\begin{{{env}}}{body}\\end{{{env}}}"

    return DISPLAY_ALIGN_PATTERN.sub(_replace, text)


def sanitize_markdown(text: str) -> str:
    """Return ``text`` rewritten so pandoc parses headings and math reliably."""
    return unwrap_display_alignments(normalise_heading_spacing(text))


__all__ = [
    "DISPLAY_ALIGN_PATTERN",
    "HEADING_PATTERN",
    "normalise_heading_spacing",
    "sanitize_markdown",
    "unwrap_display_alignments",
]
