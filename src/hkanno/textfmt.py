"""
Tooling for hand-edited hkanno text: a line-wise formatter and a linter
that reports every bad line at once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from .models import to_f32
from .parser import ANNOTATION_RE, BLANK_RE, TRACK_NAME_RE, invalid_line_message, iter_lines, orphan_message

_COMMENT_RE = re.compile(r"[ \t]*#[ \t]*(?P<comment>.*?)[ \t]*$")


@dataclass(frozen=True)
class Diagnostic:
    line: int
    severity: str  # "error" | "warning"
    message: str


def _format_line(line: str) -> str:
    if not line.strip(" \t"):
        return ""
    match = _COMMENT_RE.match(line)
    if match:
        return f"# {match['comment']}" if match["comment"] else "#"
    match = TRACK_NAME_RE.match(line)
    if match:
        return f"trackName: {match['name']}"
    match = ANNOTATION_RE.match(line)
    if match:
        return f"{to_f32(float(match['time'])):.6f} {match['text']}"
    return line


def format_hkanno_text(text: str) -> str:
    """
    Normalize spacing and number formatting line by line.

    Times get six decimals, the space between time and text collapses to one,
    and ``trackName`` is spelled canonically. Annotation text is kept as is,
    trailing whitespace included. Lines that do not parse are kept as they are
    so nothing the user typed is lost.
    """
    lines = [_format_line(text[start:end]) for _line_number, start, end in iter_lines(text)]
    formatted = "\n".join(lines)
    if text.endswith("\n"):
        formatted += "\n"
    return formatted


def lint_hkanno_text(text: str) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    seen_track = False
    for line_number, start, end in iter_lines(text):
        if BLANK_RE.match(text, start, end):
            continue
        if TRACK_NAME_RE.match(text, start, end):
            seen_track = True
            continue

        match = ANNOTATION_RE.match(text, start, end)
        if not match:
            diagnostics.append(Diagnostic(line_number, "error", invalid_line_message(text, line_number, start, end)))
            continue
        if not seen_track:
            diagnostics.append(Diagnostic(line_number, "error", orphan_message(text, line_number, start, end)))
        if not match["text"].strip():
            diagnostics.append(Diagnostic(line_number, "warning", f"line {line_number}: text annotation is missing"))
    return diagnostics
