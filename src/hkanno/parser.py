from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from .errors import HkannoParseError
from .models import NULL_STR, Hkanno, HkannoView, Span, _AnnotationSpan, _TrackSpan, to_f32

FLOAT_PATTERN = r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)"

BLANK_RE = re.compile(r"[ \t]*(?:#.*)?$")
TRACK_NAME_RE = re.compile(r"[ \t]*trackname[ \t]*:[ \t]*(?P<name>.*?)[ \t]*$", re.IGNORECASE)
ANNOTATION_RE = re.compile(
    rf"[ \t]*(?P<time>{FLOAT_PATTERN})[ \t]+(?P<text>.*)$",
    re.IGNORECASE,
)
_TOKEN_RE = re.compile(r"[ \t]*(?P<token>[^ \t]*)")
_FLOAT_RE = re.compile(FLOAT_PATTERN, re.IGNORECASE)


def iter_lines(text: str) -> Iterator[Tuple[int, int, int]]:
    """Yield ``(line_number, start, end)`` for each line, without its terminator."""
    pos = 0
    line_number = 0
    size = len(text)
    while pos < size:
        newline = text.find("\n", pos)
        if newline == -1:
            end = next_pos = size
        else:
            end = newline - 1 if newline > pos and text[newline - 1] == "\r" else newline
            next_pos = newline + 1
        line_number += 1
        yield line_number, pos, end
        pos = next_pos


def _span(text: str, start: int, end: int) -> Span:
    if text[start:end] == NULL_STR:
        return None
    return (start, end)


def invalid_line_message(text: str, line_number: int, start: int, end: int) -> str:
    token = _TOKEN_RE.match(text, start, end)["token"]
    if _FLOAT_RE.fullmatch(token):
        return f"line {line_number}: annotation at time `{token}` has no text (write `{NULL_STR}` for a null text)"
    return f"line {line_number}: expected `trackName:` or `<time> <text>`, got invalid float `{token}`"


def orphan_message(text: str, line_number: int, start: int, end: int) -> str:
    return f"line {line_number}: annotation `{text[start:end].strip()}` appears before any `trackName:` line"


def parse_hkanno_view(text: str) -> HkannoView:
    """
    Parse hkanno text into a view that borrows its strings from ``text``.

    Comment lines (including the ``# numOriginalFrames`` style headers) are
    skipped, so frame count and duration stay at zero.
    """
    tracks: List[Tuple[Span, List[_AnnotationSpan]]] = []
    current: Optional[List[_AnnotationSpan]] = None

    for line_number, start, end in iter_lines(text):
        if BLANK_RE.match(text, start, end):
            continue

        match = TRACK_NAME_RE.match(text, start, end)
        if match:
            current = []
            tracks.append((_span(text, *match.span("name")), current))
            continue

        match = ANNOTATION_RE.match(text, start, end)
        if not match:
            raise HkannoParseError(invalid_line_message(text, line_number, start, end))
        if current is None:
            raise HkannoParseError(orphan_message(text, line_number, start, end))
        current.append(
            _AnnotationSpan(
                time=to_f32(float(match["time"])),
                text=_span(text, *match.span("text")),
            )
        )

    return HkannoView(
        text,
        [_TrackSpan(track_name=name, annotations=tuple(annotations)) for name, annotations in tracks],
    )


def parse_hkanno_str(text: str) -> Hkanno:
    return parse_hkanno_view(text).to_owned()


@contextmanager
def borrow_hkanno(text: str) -> Iterator[HkannoView]:
    """Parse ``text`` and release the resulting view when the block exits."""
    view = parse_hkanno_view(text)
    try:
        yield view
    finally:
        view.release()
