from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import ViewReleasedError

# Havok's marker for a null string pointer.
NULL_STR = "␀"


def to_f32(value: float) -> float:
    """Round a Python float to the nearest IEEE-754 single precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def nullable(value: str) -> Optional[str]:
    return None if value == NULL_STR else value


@dataclass(frozen=True)
class Annotation:
    time: float
    text: Optional[str]


@dataclass(frozen=True)
class AnnotationTrack:
    track_name: Optional[str]
    annotations: Tuple[Annotation, ...] = ()


@dataclass(frozen=True)
class Hkanno:
    """
    One animation's annotation data.

    ``num_original_frames`` and ``duration`` describe the asset and are only
    ever displayed; writing back into a class map uses the tracks alone.
    """

    ptr: int = 0
    num_original_frames: int = 0
    duration: float = 0.0
    annotation_tracks: Tuple[AnnotationTrack, ...] = ()


# (start, end) offsets into the parsed text; None encodes the null marker.
Span = Optional[Tuple[int, int]]


@dataclass(frozen=True)
class _AnnotationSpan:
    time: float
    text: Span


@dataclass(frozen=True)
class _TrackSpan:
    track_name: Span
    annotations: Tuple[_AnnotationSpan, ...]


class HkannoView:
    """
    Hkanno that references the text it was parsed from instead of copying it.

    Strings are sliced out of ``source`` only when accessed. Once released the
    view refuses every access; use ``to_owned`` to keep the data around.
    """

    def __init__(self, source: str, tracks: List[_TrackSpan]) -> None:
        self._source: Optional[str] = source
        self._tracks = tuple(tracks)

    ptr = 0
    num_original_frames = 0
    duration = 0.0

    @property
    def released(self) -> bool:
        return self._source is None

    def release(self) -> None:
        self._source = None

    def _slice(self, span: Span) -> Optional[str]:
        if self._source is None:
            raise ViewReleasedError()
        if span is None:
            return None
        start, end = span
        return self._source[start:end]

    def __len__(self) -> int:
        if self._source is None:
            raise ViewReleasedError()
        return len(self._tracks)

    @property
    def annotation_tracks(self) -> Tuple[AnnotationTrack, ...]:
        return tuple(
            AnnotationTrack(
                track_name=self._slice(track.track_name),
                annotations=tuple(
                    Annotation(time=ann.time, text=self._slice(ann.text)) for ann in track.annotations
                ),
            )
            for track in self._tracks
        )

    def to_owned(self) -> Hkanno:
        return Hkanno(
            ptr=self.ptr,
            num_original_frames=self.num_original_frames,
            duration=self.duration,
            annotation_tracks=self.annotation_tracks,
        )
