from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Optional, Tuple, Type

from .classes import (
    ClassMap,
    HkaAnimation,
    HkaAnimationClass,
    HkaAnnotationTrack,
    HkaAnnotationTrackAnnotation,
    HkaDeltaCompressedAnimation,
    HkaInterleavedUncompressedAnimation,
    HkaQuantizedAnimation,
    HkaSplineCompressedAnimation,
    HkaWaveletCompressedAnimation,
)
from .errors import MissingAnimationClassError, MultipleAnimationClassesError
from .models import Annotation, AnnotationTrack, Hkanno, to_f32

logger = logging.getLogger(__name__)

# Only hkaSplineCompressedAnimation stores a frame count; the rest are estimated.
FPS = 30.0


class AnimationFields:
    """Uniform access to duration, frame count and tracks of any animation variant."""

    def __init__(self, base: HkaAnimation, owner: HkaAnimationClass, num_frames_attr: Optional[str] = None) -> None:
        self._base = base
        self._owner = owner
        self._num_frames_attr = num_frames_attr

    @property
    def duration(self) -> float:
        return self._base.duration

    @property
    def num_frames(self) -> Optional[int]:
        if self._num_frames_attr is None:
            return None
        return getattr(self._owner, self._num_frames_attr)

    @property
    def annotation_tracks(self) -> List[HkaAnnotationTrack]:
        return self._base.annotation_tracks

    @annotation_tracks.setter
    def annotation_tracks(self, tracks: List[HkaAnnotationTrack]) -> None:
        self._base.annotation_tracks = tracks


def _direct(cls: HkaAnimation) -> AnimationFields:
    return AnimationFields(cls, cls)


def _nested(cls) -> AnimationFields:
    return AnimationFields(cls.parent, cls)


def _nested_with_frames(cls: HkaSplineCompressedAnimation) -> AnimationFields:
    return AnimationFields(cls.parent, cls, "num_frames")


_ADAPTERS: Dict[Type, Callable[..., AnimationFields]] = {
    HkaAnimation: _direct,
    HkaDeltaCompressedAnimation: _nested,
    HkaInterleavedUncompressedAnimation: _nested,
    HkaQuantizedAnimation: _nested,
    HkaSplineCompressedAnimation: _nested_with_frames,
    HkaWaveletCompressedAnimation: _nested,
}


def is_hka_animation_derived(cls: object) -> bool:
    return type(cls) in _ADAPTERS


def animation_fields(cls: HkaAnimationClass) -> AnimationFields:
    return _ADAPTERS[type(cls)](cls)


def find_animation(class_map: ClassMap) -> Tuple[int, HkaAnimationClass]:
    """Return the single animation object of ``class_map`` with its index."""
    animations = [(ptr, cls) for ptr, cls in class_map.items() if is_hka_animation_derived(cls)]
    if not animations:
        raise MissingAnimationClassError()
    if len(animations) > 1:
        raise MultipleAnimationClassesError(len(animations))
    return animations[0]


def _estimate_frames(fields: AnimationFields) -> int:
    num_frames = fields.num_frames
    if num_frames is not None:
        return int(num_frames)
    # Frame math happens in single precision, like the stored duration.
    estimated = to_f32(fields.duration * FPS)
    if math.isnan(estimated):
        return 0
    return int(max(-(2**31), min(2**31 - 1, estimated)))


def parse_hkanno_borrowed(class_map: ClassMap) -> Hkanno:
    """Extract the annotation data of the one animation in ``class_map``."""
    ptr, animation = find_animation(class_map)
    fields = animation_fields(animation)
    tracks = tuple(
        AnnotationTrack(
            track_name=track.track_name,
            annotations=tuple(Annotation(time=ann.time, text=ann.text) for ann in track.annotations),
        )
        for track in fields.annotation_tracks
    )
    logger.debug("extracted %d annotation track(s) from %s #%04d", len(tracks), animation.class_name, ptr)
    return Hkanno(
        ptr=ptr,
        num_original_frames=_estimate_frames(fields),
        duration=fields.duration,
        annotation_tracks=tracks,
    )


def write_to_class_map(hkanno: Hkanno, class_map: ClassMap) -> None:
    """
    Replace the animation's annotation tracks with those of ``hkanno``.

    Duration and frame count are left alone: text edited by hand may carry
    placeholder values there, so only the tracks are trusted.
    """
    ptr, animation = find_animation(class_map)
    fields = animation_fields(animation)
    fields.annotation_tracks = [
        HkaAnnotationTrack(
            track_name=track.track_name,
            annotations=[HkaAnnotationTrackAnnotation(time=ann.time, text=ann.text) for ann in track.annotations],
        )
        for track in hkanno.annotation_tracks
    ]
    logger.debug(
        "wrote %d annotation track(s) into %s #%04d", len(fields.annotation_tracks), animation.class_name, ptr
    )
