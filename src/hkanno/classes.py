"""
In-memory object graph of a Havok packfile.

Only the classes the annotation editor cares about are modelled: the six
``hkaAnimation`` variants and their annotation tracks. Everything else is an
opaque ``HkObject`` that the codec writes back untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from xml.etree import ElementTree as ET


@dataclass
class HkaAnnotationTrackAnnotation:
    time: float = 0.0
    text: Optional[str] = None


@dataclass
class HkaAnnotationTrack:
    track_name: Optional[str] = None
    annotations: List[HkaAnnotationTrackAnnotation] = field(default_factory=list)


@dataclass
class HkaAnimation:
    """Base animation; the other variants embed one of these as ``parent``."""

    ptr: int = 0
    duration: float = 0.0
    annotation_tracks: List[HkaAnnotationTrack] = field(default_factory=list)
    element: Optional[ET.Element] = field(default=None, repr=False, compare=False)

    class_name = "hkaAnimation"


@dataclass
class _DerivedAnimation:
    ptr: int = 0
    parent: HkaAnimation = field(default_factory=HkaAnimation)
    element: Optional[ET.Element] = field(default=None, repr=False, compare=False)


@dataclass
class HkaDeltaCompressedAnimation(_DerivedAnimation):
    class_name = "hkaDeltaCompressedAnimation"


@dataclass
class HkaInterleavedUncompressedAnimation(_DerivedAnimation):
    class_name = "hkaInterleavedUncompressedAnimation"


@dataclass
class HkaQuantizedAnimation(_DerivedAnimation):
    class_name = "hkaQuantizedAnimation"


@dataclass
class HkaWaveletCompressedAnimation(_DerivedAnimation):
    class_name = "hkaWaveletCompressedAnimation"


@dataclass
class HkaSplineCompressedAnimation(_DerivedAnimation):
    num_frames: int = 0

    class_name = "hkaSplineCompressedAnimation"


@dataclass
class HkObject:
    """Any class the editor does not interpret."""

    ptr: int = 0
    class_name: str = ""
    element: Optional[ET.Element] = field(default=None, repr=False, compare=False)


HkaAnimationClass = Union[
    HkaAnimation,
    HkaDeltaCompressedAnimation,
    HkaInterleavedUncompressedAnimation,
    HkaQuantizedAnimation,
    HkaSplineCompressedAnimation,
    HkaWaveletCompressedAnimation,
]

ANIMATION_CLASSES = {
    cls.class_name: cls
    for cls in (
        HkaAnimation,
        HkaDeltaCompressedAnimation,
        HkaInterleavedUncompressedAnimation,
        HkaQuantizedAnimation,
        HkaSplineCompressedAnimation,
        HkaWaveletCompressedAnimation,
    )
}


@dataclass
class PackfileSection:
    """One ``hksection``: object ptrs, or elements that are not objects kept as read."""

    attrib: Dict[str, str] = field(default_factory=dict)
    entries: List[Union[int, ET.Element]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.attrib.get("name", "")


class ClassMap(Dict[int, Any]):
    """Objects of one packfile keyed by their ``#NNNN`` index, in file order."""

    def __init__(
        self,
        *args: Any,
        header: Optional[Dict[str, str]] = None,
        sections: Optional[List[PackfileSection]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.header: Dict[str, str] = dict(header or {})
        self.sections: List[PackfileSection] = list(sections or [])


def format_ptr(ptr: int) -> str:
    return f"#{ptr:04d}"


def parse_ptr(name: str) -> int:
    if not name.startswith("#"):
        raise ValueError(f"invalid object name: {name}")
    return int(name[1:])
