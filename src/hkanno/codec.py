"""
Packfile codec boundary.

The editor only needs two calls from a codec: ``deserialize`` bytes into a
ClassMap and ``serialize`` a ClassMap back to bytes. ``XmlPackfileCodec``
handles Havok XML packfiles; binary packfiles need a codec that implements
the same protocol and is passed to the editor functions.
"""

from __future__ import annotations

import copy
import os
from enum import Enum
from typing import Dict, List, Optional, Protocol
from xml.etree import ElementTree as ET

from .classes import (
    ANIMATION_CLASSES,
    ClassMap,
    HkaAnimation,
    HkaAnnotationTrack,
    HkaAnnotationTrackAnnotation,
    HkaSplineCompressedAnimation,
    HkObject,
    PackfileSection,
    format_ptr,
    parse_ptr,
)
from .errors import CodecError, InvalidOutputFormatError
from .models import NULL_STR, nullable, to_f32


SUPPORTED_EXTENSIONS = (".hkx", ".xml")
DATA_SECTION = "__data__"


class OutFormat(str, Enum):
    AMD64 = "amd64"
    WIN32 = "win32"
    XML = "xml"

    @classmethod
    def from_str(cls, value: str) -> "OutFormat":
        try:
            return cls(value.lower())
        except ValueError:
            raise InvalidOutputFormatError(value) from None

    @property
    def is_binary(self) -> bool:
        return self is not OutFormat.XML


class HkxCodec(Protocol):
    def deserialize(self, data: bytes, path: str) -> ClassMap:
        ...

    def serialize(self, path: str, format: OutFormat, class_map: ClassMap) -> bytes:
        ...


def _params(element: ET.Element) -> Dict[str, ET.Element]:
    return {param.get("name", ""): param for param in element.findall("hkparam")}


def _require(params: Dict[str, ET.Element], name: str, class_name: str) -> ET.Element:
    try:
        return params[name]
    except KeyError:
        raise CodecError(f"`{class_name}` is missing the `{name}` param") from None


def _read_float(param: ET.Element) -> float:
    try:
        return to_f32(float((param.text or "").strip()))
    except ValueError as exc:
        raise CodecError(f"invalid float in `{param.get('name')}`: {param.text!r}") from exc


def _read_string(param: Optional[ET.Element]) -> Optional[str]:
    if param is None:
        return None
    return nullable(param.text or "")


def _read_tracks(param: Optional[ET.Element]) -> List[HkaAnnotationTrack]:
    if param is None:
        return []
    tracks: List[HkaAnnotationTrack] = []
    for track_el in param.findall("hkobject"):
        track_params = _params(track_el)
        annotations: List[HkaAnnotationTrackAnnotation] = []
        annotations_param = track_params.get("annotations")
        if annotations_param is not None:
            for ann_el in annotations_param.findall("hkobject"):
                ann_params = _params(ann_el)
                annotations.append(
                    HkaAnnotationTrackAnnotation(
                        time=_read_float(_require(ann_params, "time", "hkaAnnotationTrackAnnotation")),
                        text=_read_string(ann_params.get("text")),
                    )
                )
        tracks.append(
            HkaAnnotationTrack(track_name=_read_string(track_params.get("trackName")), annotations=annotations)
        )
    return tracks


def _read_object(element: ET.Element):
    name = element.get("name", "")
    class_name = element.get("class", "")
    try:
        ptr = parse_ptr(name)
    except ValueError as exc:
        raise CodecError(str(exc)) from exc

    cls = ANIMATION_CLASSES.get(class_name)
    if cls is None:
        return HkObject(ptr=ptr, class_name=class_name, element=element)

    params = _params(element)
    base = HkaAnimation(
        ptr=ptr,
        duration=_read_float(_require(params, "duration", class_name)),
        annotation_tracks=_read_tracks(params.get("annotationTracks")),
    )
    if cls is HkaAnimation:
        base.element = element
        return base
    if cls is HkaSplineCompressedAnimation:
        num_frames = _require(params, "numFrames", class_name)
        try:
            frames = int((num_frames.text or "").strip())
        except ValueError as exc:
            raise CodecError(f"invalid `numFrames` in `{class_name}`: {num_frames.text!r}") from exc
        return cls(ptr=ptr, parent=base, num_frames=frames, element=element)
    return cls(ptr=ptr, parent=base, element=element)


def _set_param(element: ET.Element, name: str, new: ET.Element) -> None:
    for index, param in enumerate(element):
        if param.tag == "hkparam" and param.get("name") == name:
            element[index] = new
            return
    element.append(new)


def _text_param(name: str, text: str) -> ET.Element:
    param = ET.Element("hkparam", {"name": name})
    param.text = text
    return param


def _or_null(value: Optional[str]) -> str:
    return NULL_STR if value is None else value


def _tracks_param(tracks: List[HkaAnnotationTrack]) -> ET.Element:
    param = ET.Element("hkparam", {"name": "annotationTracks", "numelements": str(len(tracks))})
    for track in tracks:
        track_el = ET.SubElement(param, "hkobject")
        track_el.append(_text_param("trackName", _or_null(track.track_name)))
        anns = ET.SubElement(
            track_el, "hkparam", {"name": "annotations", "numelements": str(len(track.annotations))}
        )
        for ann in track.annotations:
            ann_el = ET.SubElement(anns, "hkobject")
            ann_el.append(_text_param("time", f"{ann.time:.6f}"))
            ann_el.append(_text_param("text", _or_null(ann.text)))
    return param


def _write_object(ptr: int, obj) -> ET.Element:
    if obj.element is not None:
        element = copy.deepcopy(obj.element)
    else:
        element = ET.Element("hkobject", {"name": format_ptr(ptr), "class": obj.class_name})
    if isinstance(obj, HkObject):
        return element

    base = obj if isinstance(obj, HkaAnimation) else obj.parent
    if obj.element is None:
        element.append(_text_param("duration", f"{base.duration:.6f}"))
        if isinstance(obj, HkaSplineCompressedAnimation):
            element.append(_text_param("numFrames", str(obj.num_frames)))
    # Only the tracks are ever edited; other params keep their original text.
    _set_param(element, "annotationTracks", _tracks_param(base.annotation_tracks))
    return element


class XmlPackfileCodec:
    """Reads and writes Havok XML packfiles (``hkpackfile``/``hksection``/``hkobject``)."""

    def deserialize(self, data: bytes, path: str) -> ClassMap:
        ext = os.path.splitext(path)[1].lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise CodecError(f"unsupported extension `{ext or '<none>'}`: expected `hkx` or `xml`")
        if not data.lstrip(b"\xef\xbb\xbf \t\r\n").startswith(b"<"):
            raise CodecError("binary hkx packfiles are not supported by the XML codec")

        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise CodecError(f"invalid XML: {exc}") from exc
        if root.tag != "hkpackfile":
            raise CodecError(f"expected root element `hkpackfile`, got `{root.tag}`")

        class_map = ClassMap(header=dict(root.attrib))
        for section_el in root.findall("hksection"):
            section = PackfileSection(attrib=dict(section_el.attrib))
            for element in section_el:
                if element.tag == "hkobject":
                    obj = _read_object(element)
                    class_map[obj.ptr] = obj
                    section.entries.append(obj.ptr)
                else:
                    section.entries.append(element)
            class_map.sections.append(section)
        return class_map

    def serialize(self, path: str, format: OutFormat, class_map: ClassMap) -> bytes:
        if format.is_binary:
            raise CodecError(f"`{format.value}` serialization needs a binary packfile codec")

        root = ET.Element("hkpackfile", class_map.header)
        sections = class_map.sections or [PackfileSection(attrib={"name": DATA_SECTION})]
        written = set()
        data_el = None
        for section in sections:
            section_el = ET.SubElement(root, "hksection", section.attrib)
            if data_el is None and section.name == DATA_SECTION:
                data_el = section_el
            for entry in section.entries:
                if isinstance(entry, ET.Element):
                    section_el.append(copy.deepcopy(entry))
                elif entry in class_map and entry not in written:
                    section_el.append(_write_object(entry, class_map[entry]))
                    written.add(entry)

        # Objects added after reading go to `__data__`, or to the last section if there is none.
        if data_el is None:
            data_el = section_el
        for ptr, obj in class_map.items():
            if ptr not in written:
                data_el.append(_write_object(ptr, obj))
        ET.indent(root, space="\t")
        return ET.tostring(root, encoding="ascii", xml_declaration=True, short_empty_elements=False) + b"\n"
