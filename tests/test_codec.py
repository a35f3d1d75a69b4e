from __future__ import annotations

from xml.etree import ElementTree as ET

import pytest

from hkanno.classes import (
    ClassMap,
    HkaAnimation,
    HkaAnnotationTrack,
    HkaAnnotationTrackAnnotation,
    HkaQuantizedAnimation,
    HkaSplineCompressedAnimation,
    HkObject,
)
from hkanno.codec import OutFormat, XmlPackfileCodec
from hkanno.errors import CodecError, InvalidOutputFormatError

from conftest import ROOT_CONTAINER, animation_object


@pytest.mark.parametrize("value,expected", [("xml", OutFormat.XML), ("AMD64", OutFormat.AMD64), ("Win32", OutFormat.WIN32)])
def test_out_format_is_case_insensitive(value, expected):
    assert OutFormat.from_str(value) is expected


@pytest.mark.parametrize("value", ["json", " xml", "XML ", "", "win64"])
def test_out_format_rejects_unknown(value):
    with pytest.raises(InvalidOutputFormatError) as info:
        OutFormat.from_str(value)
    assert f"Unsupported output format: {value}." in str(info.value)


def test_deserialize_spline(write_packfile):
    path = write_packfile()
    with open(path, "rb") as f:
        class_map = XmlPackfileCodec().deserialize(f.read(), path)

    assert list(class_map) == [0x10, 8]
    assert class_map.header["toplevelobject"] == "#0008"
    spline = class_map[0x10]
    assert isinstance(spline, HkaSplineCompressedAnimation)
    assert spline.num_frames == 46
    assert spline.parent.duration == 1.5
    first, second = spline.parent.annotation_tracks
    assert first.track_name == "PairedRoot"
    assert [a.text for a in first.annotations] == ["MCO_DodgeOpen", None]
    assert second.track_name is None
    assert second.annotations == []
    assert isinstance(class_map[8], HkObject)
    assert class_map[8].class_name == "hkRootLevelContainer"


def test_deserialize_nests_fields_under_parent(write_packfile):
    path = write_packfile(class_name="hkaQuantizedAnimation")
    with open(path, "rb") as f:
        class_map = XmlPackfileCodec().deserialize(f.read(), path)
    anim = class_map[0x10]
    assert isinstance(anim, HkaQuantizedAnimation)
    assert anim.parent.duration == 1.5
    assert len(anim.parent.annotation_tracks) == 2


def test_serialize_keeps_untouched_params(write_packfile):
    path = write_packfile()
    codec = XmlPackfileCodec()
    with open(path, "rb") as f:
        class_map = codec.deserialize(f.read(), path)
    class_map[0x10].parent.annotation_tracks = [
        HkaAnnotationTrack("Edited", [HkaAnnotationTrackAnnotation(0.2, "A"), HkaAnnotationTrackAnnotation(0.3, None)])
    ]

    data = codec.serialize(path, OutFormat.XML, class_map)
    assert data.startswith(b"<?xml")
    root = ET.fromstring(data)
    spline = root.find("hksection/hkobject[@name='#0016']")
    params = [p.get("name") for p in spline.findall("hkparam")]
    assert params == [
        "type",
        "duration",
        "numberOfTransformTracks",
        "extractedMotion",
        "annotationTracks",
        "numFrames",
        "numBlocks",
    ]
    assert spline.find("hkparam[@name='duration']").text == "1.500000"
    tracks = spline.find("hkparam[@name='annotationTracks']")
    assert tracks.get("numelements") == "1"
    texts = [p.text for p in tracks.iter("hkparam") if p.get("name") == "text"]
    assert texts == ["A", "␀"]
    assert b"&#9216;" in data
    assert root.find("hksection/hkobject[@name='#0008']/hkparam[@name='namedVariants']") is not None


def test_serialize_then_deserialize_keeps_tracks(write_packfile):
    path = write_packfile()
    codec = XmlPackfileCodec()
    with open(path, "rb") as f:
        original = codec.deserialize(f.read(), path)
    again = codec.deserialize(codec.serialize(path, OutFormat.XML, original), path)
    assert again[0x10].parent.annotation_tracks == original[0x10].parent.annotation_tracks
    assert again[0x10].num_frames == 46


def test_serialize_objects_built_in_memory():
    class_map = ClassMap(header={"classversion": "8"})
    class_map[1] = HkaAnimation(ptr=1, duration=2.0, annotation_tracks=[HkaAnnotationTrack("T", [])])
    class_map[2] = HkaSplineCompressedAnimation(ptr=2, parent=HkaAnimation(ptr=2, duration=1.0), num_frames=31)

    data = XmlPackfileCodec().serialize("out.xml", OutFormat.XML, class_map)
    root = ET.fromstring(data)
    objects = root.findall("hksection/hkobject")
    assert [o.get("class") for o in objects] == ["hkaAnimation", "hkaSplineCompressedAnimation"]
    assert objects[1].find("hkparam[@name='numFrames']").text == "31"


def test_binary_output_is_not_supported_by_xml_codec():
    with pytest.raises(CodecError):
        XmlPackfileCodec().serialize("anim.hkx", OutFormat.AMD64, ClassMap())


@pytest.mark.parametrize(
    "data,path",
    [
        (b"<hkpackfile></hkpackfile>", "anim.txt"),
        (b"<hkpackfile></hkpackfile>", "anim"),
        (b"\x57\xe0\xe0\x57\x10\xc0\xc0\x10", "anim.hkx"),
        (b"<hkpackfile><broken>", "anim.xml"),
        (b"<other/>", "anim.xml"),
    ],
)
def test_deserialize_rejects_bad_input(data, path):
    with pytest.raises(CodecError):
        XmlPackfileCodec().deserialize(data, path)


def test_serialize_keeps_sections_and_foreign_elements(tmp_path):
    xml = (
        '<?xml version="1.0" encoding="ascii"?>\n'
        '<hkpackfile classversion="8" toplevelobject="#0008">\n'
        '\t<hksection name="__types__">\n'
        '\t\t<hkclass name="hkaAnimation" version="3"></hkclass>\n'
        "\t</hksection>\n"
        '\t<hksection name="__data__">\n'
        + animation_object(0x10)
        + '\t\t<hkextra id="1">keep</hkextra>\n'
        + ROOT_CONTAINER
        + "\t</hksection>\n"
        '\t<hksection name="__tail__"></hksection>\n'
        "</hkpackfile>\n"
    )
    path = str(tmp_path / "sections.xml")
    codec = XmlPackfileCodec()
    class_map = codec.deserialize(xml.encode("ascii"), path)
    class_map[99] = HkObject(ptr=99, class_name="hkMemoryResourceContainer")

    root = ET.fromstring(codec.serialize(path, OutFormat.XML, class_map))

    sections = root.findall("hksection")
    assert [s.get("name") for s in sections] == ["__types__", "__data__", "__tail__"]
    assert sections[0].find("hkclass").get("version") == "3"
    assert [(c.tag, c.get("name")) for c in sections[1]] == [
        ("hkobject", "#0016"),
        ("hkextra", None),
        ("hkobject", "#0008"),
        ("hkobject", "#0099"),
    ]
    assert sections[1].find("hkextra").text == "keep"
    assert len(sections[2]) == 0
