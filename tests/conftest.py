from __future__ import annotations

from typing import Callable

import pytest

HEADER = '<?xml version="1.0" encoding="ascii"?>\n<hkpackfile classversion="8" contentsversion="hk_2010.2.0-r1" toplevelobject="#0008">\n\t<hksection name="__data__">\n'
FOOTER = "\t</hksection>\n</hkpackfile>\n"

ROOT_CONTAINER = """\t\t<hkobject name="#0008" class="hkRootLevelContainer" signature="0x2772c11e">
\t\t\t<hkparam name="namedVariants" numelements="1">
\t\t\t\t<hkobject>
\t\t\t\t\t<hkparam name="name">Merged Animation Container</hkparam>
\t\t\t\t\t<hkparam name="className">hkaAnimationContainer</hkparam>
\t\t\t\t\t<hkparam name="variant">#0009</hkparam>
\t\t\t\t</hkobject>
\t\t\t</hkparam>
\t\t</hkobject>
"""

TRACKS = """\t\t\t<hkparam name="annotationTracks" numelements="2">
\t\t\t\t<hkobject>
\t\t\t\t\t<hkparam name="trackName">PairedRoot</hkparam>
\t\t\t\t\t<hkparam name="annotations" numelements="2">
\t\t\t\t\t\t<hkobject>
\t\t\t\t\t\t\t<hkparam name="time">0.100000</hkparam>
\t\t\t\t\t\t\t<hkparam name="text">MCO_DodgeOpen</hkparam>
\t\t\t\t\t\t</hkobject>
\t\t\t\t\t\t<hkobject>
\t\t\t\t\t\t\t<hkparam name="time">0.400000</hkparam>
\t\t\t\t\t\t\t<hkparam name="text">&#9216;</hkparam>
\t\t\t\t\t\t</hkobject>
\t\t\t\t\t</hkparam>
\t\t\t\t</hkobject>
\t\t\t\t<hkobject>
\t\t\t\t\t<hkparam name="trackName">&#9216;</hkparam>
\t\t\t\t\t<hkparam name="annotations" numelements="0"></hkparam>
\t\t\t\t</hkobject>
\t\t\t</hkparam>
"""


def animation_object(ptr: int, class_name: str = "hkaSplineCompressedAnimation") -> str:
    lines = [
        f'\t\t<hkobject name="#{ptr:04d}" class="{class_name}" signature="0x792ee0bb">\n',
        '\t\t\t<hkparam name="type">HK_SPLINE_COMPRESSED_ANIMATION</hkparam>\n',
        '\t\t\t<hkparam name="duration">1.500000</hkparam>\n',
        '\t\t\t<hkparam name="numberOfTransformTracks">1</hkparam>\n',
        '\t\t\t<hkparam name="extractedMotion">null</hkparam>\n',
        TRACKS,
    ]
    if class_name == "hkaSplineCompressedAnimation":
        lines.append('\t\t\t<hkparam name="numFrames">46</hkparam>\n')
        lines.append('\t\t\t<hkparam name="numBlocks">1</hkparam>\n')
    lines.append("\t\t</hkobject>\n")
    return "".join(lines)


def packfile_xml(class_name: str = "hkaSplineCompressedAnimation", count: int = 1) -> str:
    objects = [animation_object(0x10 + i, class_name) for i in range(count)]
    return HEADER + "".join(objects) + ROOT_CONTAINER + FOOTER


@pytest.fixture
def write_packfile(tmp_path) -> Callable[..., str]:
    def _write(name: str = "anim.xml", class_name: str = "hkaSplineCompressedAnimation", count: int = 1) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(packfile_xml(class_name, count), encoding="ascii")
        return str(path)

    return _write
