"""
Read annotation text out of packfiles and write edited text back.

These functions handle one file each; fanning out over many files is left to
``hkanno.batch``.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from .bridge import parse_hkanno_borrowed, write_to_class_map
from .classes import ClassMap
from .codec import HkxCodec, OutFormat, XmlPackfileCodec
from .errors import CodecError, HkannoIOError, HkxCodecError, PreviewEncodingError
from .models import Hkanno, HkannoView
from .parser import borrow_hkanno
from .render import render_hkanno

logger = logging.getLogger(__name__)

_DEFAULT_CODEC = XmlPackfileCodec()


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise HkannoIOError(path, exc) from exc


def _write_bytes(path: str, data: bytes) -> None:
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise HkannoIOError(path, exc) from exc


def _deserialize(codec: HkxCodec, data: bytes, path: str) -> ClassMap:
    try:
        return codec.deserialize(data, path)
    except CodecError as exc:
        raise HkxCodecError(path, exc) from exc


def parse_as_hkanno(data: bytes, path: str, *, codec: Optional[HkxCodec] = None) -> Hkanno:
    """Deserialize packfile bytes and extract the animation's annotations."""
    class_map = _deserialize(codec or _DEFAULT_CODEC, data, path)
    return parse_hkanno_borrowed(class_map)


def update_hkx_bytes(
    hkanno: Union[Hkanno, HkannoView],
    data: bytes,
    format: OutFormat,
    path: str,
    *,
    codec: Optional[HkxCodec] = None,
) -> bytes:
    """
    Merge ``hkanno`` into freshly deserialized ``data`` and serialize it again.

    No file I/O happens here; ``path`` is only passed on to the codec for
    extension checks and error messages.
    """
    codec = codec or _DEFAULT_CODEC
    class_map = _deserialize(codec, data, path)
    write_to_class_map(hkanno, class_map)
    try:
        return codec.serialize(path, format, class_map)
    except CodecError as exc:
        raise HkxCodecError(path, exc) from exc


def read_hkanno(path: str, *, codec: Optional[HkxCodec] = None) -> str:
    data = _read_bytes(path)
    return render_hkanno(parse_as_hkanno(data, path, codec=codec))


def apply_hkanno(
    input_path: str,
    output_path: str,
    hkanno: str,
    format: str,
    *,
    codec: Optional[HkxCodec] = None,
) -> None:
    """Apply edited hkanno text to ``input_path`` and write the result to ``output_path``."""
    data = _read_bytes(input_path)
    out_format = OutFormat.from_str(format)
    with borrow_hkanno(hkanno) as view:
        updated = update_hkx_bytes(view, data, out_format, input_path, codec=codec)
    _write_bytes(output_path, updated)
    logger.info("applied %d byte(s) of hkanno to %s -> %s (%s)", len(hkanno), input_path, output_path, out_format.value)


def hkanno_apply_xml_string(input_path: str, hkanno: str, *, codec: Optional[HkxCodec] = None) -> str:
    """Like ``apply_hkanno`` but return the updated XML instead of writing it."""
    data = _read_bytes(input_path)
    with borrow_hkanno(hkanno) as view:
        updated = update_hkx_bytes(view, data, OutFormat.XML, input_path, codec=codec)
    try:
        return updated.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PreviewEncodingError(exc) from exc
