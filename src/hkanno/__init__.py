from __future__ import annotations

from .models import NULL_STR, Annotation, AnnotationTrack, Hkanno, HkannoView
from .parser import borrow_hkanno, parse_hkanno_str, parse_hkanno_view
from .render import render_hkanno

__version__ = "0.1.0"

__all__ = [
    "NULL_STR",
    "Annotation",
    "AnnotationTrack",
    "Hkanno",
    "HkannoView",
    "borrow_hkanno",
    "parse_hkanno_str",
    "parse_hkanno_view",
    "render_hkanno",
]
