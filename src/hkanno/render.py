from __future__ import annotations

import math
from decimal import Decimal
from typing import List, Optional

from .models import NULL_STR, Hkanno, to_f32


def format_f32(value: float) -> str:
    """Shortest decimal that reads back as the same single precision value, never in exponent form."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    target = to_f32(value)
    candidate = repr(target)
    for precision in range(1, 10):
        candidate = f"{target:.{precision}g}"
        if to_f32(float(candidate)) == target:
            break
    return format(Decimal(candidate), "f")


def _or_null(value: Optional[str]) -> str:
    return NULL_STR if value is None else value


def render_hkanno(hkanno: Hkanno) -> str:
    lines: List[str] = [
        f"# numOriginalFrames: {hkanno.num_original_frames}",
        f"# duration: {format_f32(hkanno.duration)}",
        f"# numAnnotationTracks: {len(hkanno.annotation_tracks)}",
        "",
    ]
    for track in hkanno.annotation_tracks:
        lines.append(f"trackName: {_or_null(track.track_name)}")
        lines.append(f"# numAnnotations: {len(track.annotations)}")
        for ann in track.annotations:
            lines.append(f"{ann.time:.6f} {_or_null(ann.text)}")
        lines.append("")
    return "\n".join(lines) + "\n"
