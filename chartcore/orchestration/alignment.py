"""
Right-aligned mapping of indicator outputs onto the base bar index.

Indicator outputs are shorter than their input by a warm-up offset but share
its trailing tail, so the output's last point belongs to the base's last slot.
Mapping is positional; timestamps are never joined (Renko/Kagi times are
synthetic).
"""

from typing import List, Optional, Sequence, TypeVar

from ..models.series import HistogramPoint, LinePoint
from ..utils.numeric import is_missing

T = TypeVar('T')

VOLUME_SCALE = 0.2


def _right_align(base_len: int, points: Sequence[T], trailing_gap: int = 0) -> List[Optional[T]]:
    trailing_gap = max(0, int(trailing_gap))
    end = base_len - trailing_gap
    if base_len == 0 or not points or end <= 0:
        return [None] * base_len
    start = end - len(points)
    out: List[Optional[T]] = []
    for i in range(base_len):
        src = i - start
        out.append(points[src] if 0 <= src < len(points) and i < end else None)
    return out


def map_to_base(base: Sequence, points: Sequence[LinePoint], trailing_gap: int = 0) -> List[Optional[float]]:
    """
    Map a line output onto the base index.

    Args:
        base: Base sequence (bars) of length N
        points: Indicator output of length M
        trailing_gap: Slots left empty at the end (back-shifted outputs such as Chikou)

    Returns:
        N values: None-padded on the left, output values in order, None for
        missing points; only the last N - trailing_gap points of a longer
        output are kept
    """
    aligned = _right_align(len(base), points, trailing_gap)
    return [None if p is None or is_missing(p.value) else p.value for p in aligned]


def map_hist_to_base(base: Sequence, hist: Sequence[HistogramPoint]) -> List[Optional[HistogramPoint]]:
    """Same as map_to_base but keeps the histogram points (value and direction)."""
    return _right_align(len(base), hist)


def map_volume_to_base(base: Sequence, volume: Sequence[HistogramPoint],
                       scale: float = VOLUME_SCALE) -> List[Optional[HistogramPoint]]:
    """
    Map volume bars normalized to max volume * scale.

    A non-positive or non-finite max volume normalizes by 1.
    """
    values = [p.value for p in volume if not is_missing(p.value)]
    max_volume = max(values) if values else 0.0
    if max_volume <= 0:
        max_volume = 1.0

    aligned = _right_align(len(base), volume)
    out: List[Optional[HistogramPoint]] = []
    for p in aligned:
        if p is None:
            out.append(None)
            continue
        value = None if is_missing(p.value) else p.value / max_volume * scale
        out.append(HistogramPoint(p.time, value, p.rising))
    return out
