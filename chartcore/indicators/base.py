"""
Shared plumbing for indicator functions.

Indicator outputs begin after a warm-up offset and then carry exactly one
point per input index, so any two outputs computed from the same input share
their trailing tail. Joining two outputs is therefore positional (tail to
tail), never by timestamp.
"""

from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from ..models.series import LinePoint, NumericSeries
from ..utils.numeric import is_missing

T = TypeVar('T')
U = TypeVar('U')


def line_values(series: Sequence[LinePoint]) -> List[Optional[float]]:
    """Value column with every kind of missing normalized to None."""
    return [None if is_missing(p.value) else p.value for p in series]


def points_from(times: Sequence, values: Sequence[Optional[float]], start: int) -> NumericSeries:
    """Build output points for indices [start, n)."""
    return [LinePoint(times[i], _clean(values[i])) for i in range(start, len(values))]


def tail_pairs(a: Sequence[T], b: Sequence[U]) -> List[Tuple[T, U]]:
    """Pair the last min(len(a), len(b)) elements of both sequences."""
    m = min(len(a), len(b))
    if m == 0:
        return []
    return list(zip(a[len(a) - m:], b[len(b) - m:]))


def combine(
    a: Sequence[LinePoint],
    b: Sequence[LinePoint],
    fn: Callable[[float, float], Optional[float]]
) -> NumericSeries:
    """
    Combine two tail-aligned outputs point by point.

    The result takes its times from `b`; a missing value on either side gives
    a missing result.
    """
    out: NumericSeries = []
    for pa, pb in tail_pairs(a, b):
        if is_missing(pa.value) or is_missing(pb.value):
            out.append(LinePoint(pb.time, None))
        else:
            out.append(LinePoint(pb.time, _clean(fn(pa.value, pb.value))))
    return out


def _clean(value: Optional[float]) -> Optional[float]:
    return None if is_missing(value) else value
