"""
Windowed statistics shared by indicators, preprocessing and decomposition.

All helpers take plain sequences of floats (None/NaN mark missing points) and
return lists aligned index-for-index with their input. Missing points are
skipped when accumulating sums and counts; they are never treated as zero.
"""

import math
from typing import List, Optional, Sequence

from .numeric import NAN, is_missing


def valid_values(values: Sequence[Optional[float]]) -> List[float]:
    """Return the non-missing values in order."""
    return [v for v in values if not is_missing(v)]


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, NaN for an empty input."""
    if not values:
        return NAN
    return sum(values) / len(values)


def variance(values: Sequence[float]) -> float:
    """Population variance, NaN for an empty input."""
    if not values:
        return NAN
    m = sum(values) / len(values)
    return sum((v - m) * (v - m) for v in values) / len(values)


def std(values: Sequence[float]) -> float:
    """Population standard deviation."""
    var = variance(values)
    if math.isnan(var):
        return NAN
    return math.sqrt(var)


def quantile(sorted_values: Sequence[float], q: float) -> float:
    """
    Quantile of an already sorted sequence using linear interpolation.

    pos = (n - 1) * q; the value is interpolated between the two bracketing
    order statistics, or the last one when there is no upper neighbour.

    Args:
        sorted_values: Values sorted ascending
        q: Quantile in [0, 1]

    Returns:
        Interpolated value, NaN for an empty input
    """
    n = len(sorted_values)
    if n == 0:
        return NAN
    pos = (n - 1) * q
    base = int(math.floor(pos))
    base = min(max(base, 0), n - 1)
    rest = pos - base
    if base + 1 < n:
        return sorted_values[base] + rest * (sorted_values[base + 1] - sorted_values[base])
    return sorted_values[base]


def trailing_sum(values: Sequence[Optional[float]], window: int) -> List[Optional[float]]:
    """
    Sum over the trailing window, recomputed for every step.

    Returns None where the window holds no valid observation.
    """
    return [sum(w) if w else None for w in _trailing_windows(values, window)]


def trailing_mean(
    values: Sequence[Optional[float]],
    window: int,
    min_periods: int = 1
) -> List[Optional[float]]:
    """
    Trailing simple moving average over valid observations.

    Each window is summed afresh, so a full window equals sum(window) / len(window)
    exactly, with no drift carried over from earlier windows.

    Args:
        values: Input values (None/NaN are missing)
        window: Window length (>= 1)
        min_periods: Minimum valid observations required in the window

    Returns:
        List aligned with values; None where fewer than min_periods are valid
    """
    min_periods = max(1, min_periods)
    out: List[Optional[float]] = []
    for w in _trailing_windows(values, window):
        out.append(sum(w) / len(w) if len(w) >= min_periods else None)
    return out


def centered_mean(values: Sequence[Optional[float]], window: int) -> List[Optional[float]]:
    """
    Centered moving average requiring a complete symmetric window.

    The window for index i spans floor(window / 2) points on each side, so an
    even window is widened to window + 1 points. The first and last
    floor(window / 2) points, and any window holding a missing point, give None.
    """
    n = len(values)
    out: List[Optional[float]] = [None] * n
    if window < 1:
        return out
    half = window // 2
    span = 2 * half + 1
    for i in range(half, n - half):
        window_vals = valid_values(values[i - half:i + half + 1])
        if len(window_vals) == span:
            out[i] = sum(window_vals) / span
    return out


def trailing_max(values: Sequence[Optional[float]], window: int) -> List[Optional[float]]:
    """Highest valid value in each trailing window."""
    return _trailing_extreme(values, window, max)


def trailing_min(values: Sequence[Optional[float]], window: int) -> List[Optional[float]]:
    """Lowest valid value in each trailing window."""
    return _trailing_extreme(values, window, min)


def _trailing_extreme(values, window, pick) -> List[Optional[float]]:
    return [pick(w) if w else None for w in _trailing_windows(values, window)]


def _trailing_windows(values, window):
    window = max(1, int(window))
    for i in range(len(values)):
        yield valid_values(values[max(0, i - window + 1):i + 1])
