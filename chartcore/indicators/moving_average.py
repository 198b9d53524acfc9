"""Moving averages: SMA, EMA and the DMA spread."""

from typing import Sequence

from ..models.series import LinePoint, NumericSeries
from ..utils.numeric import clamp_length, is_missing
from ..utils.window import trailing_mean
from .base import combine, line_values, points_from


def compute_sma(values: Sequence[LinePoint], length: int) -> NumericSeries:
    """
    Simple moving average over the trailing `length` points.

    Missing points are skipped, so a window with gaps averages its valid
    points; a window without any valid point yields None.

    Args:
        values: Line series
        length: Window length

    Returns:
        max(0, n - length + 1) points starting at index length - 1
    """
    length = clamp_length(length, 1)
    n = len(values)
    if n < length:
        return []
    means = trailing_mean(line_values(values), length)
    return points_from([p.time for p in values], means, length - 1)


def compute_ema(values: Sequence[LinePoint], length: int) -> NumericSeries:
    """
    Exponential moving average, k = 2 / (length + 1).

    The running value is seeded with the plain mean of the first `length`
    valid points and emitted at that point; from then on every input point
    yields one output point (None for missing inputs, which leave the running
    value untouched).

    Args:
        values: Line series
        length: EMA period

    Returns:
        Series starting at the seed point; empty if it never seeds
    """
    length = clamp_length(length, 1)
    if len(values) < length:
        return []

    k = 2 / (length + 1)
    out: NumericSeries = []
    ema = None
    seed_sum = 0.0
    seed_count = 0

    for point in values:
        v = point.value
        if ema is None:
            if is_missing(v):
                continue
            seed_sum += v
            seed_count += 1
            if seed_count == length:
                ema = seed_sum / length
                out.append(LinePoint(point.time, ema))
            continue
        if is_missing(v):
            out.append(LinePoint(point.time, None))
            continue
        ema = v * k + ema * (1 - k)
        out.append(LinePoint(point.time, ema))

    return out


def compute_dma(values: Sequence[LinePoint], fast_length: int, slow_length: int) -> NumericSeries:
    """Difference of two SMAs (fast - slow), joined tail to tail."""
    fast = compute_sma(values, fast_length)
    slow = compute_sma(values, slow_length)
    if not fast or not slow:
        return []
    return combine(fast, slow, lambda f, s: f - s)
