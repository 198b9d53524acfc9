"""
Average True Range (ATR) indicator.
"""

import logging
from typing import List, Optional, Sequence

from ..models.ohlcv import Bar
from ..models.series import LinePoint, NumericSeries
from ..utils.numeric import NAN, clamp_length, is_missing

logger = logging.getLogger(__name__)


def true_range(prev: Bar, cur: Bar) -> Optional[float]:
    """max(high - low, |high - prevClose|, |low - prevClose|), None if any input is missing."""
    if any(is_missing(v) for v in (cur.high, cur.low, prev.close)):
        return None
    return max(
        cur.high - cur.low,
        abs(cur.high - prev.close),
        abs(cur.low - prev.close),
    )


def compute_true_range(bars: Sequence[Bar]) -> NumericSeries:
    """True range for every bar from index 1 on."""
    return [LinePoint(bars[i].time, true_range(bars[i - 1], bars[i])) for i in range(1, len(bars))]


def compute_atr(bars: Sequence[Bar], length: int = 14) -> NumericSeries:
    """
    Wilder ATR in price units.

    Seeded with the plain mean of the first `length` true ranges, then
    atr = (prev * (length - 1) + tr) / length.

    Args:
        bars: Bars sorted by time, ascending
        length: ATR period

    Returns:
        Series starting at bar index `length`; empty if insufficient bars
    """
    length = clamp_length(length, 1)
    if len(bars) < length + 1:
        return []

    out: NumericSeries = []
    atr: Optional[float] = None
    seed_sum = 0.0
    seed_count = 0

    for i in range(1, len(bars)):
        tr = true_range(bars[i - 1], bars[i])
        time = bars[i].time
        if atr is None:
            if tr is None:
                continue
            seed_sum += tr
            seed_count += 1
            if seed_count == length:
                atr = seed_sum / length
                out.append(LinePoint(time, atr))
            continue
        if tr is None:
            out.append(LinePoint(time, None))
            continue
        atr = ((atr * (length - 1)) + tr) / length
        out.append(LinePoint(time, atr))

    return out


def compute_atr_percent(bars: Sequence[Bar], length: int = 14) -> NumericSeries:
    """ATR as a percentage of the close (0 when the close is not positive)."""
    atr = compute_atr(bars, length)
    if not atr:
        return []
    offset = len(bars) - len(atr)
    out: NumericSeries = []
    for k, point in enumerate(atr):
        close = bars[offset + k].close
        if point.value is None or is_missing(close):
            out.append(LinePoint(point.time, None))
        elif close > 0:
            out.append(LinePoint(point.time, (point.value / close) * 100))
        else:
            out.append(LinePoint(point.time, 0.0))
    return out


def estimate_atr_range(bars: Sequence[Bar], length: int = 14) -> float:
    """
    Simple ATR estimate used for sizing synthetic bars.

    Mean of the most recent `length` strictly positive true ranges (or all of
    them if fewer exist).

    Args:
        bars: Bars sorted by time, ascending
        length: Number of trailing true ranges to average

    Returns:
        ATR estimate, or NaN if fewer than 2 bars or no positive true range
    """
    if len(bars) < 2:
        return NAN

    true_ranges: List[float] = []
    for i in range(1, len(bars)):
        tr = true_range(bars[i - 1], bars[i])
        if tr is not None and tr > 0:
            true_ranges.append(tr)

    if not true_ranges:
        logger.debug("atr_estimate_unavailable", extra={"bars": len(bars)})
        return NAN

    use = min(clamp_length(length, 1), len(true_ranges))
    return sum(true_ranges[-use:]) / use
