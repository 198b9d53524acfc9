"""Volume-based indicators: VWAP, VR, OBV and the raw volume histogram."""

from typing import List, Optional, Sequence

from ..models.ohlcv import Bar
from ..models.series import HistogramPoint, LinePoint, NumericSeries
from ..utils.numeric import clamp_length, is_missing


def compute_vwap(bars: Sequence[Bar]) -> NumericSeries:
    """
    Cumulative volume-weighted average of the typical price.

    Falls back to the bar's typical price while cumulative volume is zero.
    """
    out: NumericSeries = []
    cum_pv = 0.0
    cum_v = 0.0
    for bar in bars:
        if not bar.is_complete:
            out.append(LinePoint(bar.time, None))
            continue
        tp = bar.typical_price
        v = bar.volume_or_zero
        cum_pv += tp * v
        cum_v += v
        out.append(LinePoint(bar.time, cum_pv / cum_v if cum_v > 0 else tp))
    return out


def compute_vr(bars: Sequence[Bar], length: int = 26) -> NumericSeries:
    """
    Volume Ratio over the trailing window.

    Volume on up/down/unchanged closes is bucketed; unchanged volume is split
    evenly. VR = (up + same / 2) / (down + same / 2) * 100, 100 when the
    denominator is 0.
    """
    length = clamp_length(length, 1)
    n = len(bars)
    if n < length + 1:
        return []

    up = [0.0] * n
    down = [0.0] * n
    same = [0.0] * n
    for i in range(1, n):
        prev_close, cur_close = bars[i - 1].close, bars[i].close
        volume = bars[i].volume_or_zero
        if is_missing(prev_close) or is_missing(cur_close) or cur_close == prev_close:
            same[i] = volume
        elif cur_close > prev_close:
            up[i] = volume
        else:
            down[i] = volume

    out: NumericSeries = []
    for i in range(length, n):
        start = i - length + 1
        same_half = sum(same[start:i + 1]) * 0.5
        up_adj = sum(up[start:i + 1]) + same_half
        down_adj = sum(down[start:i + 1]) + same_half
        vr = (up_adj / down_adj) * 100 if down_adj > 0 else 100.0
        out.append(LinePoint(bars[i].time, vr))
    return out


def compute_obv(bars: Sequence[Bar]) -> NumericSeries:
    """On-balance volume starting at bar index 1."""
    if len(bars) < 2:
        return []
    obv = 0.0
    out: NumericSeries = []
    last_close: Optional[float] = None if is_missing(bars[0].close) else bars[0].close
    for bar in bars[1:]:
        close = bar.close
        if is_missing(close):
            out.append(LinePoint(bar.time, None))
            continue
        if last_close is not None:
            if close > last_close:
                obv += bar.volume_or_zero
            elif close < last_close:
                obv -= bar.volume_or_zero
        last_close = close
        out.append(LinePoint(bar.time, obv))
    return out


def compute_volume(bars: Sequence[Bar]) -> List[HistogramPoint]:
    """Per-bar volume tagged with the bar's direction (close >= open)."""
    return [HistogramPoint(bar.time, bar.volume_or_zero, bar.close >= bar.open) for bar in bars]
