"""Range oscillators: Stochastic, KDJ, Williams %R and CCI."""

from typing import Optional, Sequence

from ..models.ohlcv import Bar
from ..models.series import KdjResult, LinePoint, NumericSeries, StochasticResult
from ..utils.numeric import clamp_length, is_missing
from ..utils.window import trailing_max, trailing_min, valid_values
from .base import combine
from .moving_average import compute_sma


def _range_position(bars: Sequence[Bar], length: int):
    """Yield (index, close, highest high, lowest low) for each full window."""
    highs = trailing_max([b.high for b in bars], length)
    lows = trailing_min([b.low for b in bars], length)
    for i in range(length - 1, len(bars)):
        close = bars[i].close
        yield i, (None if is_missing(close) else close), highs[i], lows[i]


def compute_stochastic(bars: Sequence[Bar], length: int = 14, smoothing: int = 3) -> StochasticResult:
    """
    Stochastic oscillator.

    %K = (close - LL) / (HH - LL) * 100, 50 when HH == LL.
    %D = SMA(%K, smoothing).
    """
    length = clamp_length(length, 1)
    if len(bars) < length:
        return StochasticResult()

    k: NumericSeries = []
    for i, close, hh, ll in _range_position(bars, length):
        value: Optional[float]
        if close is None or hh is None or ll is None:
            value = None
        elif hh == ll:
            value = 50.0
        else:
            value = ((close - ll) / (hh - ll)) * 100
        k.append(LinePoint(bars[i].time, value))

    return StochasticResult(k=k, d=compute_sma(k, smoothing))


def compute_kdj(bars: Sequence[Bar], length: int = 14, smoothing: int = 3) -> KdjResult:
    """KDJ: the stochastic %K/%D pair plus J = 3K - 2D (derived, not computed)."""
    stoch = compute_stochastic(bars, length, smoothing)
    if not stoch.k:
        return KdjResult()
    j = combine(stoch.k, stoch.d, lambda k, d: 3 * k - 2 * d)
    return KdjResult(k=stoch.k, d=stoch.d, j=j)


def compute_williams_r(bars: Sequence[Bar], length: int = 14) -> NumericSeries:
    """Williams %R = -100 * (HH - close) / (HH - LL), -50 when HH == LL."""
    length = clamp_length(length, 1)
    if len(bars) < length:
        return []

    out: NumericSeries = []
    for i, close, hh, ll in _range_position(bars, length):
        if close is None or hh is None or ll is None:
            value = None
        elif hh == ll:
            value = -50.0
        else:
            value = -100 * ((hh - close) / (hh - ll))
        out.append(LinePoint(bars[i].time, value))
    return out


def compute_cci(bars: Sequence[Bar], length: int = 20) -> NumericSeries:
    """
    Commodity Channel Index on the typical price (H + L + C) / 3.

    CCI = (tp - mean) / (0.015 * mean absolute deviation); 0 when the mean
    deviation is 0.
    """
    length = clamp_length(length, 1)
    if len(bars) < length:
        return []

    typical = [None if not b.is_complete else b.typical_price for b in bars]
    out: NumericSeries = []
    for i in range(length - 1, len(bars)):
        window = valid_values(typical[i - length + 1:i + 1])
        current = typical[i]
        if current is None or not window:
            out.append(LinePoint(bars[i].time, None))
            continue
        mean_tp = sum(window) / len(window)
        mean_dev = sum(abs(tp - mean_tp) for tp in window) / len(window)
        cci = (current - mean_tp) / (0.015 * mean_dev) if mean_dev > 0 else 0.0
        out.append(LinePoint(bars[i].time, cci))
    return out
