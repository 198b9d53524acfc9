"""Channel indicators: Bollinger Bands, Donchian and Keltner channels."""

import math
from typing import Sequence

from ..models.ohlcv import Bar
from ..models.series import BandResult, LinePoint, NumericSeries
from ..utils.numeric import clamp_float, clamp_length
from ..utils.window import trailing_max, trailing_min, valid_values
from .atr import compute_atr
from .base import combine, line_values
from .moving_average import compute_ema, compute_sma


def compute_bollinger(values: Sequence[LinePoint], length: int = 20, mult: float = 2.0) -> BandResult:
    """SMA basis +/- mult * population standard deviation of the window."""
    length = clamp_length(length, 1)
    mult = clamp_float(mult, 2.0, minimum=0.0)
    basis = compute_sma(values, length)
    if not basis:
        return BandResult()

    vals = line_values(values)
    upper: NumericSeries = []
    lower: NumericSeries = []
    for k, point in enumerate(basis):
        i = k + length - 1
        mean = point.value
        window = valid_values(vals[i - length + 1:i + 1])
        if mean is None or not window:
            upper.append(LinePoint(point.time, None))
            lower.append(LinePoint(point.time, None))
            continue
        sd = math.sqrt(sum((v - mean) ** 2 for v in window) / len(window))
        upper.append(LinePoint(point.time, mean + mult * sd))
        lower.append(LinePoint(point.time, mean - mult * sd))

    return BandResult(upper=upper, basis=basis, lower=lower)


def compute_donchian(bars: Sequence[Bar], length: int = 20) -> BandResult:
    """Highest high / lowest low over the trailing window and their midpoint."""
    length = clamp_length(length, 1)
    if len(bars) < length:
        return BandResult()

    highs = trailing_max([b.high for b in bars], length)
    lows = trailing_min([b.low for b in bars], length)
    upper: NumericSeries = []
    lower: NumericSeries = []
    mid: NumericSeries = []
    for i in range(length - 1, len(bars)):
        time = bars[i].time
        hh, ll = highs[i], lows[i]
        upper.append(LinePoint(time, hh))
        lower.append(LinePoint(time, ll))
        mid.append(LinePoint(time, None if hh is None or ll is None else (hh + ll) / 2))

    return BandResult(upper=upper, basis=mid, lower=lower)


def compute_keltner(
    bars: Sequence[Bar],
    line: Sequence[LinePoint],
    ma_length: int = 20,
    atr_length: int = 20,
    mult: float = 1.5
) -> BandResult:
    """
    Keltner channel: EMA(line) basis +/- mult * Wilder ATR.

    The bands exist where both the EMA and the ATR exist; the basis keeps its
    own (possibly longer) extent.
    """
    if not bars or not line:
        return BandResult()
    mult = clamp_float(mult, 1.5, minimum=0.0)
    basis = compute_ema(line, ma_length)
    atr = compute_atr(bars, atr_length)
    if not basis or not atr:
        return BandResult()

    upper = combine(atr, basis, lambda a, b: b + mult * a)
    lower = combine(atr, basis, lambda a, b: b - mult * a)
    return BandResult(upper=upper, basis=basis, lower=lower)
