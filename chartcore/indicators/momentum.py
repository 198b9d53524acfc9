"""Momentum family: RSI, Momentum, ROC, BIAS, TRIX and MACD."""

from typing import Optional, Sequence

from ..models.series import (
    HistogramPoint, LinePoint, MacdResult, NumericSeries, TrixResult
)
from ..utils.numeric import clamp_length, is_missing
from .base import combine, line_values, tail_pairs
from .moving_average import compute_ema, compute_sma


def compute_rsi(values: Sequence[LinePoint], length: int = 14) -> NumericSeries:
    """
    Relative Strength Index with Wilder smoothing.

    Average gain/loss are seeded with the plain mean of the first `length`
    price changes, then avg = (prev * (length - 1) + new) / length. A zero
    average loss is read as rs = 100.

    Returns:
        Series starting at index `length`; empty if insufficient points
    """
    length = clamp_length(length, 1)
    if len(values) < length + 1:
        return []

    out: NumericSeries = []
    prev: Optional[float] = None
    avg_gain: Optional[float] = None
    avg_loss = 0.0
    gains = 0.0
    losses = 0.0
    changes = 0

    for point in values:
        v = point.value
        if is_missing(v):
            if avg_gain is not None:
                out.append(LinePoint(point.time, None))
            continue
        if prev is None:
            prev = v
            continue
        change = v - prev
        prev = v
        gain = max(change, 0.0)
        loss = max(-change, 0.0)
        if avg_gain is None:
            gains += gain
            losses += loss
            changes += 1
            if changes == length:
                avg_gain = gains / length
                avg_loss = losses / length
                out.append(LinePoint(point.time, _rsi(avg_gain, avg_loss)))
            continue
        avg_gain = (avg_gain * (length - 1) + gain) / length
        avg_loss = (avg_loss * (length - 1) + loss) / length
        out.append(LinePoint(point.time, _rsi(avg_gain, avg_loss)))

    return out


def _rsi(avg_gain: float, avg_loss: float) -> float:
    rs = 100.0 if avg_loss == 0 else avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def compute_momentum(values: Sequence[LinePoint], length: int = 10) -> NumericSeries:
    """v[i] - v[i - length]."""
    length = clamp_length(length, 1)
    vals = line_values(values)
    if len(vals) < length + 1:
        return []
    out: NumericSeries = []
    for i in range(length, len(vals)):
        cur, prev = vals[i], vals[i - length]
        value = None if cur is None or prev is None else cur - prev
        out.append(LinePoint(values[i].time, value))
    return out


def compute_roc(values: Sequence[LinePoint], length: int = 10) -> NumericSeries:
    """Rate of change in percent; 0 when the lagged value is 0."""
    length = clamp_length(length, 1)
    vals = line_values(values)
    if len(vals) < length + 1:
        return []
    out: NumericSeries = []
    for i in range(length, len(vals)):
        cur, prev = vals[i], vals[i - length]
        if cur is None or prev is None:
            value = None
        elif prev == 0:
            value = 0.0
        else:
            value = ((cur / prev) - 1) * 100
        out.append(LinePoint(values[i].time, value))
    return out


def compute_bias(values: Sequence[LinePoint], length: int = 20) -> NumericSeries:
    """Percent distance of price from its SMA; None where the SMA is 0."""
    length = clamp_length(length, 1)
    ma = compute_sma(values, length)
    if not ma:
        return []
    vals = line_values(values)
    out: NumericSeries = []
    for i, ma_point in enumerate(ma):
        src = vals[i + length - 1]
        m = ma_point.value
        if src is None or m is None or m == 0:
            out.append(LinePoint(ma_point.time, None))
        else:
            out.append(LinePoint(ma_point.time, ((src - m) / m) * 100))
    return out


def compute_trix(values: Sequence[LinePoint], length: int = 18, signal_length: int = 9) -> TrixResult:
    """
    TRIX: one-bar rate of change (percent) of EMA(EMA(EMA(price))).

    The signal line is an EMA of the TRIX line and is only produced for
    signal_length > 1.
    """
    length = clamp_length(length, 1)
    signal_length = clamp_length(signal_length, 1)
    ema3 = compute_ema(compute_ema(compute_ema(values, length), length), length)
    if len(ema3) < 2:
        return TrixResult()

    trix: NumericSeries = []
    for prev, cur in zip(ema3, ema3[1:]):
        if prev.value is None or cur.value is None:
            trix.append(LinePoint(cur.time, None))
        elif prev.value == 0:
            trix.append(LinePoint(cur.time, 0.0))
        else:
            trix.append(LinePoint(cur.time, ((cur.value / prev.value) - 1) * 100))

    signal = compute_ema(trix, signal_length) if signal_length > 1 else []
    return TrixResult(trix=trix, signal=signal)


def compute_macd(
    values: Sequence[LinePoint],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9
) -> MacdResult:
    """
    MACD line (EMA fast - EMA slow), its EMA signal line and the histogram.

    All three outputs are trimmed to the signal line's length so they share
    both head and tail.
    """
    fast = clamp_length(fast, 1)
    slow = clamp_length(slow, 1)
    signal = clamp_length(signal, 1)
    if len(values) < max(fast, slow) + signal - 1:
        return MacdResult()

    macd_line = combine(compute_ema(values, fast), compute_ema(values, slow), lambda f, s: f - s)
    signal_line = compute_ema(macd_line, signal)
    if not signal_line:
        return MacdResult()

    histogram = []
    for m, s in tail_pairs(macd_line, signal_line):
        if m.value is None or s.value is None:
            histogram.append(HistogramPoint(s.time, None, False))
        else:
            diff = m.value - s.value
            histogram.append(HistogramPoint(s.time, diff, diff >= 0))

    return MacdResult(
        macd=macd_line[len(macd_line) - len(signal_line):],
        signal=signal_line,
        histogram=histogram,
    )
