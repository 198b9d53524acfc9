"""
Trend indicators: ADX/DI, Parabolic SAR and Ichimoku.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models.ohlcv import Bar
from ..models.series import AdxResult, IchimokuResult, LinePoint, NumericSeries
from ..utils.numeric import clamp_float, clamp_length
from ..utils.window import trailing_max, trailing_min
from .atr import true_range


def _directional_movement(prev: Bar, cur: Bar) -> Optional[Tuple[float, float, float]]:
    """(true range, +DM, -DM) for one bar, None if any input is missing."""
    tr = true_range(prev, cur)
    if tr is None or not prev.is_complete or not cur.is_complete:
        return None
    up_move = cur.high - prev.high
    down_move = prev.low - cur.low
    plus_dm = up_move if up_move > 0 and up_move > down_move else 0.0
    minus_dm = down_move if down_move > 0 and down_move > up_move else 0.0
    return tr, plus_dm, minus_dm


def compute_adx(bars: Sequence[Bar], length: int = 14) -> AdxResult:
    """
    Average Directional Index with +DI/-DI.

    TR, +DM and -DM are Wilder-smoothed after a plain-mean seed over the first
    `length` bars, giving the first DI at bar index `length`. DX values are
    then seeded the same way over `length` more bars and smoothed, so the
    first ADX lands at bar index 2 * length.

    Returns:
        AdxResult; DI lines are empty below length + 1 bars, ADX below 2 * length + 1
    """
    length = clamp_length(length, 1)
    if len(bars) < length + 1:
        return AdxResult()

    di_plus: NumericSeries = []
    di_minus: NumericSeries = []
    dx_values: List[Optional[float]] = []
    smoothed = None
    acc = [0.0, 0.0, 0.0]
    seeded_count = 0

    for i in range(1, len(bars)):
        movement = _directional_movement(bars[i - 1], bars[i])
        time = bars[i].time
        if smoothed is None:
            if movement is None:
                continue
            for j in range(3):
                acc[j] += movement[j]
            seeded_count += 1
            if seeded_count < length:
                continue
            smoothed = [a / length for a in acc]
        elif movement is None:
            di_plus.append(LinePoint(time, None))
            di_minus.append(LinePoint(time, None))
            dx_values.append(None)
            continue
        else:
            smoothed = [((s * (length - 1)) + m) / length for s, m in zip(smoothed, movement)]

        atr, plus_dm, minus_dm = smoothed
        plus = (plus_dm / atr) * 100 if atr > 0 else 0.0
        minus = (minus_dm / atr) * 100 if atr > 0 else 0.0
        total = plus + minus
        dx_values.append((abs(plus - minus) / total) * 100 if total > 0 else 0.0)
        di_plus.append(LinePoint(time, plus))
        di_minus.append(LinePoint(time, minus))

    adx: NumericSeries = []
    adx_prev = None
    dx_sum = 0.0
    dx_count = 0
    for point, dx in zip(di_plus, dx_values):
        if adx_prev is None:
            if dx is None:
                continue
            if dx_count < length:
                dx_sum += dx
                dx_count += 1
                if dx_count == length:
                    adx_prev = dx_sum / length
            continue
        if dx is None:
            adx.append(LinePoint(point.time, None))
            continue
        adx_prev = ((adx_prev * (length - 1)) + dx) / length
        adx.append(LinePoint(point.time, adx_prev))

    return AdxResult(adx=adx, di_plus=di_plus, di_minus=di_minus)


@dataclass
class SarState:
    """Parabolic SAR running state, threaded explicitly through `sar_step`."""
    is_long: bool
    af: float
    ep: float
    sar: float


def sar_step(state: SarState, bars: Sequence[Bar], i: int, step: float, max_step: float) -> SarState:
    """
    Advance the SAR state machine by bar `i` and return the new state.

    sar += af * (ep - sar), clamped so it does not penetrate the prior one or
    two bars; a breach flips direction (sar = ep, ep = the bar's extreme,
    af reset), otherwise a new extreme extends the run and grows af.
    """
    is_long, af, ep = state.is_long, state.af, state.ep
    sar = state.sar + af * (ep - state.sar)

    high_limit = bars[i - 1].high
    low_limit = bars[i - 1].low
    if i > 1 and bars[i - 2].is_complete:
        high_limit = max(high_limit, bars[i - 2].high)
        low_limit = min(low_limit, bars[i - 2].low)
    if is_long:
        sar = min(sar, low_limit)
    else:
        sar = max(sar, high_limit)

    bar = bars[i]
    if is_long:
        if bar.low < sar:
            is_long, sar, ep, af = False, ep, bar.low, step
        elif bar.high > ep:
            ep = bar.high
            af = min(af + step, max_step)
    else:
        if bar.high > sar:
            is_long, sar, ep, af = True, ep, bar.high, step
        elif bar.low < ep:
            ep = bar.low
            af = min(af + step, max_step)

    return SarState(is_long=is_long, af=af, ep=ep, sar=sar)


def compute_parabolic_sar(bars: Sequence[Bar], step: float = 0.02, max_step: float = 0.2) -> NumericSeries:
    """
    Parabolic SAR, one point per bar from index 1.

    The initial direction is long when the second close is not below the
    first. Incomplete bars produce a missing point and leave the state as is.
    """
    step = clamp_float(step, 0.02, minimum=0.0)
    max_step = max(clamp_float(max_step, 0.2, minimum=0.0), step)
    if len(bars) < 2 or not bars[0].is_complete or not bars[1].is_complete:
        return []

    is_long = bars[1].close >= bars[0].close
    state = SarState(
        is_long=is_long,
        af=step,
        ep=bars[1].high if is_long else bars[1].low,
        sar=bars[0].low if is_long else bars[0].high,
    )

    out: NumericSeries = []
    for i in range(1, len(bars)):
        if not bars[i].is_complete or not bars[i - 1].is_complete:
            out.append(LinePoint(bars[i].time, None))
            continue
        state = sar_step(state, bars, i, step, max_step)
        out.append(LinePoint(bars[i].time, state.sar))
    return out


def _midline(bars: Sequence[Bar], period: int) -> List[Optional[float]]:
    """(highest high + lowest low) / 2 over full windows, None elsewhere."""
    highs = trailing_max([b.high for b in bars], period)
    lows = trailing_min([b.low for b in bars], period)
    out: List[Optional[float]] = [None] * len(bars)
    for i in range(period - 1, len(bars)):
        if highs[i] is not None and lows[i] is not None:
            out[i] = (highs[i] + lows[i]) / 2
    return out


def compute_ichimoku(
    bars: Sequence[Bar],
    conversion_period: int = 9,
    base_period: int = 26,
    span_b_period: int = 52,
    displacement: int = 26
) -> IchimokuResult:
    """
    Ichimoku cloud.

    Tenkan/Kijun/Senkou-B are midlines at three periods. Span A
    ((Tenkan + Kijun) / 2) and Span B are shifted forward by `displacement`;
    Chikou (close) is shifted back by it. Shifted points landing outside
    [0, n) are omitted, not padded.
    """
    conversion_period = clamp_length(conversion_period, 1)
    base_period = clamp_length(base_period, 1)
    span_b_period = clamp_length(span_b_period, 1)
    displacement = clamp_length(displacement, 0)
    n = len(bars)
    if n == 0:
        return IchimokuResult()

    tenkan_vals = _midline(bars, conversion_period)
    kijun_vals = _midline(bars, base_period)
    span_b_vals = _midline(bars, span_b_period)

    tenkan = [LinePoint(bars[i].time, tenkan_vals[i]) for i in range(conversion_period - 1, n)]
    kijun = [LinePoint(bars[i].time, kijun_vals[i]) for i in range(base_period - 1, n)]

    chikou: NumericSeries = []
    for i in range(displacement, n):
        close = bars[i].close
        chikou.append(LinePoint(bars[i - displacement].time, close if bars[i].is_complete else None))

    span_a: NumericSeries = []
    span_b: NumericSeries = []
    for i in range(0, n - displacement):
        target_time = bars[i + displacement].time
        ten, kij = tenkan_vals[i], kijun_vals[i]
        if i >= max(conversion_period, base_period) - 1:
            value = None if ten is None or kij is None else (ten + kij) / 2
            span_a.append(LinePoint(target_time, value))
        if i >= span_b_period - 1:
            span_b.append(LinePoint(target_time, span_b_vals[i]))

    return IchimokuResult(tenkan=tenkan, kijun=kijun, span_a=span_a, span_b=span_b, chikou=chikou)
