"""
Trend / seasonal / residual decomposition of a line series.

Trend is a centered moving average, seasonality the per-phase mean of the
detrended series (phase = index mod season_length) and the residual what is
left over. Multiplicative decomposition runs the additive algorithm on
ln(value) and maps the components back with exp().
"""

import logging
import math
from typing import List, Optional, Sequence

from ..models.config import DecompositionConfig, DecompositionModel
from ..models.series import DecompositionResult, LinePoint
from ..utils.numeric import is_missing
from ..utils.window import centered_mean, mean, std, valid_values

logger = logging.getLogger(__name__)


def compute_decomposition(line: Sequence[LinePoint], config: DecompositionConfig = None) -> DecompositionResult:
    """
    Decompose a line series.

    Args:
        line: Input series
        config: Decomposition config (defaults when None)

    Returns:
        DecompositionResult with one point per input point; trend, seasonal and
        residual are None where the centered trend window is incomplete
    """
    config = config or DecompositionConfig()
    n = len(line)
    if n == 0:
        return DecompositionResult(model=config.model.value)

    times = [p.time for p in line]
    raw = [p.value for p in line]

    model = config.model
    if model == DecompositionModel.MULTIPLICATIVE and any(is_missing(v) or v <= 0 for v in raw):
        logger.debug("decomposition_multiplicative_fallback", extra={"points": n})
        model = DecompositionModel.ADDITIVE

    multiplicative = model == DecompositionModel.MULTIPLICATIVE
    y = [math.log(v) for v in raw] if multiplicative else [None if is_missing(v) else v for v in raw]

    trend_length = min(config.trend_length, n)
    period = max(2, min(config.season_length, n))

    trend = centered_mean(y, trend_length)
    detrended = [
        None if t is None or is_missing(v) else v - t
        for v, t in zip(y, trend)
    ]

    pattern = seasonal_pattern(detrended, period, config.season_smoothing, config.normalize_seasonality)
    seasonal = [None if d is None else pattern[i % period] for i, d in enumerate(detrended)]
    residual = [
        None if d is None else d - s
        for d, s in zip(detrended, seasonal)
    ]

    raw_residual = [None if r is None else math.exp(r) for r in residual] if multiplicative else residual
    if config.standardize_residuals:
        residual_out = standardize_residuals(residual, config.residual_std_window,
                                             config.require_full_residual_window, raw=raw_residual)
    else:
        residual_out = raw_residual

    if multiplicative:
        trend = [None if t is None else math.exp(t) for t in trend]
        seasonal = [None if s is None else math.exp(s) for s in seasonal]

    logger.debug("decomposition_computed", extra={
        "points": n,
        "model": model.value,
        "trend_length": trend_length,
        "season_length": period
    })

    return DecompositionResult(
        trend=[LinePoint(t, v) for t, v in zip(times, trend)],
        seasonal=[LinePoint(t, v) for t, v in zip(times, seasonal)],
        residual=[LinePoint(t, v) for t, v in zip(times, residual_out)],
        model=model.value,
        pattern=pattern,
    )


def seasonal_pattern(detrended: Sequence[Optional[float]], period: int,
                     smoothing: int = 1, normalize: bool = True) -> List[float]:
    """
    Mean detrended value per phase.

    Phases without observations are 0. With smoothing > 1 the pattern is
    averaged circularly over smoothing // 2 phases on each side. With
    normalize the pattern is shifted to zero mean over one cycle.
    """
    sums = [0.0] * period
    counts = [0] * period
    for i, v in enumerate(detrended):
        if is_missing(v):
            continue
        sums[i % period] += v
        counts[i % period] += 1

    pattern = [s / c if c > 0 else 0.0 for s, c in zip(sums, counts)]

    if smoothing > 1:
        half = smoothing // 2
        pattern = [
            sum(pattern[(k + offset) % period] for offset in range(-half, half + 1)) / (2 * half + 1)
            for k in range(period)
        ]

    if normalize:
        offset = sum(pattern) / period
        pattern = [p - offset for p in pattern]

    return pattern


def standardize_residuals(residual: Sequence[Optional[float]], window: int,
                          require_full_window: bool = True,
                          raw: Optional[Sequence[Optional[float]]] = None) -> List[Optional[float]]:
    """
    Rolling z-score over a trailing window.

    At least two valid observations are needed in the window; a zero
    deviation divides by 1. With require_full_window, points whose window
    would start before the first observation are not standardized; otherwise a
    partial window from index 0 is used. Points that cannot be standardized
    keep their raw residual (taken from `raw` when given, e.g. the
    exponentiated multiplicative residual).
    """
    raw = residual if raw is None else raw
    out: List[Optional[float]] = []
    for i, current in enumerate(residual):
        if is_missing(current):
            out.append(None)
            continue
        start = i - window + 1
        if start < 0 and require_full_window:
            out.append(raw[i])
            continue
        window_vals = valid_values(residual[max(0, start):i + 1])
        if len(window_vals) < 2:
            out.append(raw[i])
            continue
        sd = std(window_vals) or 1.0
        out.append((current - mean(window_vals)) / sd)
    return out
