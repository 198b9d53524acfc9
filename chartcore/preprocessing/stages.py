"""
Preprocessing stages.

Each stage takes a line series and its sub-config and returns a fresh series.
Only the value column is touched; times are carried through unchanged.
"""

import logging
from typing import Callable, List, Optional, Sequence

from ..models.config import (
    DifferencingConfig, MissingValueStrategy, MissingValuesConfig, OutlierConfig,
    OutlierMethod, ScalingConfig, ScalingMethod, SmoothingConfig, SmoothingMethod
)
from ..models.series import LinePoint, NumericSeries
from ..utils.numeric import is_missing
from ..utils.window import mean, quantile, std, trailing_mean, valid_values

logger = logging.getLogger(__name__)


def _with_values(series: Sequence[LinePoint], values: Sequence[Optional[float]]) -> NumericSeries:
    return [LinePoint(p.time, v) for p, v in zip(series, values)]


def _map_valid(series: Sequence[LinePoint], fn: Callable[[float], float]) -> NumericSeries:
    return [p if p.is_missing else LinePoint(p.time, fn(p.value)) for p in series]


# ---------------------------------------------------------------------------
# 1. Missing values
# ---------------------------------------------------------------------------

def apply_missing_values(series: Sequence[LinePoint], config: MissingValuesConfig) -> NumericSeries:
    """
    Fill or drop missing points.

    forward_fill/backward_fill propagate the nearest known value, `constant`
    substitutes config.constant_value, `interpolate` fills interior gaps
    linearly (leading and trailing gaps stay missing) and `drop_rows`
    removes missing points.
    """
    strategy = config.strategy

    if strategy == MissingValueStrategy.NONE:
        return list(series)

    if strategy == MissingValueStrategy.DROP_ROWS:
        return [p for p in series if not p.is_missing]

    if strategy == MissingValueStrategy.CONSTANT:
        fill = config.constant_value
        return [LinePoint(p.time, fill) if p.is_missing else p for p in series]

    values = [p.value for p in series]

    if strategy in (MissingValueStrategy.FORWARD_FILL, MissingValueStrategy.BACKWARD_FILL):
        indices = range(len(values))
        if strategy == MissingValueStrategy.BACKWARD_FILL:
            indices = reversed(indices)
        last_seen = None
        for i in indices:
            if not is_missing(values[i]):
                last_seen = values[i]
            elif last_seen is not None:
                values[i] = last_seen
        return _with_values(series, values)

    # interpolate
    known = [i for i, v in enumerate(values) if not is_missing(v)]
    for start, end in zip(known, known[1:]):
        gap = end - start
        if gap <= 1:
            continue
        v_start = values[start]
        v_end = values[end]
        for i in range(start + 1, end):
            values[i] = v_start + (i - start) / gap * (v_end - v_start)
    return _with_values(series, values)


# ---------------------------------------------------------------------------
# 2. Outliers
# ---------------------------------------------------------------------------

def outlier_bounds(values: Sequence[float], config: OutlierConfig):
    """
    Clip bounds for the configured method.

    Args:
        values: Valid values, sorted ascending
        config: Outlier config

    Returns:
        (lower, upper)
    """
    method = config.method
    if method == OutlierMethod.ZSCORE_CLIP:
        m = mean(values)
        sd = std(values) or 1.0
        return m - config.z_threshold * sd, m + config.z_threshold * sd
    if method == OutlierMethod.IQR_CLIP:
        q1 = quantile(values, 0.25)
        q3 = quantile(values, 0.75)
        iqr = q3 - q1
        return q1 - config.iqr_multiplier * iqr, q3 + config.iqr_multiplier * iqr
    if method == OutlierMethod.WINSORIZE:
        return (quantile(values, config.winsor_lower_percentile / 100.0),
                quantile(values, config.winsor_upper_percentile / 100.0))
    lower = config.manual_min if config.manual_min is not None else values[0]
    upper = config.manual_max if config.manual_max is not None else values[-1]
    return lower, upper


def apply_outliers(series: Sequence[LinePoint], config: OutlierConfig) -> NumericSeries:
    """Saturate values outside the method's bounds; nothing is removed."""
    if config.method == OutlierMethod.NONE:
        return list(series)

    values = sorted(valid_values([p.value for p in series]))
    if not values:
        return list(series)

    lower, upper = outlier_bounds(values, config)
    logger.debug("outlier_bounds", extra={"method": config.method.value, "lower": lower, "upper": upper})
    return _map_valid(series, lambda v: min(max(v, lower), upper))


# ---------------------------------------------------------------------------
# 3. Smoothing
# ---------------------------------------------------------------------------

def apply_smoothing(series: Sequence[LinePoint], config: SmoothingConfig) -> NumericSeries:
    """
    Moving average over valid points, trailing or centered.

    A centered window spans window_size // 2 points on each side, truncated at
    the series ends. Where fewer than min_periods valid points fall in the
    window the original value is kept.
    """
    window = config.window_size
    if config.method == SmoothingMethod.NONE or window <= 1:
        return list(series)

    values = [p.value for p in series]
    if config.center:
        smoothed = _centered_partial_mean(values, window // 2, config.min_periods)
    else:
        smoothed = trailing_mean(values, window, config.min_periods)

    return [p if s is None else LinePoint(p.time, s) for p, s in zip(series, smoothed)]


def _centered_partial_mean(values, half: int, min_periods: int) -> List[Optional[float]]:
    n = len(values)
    out: List[Optional[float]] = []
    for i in range(n):
        window_vals = valid_values(values[max(0, i - half):min(n, i + half + 1)])
        out.append(sum(window_vals) / len(window_vals) if len(window_vals) >= min_periods and window_vals else None)
    return out


# ---------------------------------------------------------------------------
# 4. Differencing
# ---------------------------------------------------------------------------

def apply_differencing(series: Sequence[LinePoint], config: DifferencingConfig) -> NumericSeries:
    """
    value[i] - value[i - lag], lag = seasonal_period or 1.

    Points without a valid lag partner become missing, or are dropped when
    drop_na_after_diff is set.
    """
    if not config.enabled or config.order == 0:
        return list(series)

    lag = config.lag
    out: NumericSeries = []
    for i, point in enumerate(series):
        if i < lag or point.is_missing or series[i - lag].is_missing:
            if not config.drop_na_after_diff:
                out.append(LinePoint(point.time, None))
            continue
        out.append(LinePoint(point.time, point.value - series[i - lag].value))
    return out


def integrate_differences(diffs: Sequence[LinePoint], initial_values: Sequence[float]) -> NumericSeries:
    """
    Rebuild a level series from lag differences.

    Args:
        diffs: Output of apply_differencing without dropped points
        initial_values: The first `lag` levels of the original series

    Returns:
        Level series aligned with diffs; the first `lag` points carry the
        initial values, later points level[i - lag] + diff[i] (missing where
        either side is missing)
    """
    lag = len(initial_values)
    if lag == 0:
        return [LinePoint(p.time, None) for p in diffs]

    levels: List[Optional[float]] = []
    for i, point in enumerate(diffs):
        if i < lag:
            levels.append(initial_values[i])
            continue
        prev = levels[i - lag]
        levels.append(None if is_missing(prev) or point.is_missing else prev + point.value)
    return _with_values(diffs, levels)


# ---------------------------------------------------------------------------
# 5. Scaling
# ---------------------------------------------------------------------------

def apply_scaling(series: Sequence[LinePoint], config: ScalingConfig) -> NumericSeries:
    """standard (z-score), minmax into [range_min, range_max] or robust (Q1/IQR)."""
    if not config.enabled or config.method == ScalingMethod.NONE:
        return list(series)

    values = valid_values([p.value for p in series])
    if not values:
        return list(series)

    if config.method == ScalingMethod.STANDARD:
        m = mean(values)
        sd = std(values) or 1.0
        return _map_valid(series, lambda v: (v - m) / sd)

    if config.method == ScalingMethod.MINMAX:
        low = min(values)
        from_range = (max(values) - low) or 1.0
        to_range = (config.range_max - config.range_min) or 1.0
        return _map_valid(series, lambda v: (v - low) / from_range * to_range + config.range_min)

    ordered = sorted(values)
    q1 = quantile(ordered, 0.25)
    iqr = (quantile(ordered, 0.75) - q1) or 1.0
    return _map_valid(series, lambda v: (v - q1) / iqr)
