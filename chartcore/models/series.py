"""Line series and indicator result models."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..utils.numeric import is_missing
from .ohlcv import Bar, Timestamp


@dataclass(frozen=True)
class LinePoint:
    """Single (time, value) point; None or NaN value means missing."""
    time: Timestamp
    value: Optional[float]

    @property
    def is_missing(self) -> bool:
        return is_missing(self.value)


@dataclass(frozen=True)
class HistogramPoint:
    """Histogram bar (MACD histogram, volume) with its up/down direction."""
    time: Timestamp
    value: Optional[float]
    rising: bool


NumericSeries = List[LinePoint]


def values_of(series: Sequence[LinePoint]) -> List[Optional[float]]:
    """Project a series onto its value column."""
    return [p.value for p in series]


def close_line(bars: Sequence[Bar]) -> NumericSeries:
    """Close-price line series of a bar sequence."""
    return [LinePoint(bar.time, None if is_missing(bar.close) else bar.close) for bar in bars]


def empty_series() -> NumericSeries:
    return []


@dataclass(frozen=True)
class BandResult:
    """Upper/basis/lower channel (Bollinger, Donchian, Keltner)."""
    upper: NumericSeries = field(default_factory=list)
    basis: NumericSeries = field(default_factory=list)
    lower: NumericSeries = field(default_factory=list)


@dataclass(frozen=True)
class MacdResult:
    macd: NumericSeries = field(default_factory=list)
    signal: NumericSeries = field(default_factory=list)
    histogram: List[HistogramPoint] = field(default_factory=list)


@dataclass(frozen=True)
class AdxResult:
    adx: NumericSeries = field(default_factory=list)
    di_plus: NumericSeries = field(default_factory=list)
    di_minus: NumericSeries = field(default_factory=list)


@dataclass(frozen=True)
class StochasticResult:
    k: NumericSeries = field(default_factory=list)
    d: NumericSeries = field(default_factory=list)


@dataclass(frozen=True)
class KdjResult:
    k: NumericSeries = field(default_factory=list)
    d: NumericSeries = field(default_factory=list)
    j: NumericSeries = field(default_factory=list)


@dataclass(frozen=True)
class TrixResult:
    trix: NumericSeries = field(default_factory=list)
    signal: NumericSeries = field(default_factory=list)


@dataclass(frozen=True)
class IchimokuResult:
    tenkan: NumericSeries = field(default_factory=list)
    kijun: NumericSeries = field(default_factory=list)
    span_a: NumericSeries = field(default_factory=list)
    span_b: NumericSeries = field(default_factory=list)
    chikou: NumericSeries = field(default_factory=list)


@dataclass(frozen=True)
class DecompositionResult:
    """Trend/seasonal/residual series, each aligned 1:1 with the input."""
    trend: NumericSeries = field(default_factory=list)
    seasonal: NumericSeries = field(default_factory=list)
    residual: NumericSeries = field(default_factory=list)
    model: str = 'additive'
    pattern: List[float] = field(default_factory=list)
