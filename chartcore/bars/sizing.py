"""
Brick/range size estimation for synthetic bars.

The size policy is an explicit, ordered list of strategies. Each strategy is
a named callable (bars, timeframe) -> float; the chain returns the first
finite, strictly positive result.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..indicators.atr import estimate_atr_range
from ..models.ohlcv import Bar
from ..utils.numeric import NAN, F, is_missing

logger = logging.getLogger(__name__)

ATR_LENGTH = 14
SPAN_DIVISOR = 50

# Nominal bar interval -> scale applied to the ATR-based estimate
TIMEFRAME_MULTIPLIERS = {
    '5m': 0.8,
    '15m': 1.0,
    '1h': 1.2,
    '4h': 1.4,
    '1d': 1.6,
}

SizeFn = Callable[[Sequence[Bar], Optional[str]], float]


@dataclass(frozen=True)
class SizeStrategy:
    name: str
    fn: SizeFn

    def __call__(self, bars: Sequence[Bar], timeframe: Optional[str]) -> float:
        return self.fn(bars, timeframe)


class FallbackChain:
    """Ordered size strategies evaluated until one yields a usable size."""

    def __init__(self, strategies: List[SizeStrategy]):
        self.strategies = list(strategies)

    def resolve(self, bars: Sequence[Bar], timeframe: Optional[str] = None) -> Tuple[float, Optional[str]]:
        """
        Evaluate strategies in order.

        Returns:
            (size, strategy name), or (NaN, None) when every strategy fails
        """
        for strategy in self.strategies:
            size = strategy(bars, timeframe)
            if is_usable_size(size):
                return size, strategy.name
        return NAN, None

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.strategies]


def is_usable_size(size) -> bool:
    return not is_missing(size) and size > 0


def timeframe_multiplier(timeframe: Optional[str]) -> float:
    return TIMEFRAME_MULTIPLIERS.get(timeframe, 1.0)


def atr_based_size(bars: Sequence[Bar], timeframe: Optional[str] = None) -> float:
    """Mean true range of the last 14 bars scaled by the timeframe multiplier."""
    atr = estimate_atr_range(bars, ATR_LENGTH)
    if is_missing(atr):
        return NAN
    return atr * timeframe_multiplier(timeframe)


def span_based_size(bars: Sequence[Bar], timeframe: Optional[str] = None) -> float:
    """(max high - min low) / 50 over the whole input."""
    highs = [b.high for b in bars if not is_missing(b.high)]
    lows = [b.low for b in bars if not is_missing(b.low)]
    if not highs or not lows:
        return NAN
    span = max(highs) - min(lows)
    if not math.isfinite(span) or span <= 0:
        return NAN
    return span / SPAN_DIVISOR


def explicit_size(value) -> SizeStrategy:
    """Strategy returning a caller-supplied absolute size."""
    try:
        size = F(value)
    except TypeError:
        size = NAN
    return SizeStrategy('explicit', lambda bars, timeframe: size)


def scaled_default_size(multiplier) -> SizeStrategy:
    """Default estimate scaled by a caller-supplied multiplier (1 when unusable)."""
    try:
        mult = F(multiplier)
    except TypeError:
        mult = NAN
    if not is_usable_size(mult):
        mult = 1.0

    def _scaled(bars, timeframe):
        baseline = estimate_default_range_size(bars, timeframe)
        return baseline * mult if is_usable_size(baseline) else NAN

    return SizeStrategy('scaled_default', _scaled)


DEFAULT_SIZE_CHAIN = FallbackChain([
    SizeStrategy('atr', atr_based_size),
    SizeStrategy('span', span_based_size),
])


def estimate_default_range_size(bars: Sequence[Bar], timeframe: Optional[str] = None) -> float:
    """
    Default threshold for range/renko/kagi construction.

    ATR(14) * timeframe multiplier, falling back to the high/low span / 50.

    Returns:
        Estimated size, or NaN when both estimates are degenerate
    """
    size, source = DEFAULT_SIZE_CHAIN.resolve(bars, timeframe)
    logger.debug("default_range_size", extra={"size": size, "source": source, "bars": len(bars)})
    return size


def range_bar_chain(range_size) -> FallbackChain:
    """Range bars: scale the default estimate, else use range_size as an absolute size."""
    return FallbackChain([scaled_default_size(range_size), explicit_size(range_size)])


def brick_chain(size) -> FallbackChain:
    """Renko/Kagi: explicit size first, then the default estimates."""
    return FallbackChain([explicit_size(size)] + DEFAULT_SIZE_CHAIN.strategies)
