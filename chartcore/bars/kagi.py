"""Kagi line builder."""

from typing import Any, Dict, List, Optional, Sequence

from ..models.ohlcv import Bar
from ..utils.numeric import is_missing
from .builder import SyntheticBarBuilder
from .sizing import FallbackChain, brick_chain

FLAT = 0
UP = 1
DOWN = -1


class KagiBuilder(SyntheticBarBuilder):
    """
    Builds Kagi lines from closes.

    While flat, the first move of at least the reversal size from the first
    close sets the direction and emits the first line. While trending, a new
    extreme is tracked; a retracement of at least the reversal size from it
    flips the direction and emits a line, and a further move of the reversal
    size in the trend direction from the last line emits a continuation line.
    """

    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}

        # Set attributes BEFORE super().__init__()
        self.reversal_size = config.get('reversal_size', 0)

        super().__init__('KagiBuilder', config)

    def size_chain(self) -> FallbackChain:
        return brick_chain(self.reversal_size)

    def _run(self, bars: Sequence[Bar], size: float) -> List[Bar]:
        last_price = bars[0].close
        if is_missing(last_price):
            return []

        direction = FLAT
        extreme_high = last_price
        extreme_low = last_price
        pending_volume = 0.0
        lines: List[Bar] = []

        def emit(bar: Bar, close: float) -> None:
            nonlocal last_price, pending_volume
            lines.append(Bar(
                open=last_price,
                high=max(last_price, close),
                low=min(last_price, close),
                close=close,
                volume=pending_volume,
                time=bar.time,
            ))
            last_price = close
            pending_volume = 0.0

        for bar in bars:
            close = bar.close
            if is_missing(close):
                continue
            pending_volume += bar.volume_or_zero

            if direction == FLAT:
                move = close - last_price
                if abs(move) >= size:
                    emit(bar, close)
                    direction = UP if move > 0 else DOWN
                    extreme_high = extreme_low = close
                continue

            if direction == UP:
                extreme_high = max(extreme_high, close)
                if extreme_high - close >= size:
                    emit(bar, close)
                    direction = DOWN
                    extreme_high = extreme_low = close
                elif close - last_price >= size:
                    emit(bar, close)
                    extreme_high = close
            else:
                extreme_low = min(extreme_low, close)
                if close - extreme_low >= size:
                    emit(bar, close)
                    direction = UP
                    extreme_high = extreme_low = close
                elif last_price - close >= size:
                    emit(bar, close)
                    extreme_low = close

        return lines


def build_kagi_lines(bars: Sequence[Bar], reversal_size: float = 0, timeframe: Optional[str] = None) -> List[Bar]:
    """Functional entry point for KagiBuilder."""
    return KagiBuilder({'reversal_size': reversal_size}).build(bars, timeframe)
