"""Range bar builder."""

from typing import Any, Dict, List, Optional, Sequence

from ..models.ohlcv import Bar
from .builder import SyntheticBarBuilder
from .sizing import FallbackChain, range_bar_chain


class RangeBarBuilder(SyntheticBarBuilder):
    """
    Builds bars of a fixed high-low range.

    Bars are accumulated into a candidate until its high - low reaches the
    size; the candidate is then emitted with the closing bar's time. A
    trailing partial candidate is flushed with the last input time.

    `range_size` multiplies the default (ATR/span) estimate; when no default
    can be estimated a positive `range_size` is used as an absolute size.
    """

    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}

        # Set attributes BEFORE super().__init__()
        self.range_size = config.get('range_size', 0)

        super().__init__('RangeBarBuilder', config)

    def size_chain(self) -> FallbackChain:
        return range_bar_chain(self.range_size)

    def _run(self, bars: Sequence[Bar], size: float) -> List[Bar]:
        out: List[Bar] = []
        cur = None  # [open, high, low, close, volume]

        for bar in bars:
            if not bar.is_complete:
                continue
            volume = bar.volume_or_zero
            if cur is None:
                cur = [bar.open, bar.high, bar.low, bar.close, volume]
            else:
                cur[1] = max(cur[1], bar.high)
                cur[2] = min(cur[2], bar.low)
                cur[3] = bar.close
                cur[4] += volume

            if cur[1] - cur[2] >= size:
                out.append(Bar(open=cur[0], high=cur[1], low=cur[2], close=cur[3], volume=cur[4], time=bar.time))
                cur = None

        if cur is not None:
            out.append(Bar(open=cur[0], high=cur[1], low=cur[2], close=cur[3], volume=cur[4], time=bars[-1].time))

        return out


def build_range_bars(bars: Sequence[Bar], range_size: float = 0, timeframe: Optional[str] = None) -> List[Bar]:
    """Functional entry point for RangeBarBuilder."""
    return RangeBarBuilder({'range_size': range_size}).build(bars, timeframe)
