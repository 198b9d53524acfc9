"""Renko brick builder."""

from typing import Any, Dict, List, Optional, Sequence

from ..models.ohlcv import Bar
from ..utils.numeric import is_missing
from .builder import SyntheticBarBuilder
from .sizing import FallbackChain, brick_chain


class RenkoBuilder(SyntheticBarBuilder):
    """
    Builds fixed-size Renko bricks from closes.

    While |close - last brick close| >= box size a brick of exactly one box is
    emitted in the direction of the move. A reversal against the previous
    brick needs a move of at least two boxes before anything is emitted.

    Many bricks can come from a single input bar, so brick times are a
    sequence index added to the first bar's numeric time (0 for non-numeric
    times) instead of real timestamps.
    """

    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}

        # Set attributes BEFORE super().__init__()
        self.box_size = config.get('box_size', 0)

        super().__init__('RenkoBuilder', config)

    def size_chain(self) -> FallbackChain:
        return brick_chain(self.box_size)

    def _run(self, bars: Sequence[Bar], size: float) -> List[Bar]:
        first = bars[0]
        if not first.is_complete:
            return []

        base_time = _numeric_time(first.time)
        last_close = first.close
        last_direction = 0
        pending_volume = 0.0
        bricks: List[Bar] = []

        for bar in bars:
            close = bar.close
            if is_missing(close):
                continue
            pending_volume += bar.volume_or_zero

            while True:
                diff = close - last_close
                if abs(diff) < size:
                    break
                direction = 1 if diff > 0 else -1
                if last_direction != 0 and direction != last_direction and abs(diff) < 2 * size:
                    break
                new_close = last_close + direction * size
                bricks.append(Bar(
                    open=last_close,
                    high=max(last_close, new_close),
                    low=min(last_close, new_close),
                    close=new_close,
                    volume=pending_volume,
                    time=base_time + len(bricks),
                ))
                last_close = new_close
                last_direction = direction
                pending_volume = 0.0

        return bricks


def _numeric_time(value) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return 0


def build_renko_bricks(bars: Sequence[Bar], box_size: float = 0, timeframe: Optional[str] = None) -> List[Bar]:
    """Functional entry point for RenkoBuilder."""
    return RenkoBuilder({'box_size': box_size}).build(bars, timeframe)
