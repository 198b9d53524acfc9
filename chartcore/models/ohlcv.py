"""
OHLCV data models for price bars and time series.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from ..utils.numeric import F, is_missing

Timestamp = Union[int, float, datetime]


@dataclass(frozen=True)
class Bar:
    """Single OHLCV bar (immutable). Non-finite fields mean "missing"."""
    open: float
    high: float
    low: float
    close: float
    volume: float
    time: Timestamp

    def __post_init__(self):
        for name in ('open', 'high', 'low', 'close', 'volume'):
            object.__setattr__(self, name, F(getattr(self, name)))
        # Only finite prices can contradict each other
        if _finite(self.high, self.low) and self.high < self.low:
            raise ValueError("High must be >= Low")
        if _finite(self.high, self.open, self.close) and (self.high < self.open or self.high < self.close):
            raise ValueError("High must be >= Open and Close")
        if _finite(self.low, self.open, self.close) and (self.low > self.open or self.low > self.close):
            raise ValueError("Low must be <= Open and Close")

    @property
    def is_complete(self) -> bool:
        """True if all four prices are usable."""
        return not any(is_missing(v) for v in (self.open, self.high, self.low, self.close))

    @property
    def is_bullish(self) -> bool:
        return self.close >= self.open

    @property
    def body_size(self) -> float:
        return abs(self.close - self.open)

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3

    @property
    def volume_or_zero(self) -> float:
        """Volume with missing values read as 0 (volume-weighted sums)."""
        return 0.0 if is_missing(self.volume) else self.volume

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> 'Bar':
        """Build a bar from a loader record ({timestamp|time, open, high, low, close, volume})."""
        time = record.get('time', record.get('timestamp'))
        return cls(
            open=record.get('open'),
            high=record.get('high'),
            low=record.get('low'),
            close=record.get('close'),
            volume=record.get('volume', 0.0),
            time=time,
        )

    def to_dict(self) -> Dict[str, Any]:
        time = self.time.isoformat() if isinstance(self.time, datetime) else self.time
        return {
            'time': time,
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
            'volume': self.volume,
        }


@dataclass(frozen=True)
class OHLCV:
    """Time series of OHLCV bars."""
    symbol: str
    bars: Tuple[Bar, ...]
    timeframe: str

    @property
    def latest_bar(self) -> Optional[Bar]:
        """Get the most recent bar."""
        return self.bars[-1] if self.bars else None

    @property
    def length(self) -> int:
        """Number of bars."""
        return len(self.bars)

    def append(self, bar: Bar) -> 'OHLCV':
        """Return a new series with the bar added at the tail."""
        latest = self.latest_bar
        if latest is not None and _comparable(latest.time, bar.time) and bar.time < latest.time:
            raise ValueError("Bars must be appended in non-decreasing time order")
        return OHLCV(symbol=self.symbol, bars=self.bars + (bar,), timeframe=self.timeframe)


def _finite(*values) -> bool:
    return all(math.isfinite(v) for v in values)


def _comparable(a, b) -> bool:
    numeric = (int, float)
    if isinstance(a, numeric) and isinstance(b, numeric):
        return True
    return isinstance(a, datetime) and isinstance(b, datetime)
