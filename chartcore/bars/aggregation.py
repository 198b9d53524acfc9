"""Fixed-factor timeframe aggregation of a base bar feed."""

from typing import List, Sequence

from ..models.ohlcv import Bar

# Input bars per output bar, relative to the 5m base feed
TIMEFRAME_FACTORS = {
    '5m': 1,
    '15m': 3,
    '1h': 12,
    '4h': 48,
    '1d': 288,
}


def aggregate_bars(bars: Sequence[Bar], factor: int) -> List[Bar]:
    """
    Merge every `factor` consecutive bars into one.

    Open from the first bar of the bucket, high/low extremes, close, time from
    the last bar, summed volume. factor <= 1 returns a copy.
    """
    if not bars or factor <= 1:
        return list(bars)

    out: List[Bar] = []
    for start in range(0, len(bars), factor):
        bucket = [b for b in bars[start:start + factor] if b.is_complete]
        if not bucket:
            continue
        out.append(Bar(
            open=bucket[0].open,
            high=max(b.high for b in bucket),
            low=min(b.low for b in bucket),
            close=bucket[-1].close,
            volume=sum(b.volume_or_zero for b in bucket),
            time=bucket[-1].time,
        ))
    return out


def aggregate_to_timeframe(bars: Sequence[Bar], timeframe: str) -> List[Bar]:
    """Aggregate a 5m base feed to one of TIMEFRAME_FACTORS."""
    return aggregate_bars(bars, TIMEFRAME_FACTORS.get(timeframe, 1))
