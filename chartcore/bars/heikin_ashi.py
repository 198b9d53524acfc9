"""Heikin-Ashi candles."""

from typing import List, Optional, Sequence

from ..models.ohlcv import Bar


def build_heikin_ashi(bars: Sequence[Bar]) -> List[Bar]:
    """
    Heikin-Ashi candles.

    HA close = (O + H + L + C) / 4; HA open = (prev HA open + prev HA close) / 2
    (first candle: (O + C) / 2); HA high/low include the HA open and close.
    Incomplete bars are skipped.
    """
    out: List[Bar] = []
    prev: Optional[Bar] = None
    for bar in bars:
        if not bar.is_complete:
            continue
        ha_close = (bar.open + bar.high + bar.low + bar.close) / 4
        if prev is None:
            ha_open = (bar.open + bar.close) / 2
        else:
            ha_open = (prev.open + prev.close) / 2
        prev = Bar(
            open=ha_open,
            high=max(bar.high, ha_open, ha_close),
            low=min(bar.low, ha_open, ha_close),
            close=ha_close,
            volume=bar.volume,
            time=bar.time,
        )
        out.append(prev)
    return out
