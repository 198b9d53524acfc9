"""Price-mode manager - picks the bar transform for a chart mode."""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..models.config import IndicatorSettings, PriceMode
from ..models.ohlcv import Bar
from .heikin_ashi import build_heikin_ashi
from .kagi import KagiBuilder
from .range_bars import RangeBarBuilder
from .renko import RenkoBuilder

logger = logging.getLogger(__name__)


class PriceModeManager:
    """Maps each PriceMode to the transform producing its derived bars."""

    def __init__(self, settings: IndicatorSettings = None):
        self.settings = settings or IndicatorSettings()
        self.transforms: Dict[PriceMode, Callable[[Sequence[Bar], Optional[str]], List[Bar]]] = {}
        self._initialize_transforms()

    def _initialize_transforms(self):
        """Register one transform per mode."""
        s = self.settings
        range_builder = RangeBarBuilder({'range_size': s.range_size})
        renko_builder = RenkoBuilder({'box_size': s.renko_box_size})
        kagi_builder = KagiBuilder({'reversal_size': s.kagi_reversal_size})

        self.transforms[PriceMode.CANDLES] = lambda bars, tf: list(bars)
        self.transforms[PriceMode.OHLC] = lambda bars, tf: list(bars)
        self.transforms[PriceMode.HEIKIN] = lambda bars, tf: build_heikin_ashi(bars)
        self.transforms[PriceMode.RANGE] = range_builder.build
        self.transforms[PriceMode.RENKO] = renko_builder.build
        self.transforms[PriceMode.KAGI] = kagi_builder.build

        missing = [m.value for m in PriceMode if m not in self.transforms]
        assert not missing, f"Unregistered price modes: {missing}"

    def derive(self, bars: Sequence[Bar], mode: Union[PriceMode, str], timeframe: Optional[str] = None) -> List[Bar]:
        """Derived bars for `mode`; candles/ohlc return the input unchanged."""
        mode = PriceMode(mode)
        out = self.transforms[mode](bars, timeframe)
        logger.debug("price_mode_derived", extra={
            "mode": mode.value,
            "timeframe": timeframe,
            "input_bars": len(bars),
            "output_bars": len(out)
        })
        return out


def build_price_mode(bars: Sequence[Bar], mode: Union[PriceMode, str],
                     settings: IndicatorSettings = None, timeframe: Optional[str] = None) -> List[Bar]:
    return PriceModeManager(settings).derive(bars, mode, timeframe)
