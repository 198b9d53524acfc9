"""Indicator pipeline orchestration: bars -> price mode -> indicators -> aligned arrays."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ..analysis.decomposition import compute_decomposition
from ..bars.manager import PriceModeManager
from ..indicators.atr import compute_atr, compute_atr_percent
from ..indicators.bands import compute_bollinger, compute_donchian, compute_keltner
from ..indicators.momentum import (
    compute_bias, compute_macd, compute_momentum, compute_roc, compute_rsi, compute_trix
)
from ..indicators.moving_average import compute_dma, compute_ema, compute_sma
from ..indicators.oscillators import compute_cci, compute_kdj, compute_stochastic, compute_williams_r
from ..indicators.trend import compute_adx, compute_ichimoku, compute_parabolic_sar
from ..indicators.volume import compute_obv, compute_volume, compute_vr, compute_vwap
from ..models.config import (
    ChartConfig, ConfigHash, DecompositionConfig, IndicatorSettings, PreprocessingConfig, PriceMode
)
from ..models.ohlcv import Bar
from ..models.series import DecompositionResult, NumericSeries, close_line
from ..preprocessing.pipeline import apply_preprocessing
from .alignment import map_hist_to_base, map_to_base, map_volume_to_base

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of one pipeline run; every aligned array has len(bars) slots."""
    bars: List[Bar]
    aligned: Dict[str, List[Any]] = field(default_factory=dict)
    decomposition: DecompositionResult = field(default_factory=DecompositionResult)
    config_hash: Optional[ConfigHash] = None
    mode: str = PriceMode.CANDLES.value
    timeframe: Optional[str] = None


class IndicatorPipeline:
    """Main indicator pipeline orchestrator."""

    def __init__(self, settings: IndicatorSettings = None,
                 preprocessing: PreprocessingConfig = None,
                 decomposition: DecompositionConfig = None):
        self.settings = settings or IndicatorSettings()
        self.preprocessing = preprocessing or PreprocessingConfig()
        self.decomposition = decomposition
        self.mode_manager = PriceModeManager(self.settings)
        self.runs = 0

    @classmethod
    def from_config(cls, config: ChartConfig) -> 'IndicatorPipeline':
        return cls(config.indicators, config.preprocessing, config.decomposition)

    def run(self, bars: Sequence[Bar], timeframe: str = '5m',
            mode: Union[PriceMode, str] = PriceMode.CANDLES) -> PipelineResult:
        """
        Derive bars for `mode`, compute every indicator and align them.

        Args:
            bars: Raw bars, ascending time
            timeframe: Nominal interval of the bars
            mode: Price mode for the derived bars

        Returns:
            PipelineResult
        """
        mode = PriceMode(mode)
        decomposition_cfg = self.decomposition or DecompositionConfig.from_dict(None, timeframe)
        config = ChartConfig(self.settings, self.preprocessing, decomposition_cfg)

        derived = self.mode_manager.derive(bars, mode, timeframe)
        line = close_line(derived)

        aligned: Dict[str, List[Any]] = {}
        for name, series in self._line_outputs(derived, line).items():
            aligned[name] = map_to_base(derived, series)

        ichimoku = compute_ichimoku(
            derived, self.settings.ich_conversion, self.settings.ich_base,
            self.settings.ich_span_b, self.settings.ich_displacement
        )
        aligned['Ichimoku Tenkan'] = map_to_base(derived, ichimoku.tenkan)
        aligned['Ichimoku Kijun'] = map_to_base(derived, ichimoku.kijun)
        aligned['Ichimoku Span A'] = map_to_base(derived, ichimoku.span_a)
        aligned['Ichimoku Span B'] = map_to_base(derived, ichimoku.span_b)
        aligned['Ichimoku Chikou'] = map_to_base(
            derived, ichimoku.chikou, trailing_gap=self.settings.ich_displacement
        )

        macd = compute_macd(line, self.settings.macd_fast, self.settings.macd_slow, self.settings.macd_signal)
        aligned['MACD'] = map_to_base(derived, macd.macd)
        aligned['MACD Signal'] = map_to_base(derived, macd.signal)
        aligned['MACD Histogram'] = map_hist_to_base(derived, macd.histogram)
        aligned['Volume'] = map_volume_to_base(derived, compute_volume(derived))

        preprocessed = apply_preprocessing(line, self.preprocessing)
        aligned['Close Preprocessed'] = map_to_base(derived, preprocessed)

        decomposition = compute_decomposition(line, decomposition_cfg)
        aligned['Trend'] = map_to_base(derived, decomposition.trend)
        aligned['Seasonal'] = map_to_base(derived, decomposition.seasonal)
        aligned['Residual'] = map_to_base(derived, decomposition.residual)

        self.runs += 1
        logger.info("pipeline_run_complete", extra={
            "mode": mode.value,
            "timeframe": timeframe,
            "input_bars": len(bars),
            "derived_bars": len(derived),
            "series": len(aligned),
            "config_hash": config.config_hash.hash_value
        })

        return PipelineResult(
            bars=derived,
            aligned=aligned,
            decomposition=decomposition,
            config_hash=config.config_hash,
            mode=mode.value,
            timeframe=timeframe,
        )

    def _line_outputs(self, bars: Sequence[Bar], line: NumericSeries) -> Dict[str, NumericSeries]:
        """Every single-line output keyed by display name."""
        s = self.settings
        bollinger = compute_bollinger(line, s.bb_length, s.bb_mult)
        donchian = compute_donchian(bars, s.donchian_length)
        keltner = compute_keltner(bars, line, s.keltner_ma_length, s.keltner_atr_length, s.keltner_mult)
        stochastic = compute_stochastic(bars, s.stoch_length, s.stoch_smoothing)
        kdj = compute_kdj(bars, s.stoch_length, s.stoch_smoothing)
        adx = compute_adx(bars, s.adx_length)
        trix = compute_trix(line, s.trix_length, s.trix_signal)

        return {
            f'EMA {s.ema_length}': compute_ema(line, s.ema_length),
            f'EMA {s.ema_fast_length}': compute_ema(line, s.ema_fast_length),
            f'EMA {s.ema_slow_length}': compute_ema(line, s.ema_slow_length),
            f'SMA {s.sma_length}': compute_sma(line, s.sma_length),
            'BB Upper': bollinger.upper,
            'BB Basis': bollinger.basis,
            'BB Lower': bollinger.lower,
            'Donchian Upper': donchian.upper,
            'Donchian Basis': donchian.basis,
            'Donchian Lower': donchian.lower,
            'Keltner Upper': keltner.upper,
            'Keltner Basis': keltner.basis,
            'Keltner Lower': keltner.lower,
            'VWAP': compute_vwap(bars),
            'PSAR': compute_parabolic_sar(bars, s.psar_step, s.psar_max_step),
            'DMA': compute_dma(line, s.dma_fast_length, s.dma_slow_length),
            f'RSI {s.rsi_length}': compute_rsi(line, s.rsi_length),
            'Stoch %K': stochastic.k,
            'Stoch %D': stochastic.d,
            'KDJ K': kdj.k,
            'KDJ D': kdj.d,
            'KDJ J': kdj.j,
            f'CCI {s.cci_length}': compute_cci(bars, s.cci_length),
            f'Williams %R {s.wpr_length}': compute_williams_r(bars, s.wpr_length),
            f'Momentum {s.momentum_length}': compute_momentum(line, s.momentum_length),
            f'ROC {s.roc_length}': compute_roc(line, s.roc_length),
            f'BIAS {s.bias_length}': compute_bias(line, s.bias_length),
            'TRIX': trix.trix,
            'TRIX Signal': trix.signal,
            f'VR {s.vr_length}': compute_vr(bars, s.vr_length),
            'OBV': compute_obv(bars),
            f'ATR {s.atr_length}': compute_atr(bars, s.atr_length),
            f'ATR% {s.atr_length}': compute_atr_percent(bars, s.atr_length),
            'ADX': adx.adx,
            '+DI': adx.di_plus,
            '-DI': adx.di_minus,
        }
