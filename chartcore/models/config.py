"""
Configuration models.

Every record is immutable; numeric knobs are clamped to validated minimums in
__post_init__ instead of being rejected.
"""

import json
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from hashlib import sha256
from typing import Dict, Any, Optional

from ..utils.numeric import clamp_float, clamp_length


@dataclass
class ConfigHash:
    """Configuration hash for reproducibility."""
    hash_value: str
    timestamp: str

    @staticmethod
    def compute(config_dict: Dict[str, Any]) -> str:
        """Compute SHA256 hash of config."""
        json_str = json.dumps(config_dict, sort_keys=True, default=str)
        return sha256(json_str.encode()).hexdigest()

    @classmethod
    def of(cls, config) -> 'ConfigHash':
        """Fingerprint a config dataclass (enums serialized by value)."""
        from datetime import datetime, timezone
        return cls(
            hash_value=cls.compute(asdict(config, dict_factory=_enum_safe_dict)),
            timestamp=datetime.now(timezone.utc).isoformat()
        )


def _enum_safe_dict(items):
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in items}


def _known_keys(cls, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


# ---------------------------------------------------------------------------
# Preprocessing
# ---------------------------------------------------------------------------

class MissingValueStrategy(Enum):
    NONE = "none"
    FORWARD_FILL = "forward_fill"
    BACKWARD_FILL = "backward_fill"
    INTERPOLATE = "interpolate"
    CONSTANT = "constant"
    DROP_ROWS = "drop_rows"


class OutlierMethod(Enum):
    NONE = "none"
    ZSCORE_CLIP = "zscore_clip"
    IQR_CLIP = "iqr_clip"
    WINSORIZE = "winsorize"
    MANUAL_CLIP = "manual_clip"


class SmoothingMethod(Enum):
    NONE = "none"
    MOVING_AVERAGE = "moving_average"


class ScalingMethod(Enum):
    NONE = "none"
    STANDARD = "standard"
    MINMAX = "minmax"
    ROBUST = "robust"


@dataclass(frozen=True)
class MissingValuesConfig:
    enabled: bool = True
    strategy: MissingValueStrategy = MissingValueStrategy.FORWARD_FILL
    constant_value: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'strategy', MissingValueStrategy(self.strategy))
        object.__setattr__(self, 'constant_value', clamp_float(self.constant_value, 0.0))

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None) -> 'MissingValuesConfig':
        return cls(**_known_keys(cls, data))


@dataclass(frozen=True)
class OutlierConfig:
    enabled: bool = False
    method: OutlierMethod = OutlierMethod.ZSCORE_CLIP
    z_threshold: float = 3.0
    iqr_multiplier: float = 1.5
    winsor_lower_percentile: float = 1.0
    winsor_upper_percentile: float = 99.0
    manual_min: Optional[float] = None
    manual_max: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, 'method', OutlierMethod(self.method))
        object.__setattr__(self, 'z_threshold', clamp_float(self.z_threshold, 3.0, minimum=0.0))
        object.__setattr__(self, 'iqr_multiplier', clamp_float(self.iqr_multiplier, 1.5, minimum=0.0))
        lower = min(max(clamp_float(self.winsor_lower_percentile, 1.0), 0.0), 100.0)
        upper = min(max(clamp_float(self.winsor_upper_percentile, 99.0), 0.0), 100.0)
        if lower > upper:
            lower, upper = upper, lower
        object.__setattr__(self, 'winsor_lower_percentile', lower)
        object.__setattr__(self, 'winsor_upper_percentile', upper)
        if self.manual_min is not None:
            object.__setattr__(self, 'manual_min', clamp_float(self.manual_min, None))
        if self.manual_max is not None:
            object.__setattr__(self, 'manual_max', clamp_float(self.manual_max, None))

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None) -> 'OutlierConfig':
        return cls(**_known_keys(cls, data))


@dataclass(frozen=True)
class SmoothingConfig:
    enabled: bool = True
    method: SmoothingMethod = SmoothingMethod.MOVING_AVERAGE
    window_size: int = 5
    center: bool = False
    min_periods: int = 1

    def __post_init__(self):
        object.__setattr__(self, 'method', SmoothingMethod(self.method))
        object.__setattr__(self, 'window_size', clamp_length(self.window_size, 1))
        object.__setattr__(self, 'min_periods', clamp_length(self.min_periods, 1))

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None) -> 'SmoothingConfig':
        return cls(**_known_keys(cls, data))


@dataclass(frozen=True)
class DifferencingConfig:
    enabled: bool = False
    order: int = 1
    seasonal_period: int = 0
    drop_na_after_diff: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'order', 1 if clamp_length(self.order, 0) >= 1 else 0)
        object.__setattr__(self, 'seasonal_period', clamp_length(self.seasonal_period, 0))

    @property
    def lag(self) -> int:
        return self.seasonal_period if self.seasonal_period > 0 else 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None) -> 'DifferencingConfig':
        return cls(**_known_keys(cls, data))


@dataclass(frozen=True)
class ScalingConfig:
    enabled: bool = False
    method: ScalingMethod = ScalingMethod.STANDARD
    range_min: float = 0.0
    range_max: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, 'method', ScalingMethod(self.method))
        object.__setattr__(self, 'range_min', clamp_float(self.range_min, 0.0))
        object.__setattr__(self, 'range_max', clamp_float(self.range_max, 1.0))

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None) -> 'ScalingConfig':
        return cls(**_known_keys(cls, data))


@dataclass(frozen=True)
class PreprocessingConfig:
    """Five-stage preprocessing configuration."""
    enabled: bool = True
    missing_values: MissingValuesConfig = field(default_factory=MissingValuesConfig)
    outliers: OutlierConfig = field(default_factory=OutlierConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    differencing: DifferencingConfig = field(default_factory=DifferencingConfig)
    scaling: ScalingConfig = field(default_factory=ScalingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None) -> 'PreprocessingConfig':
        """
        Build from a JSON-style dict.

        Args:
            data: {"enabled": bool, "missing_values": {...}, "outliers": {...},
                   "smoothing": {...}, "differencing": {...}, "scaling": {...}}
        """
        data = data or {}
        return cls(
            enabled=bool(data.get('enabled', True)),
            missing_values=MissingValuesConfig.from_dict(data.get('missing_values')),
            outliers=OutlierConfig.from_dict(data.get('outliers')),
            smoothing=SmoothingConfig.from_dict(data.get('smoothing')),
            differencing=DifferencingConfig.from_dict(data.get('differencing')),
            scaling=ScalingConfig.from_dict(data.get('scaling')),
        )


# ---------------------------------------------------------------------------
# Decomposition
# ---------------------------------------------------------------------------

class DecompositionModel(Enum):
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"


# Seven days of bars per nominal interval
DEFAULT_SEASON_LENGTHS = {
    '5m': 2016,
    '15m': 672,
    '1h': 168,
    '4h': 42,
    '1d': 7,
}


def default_season_length(timeframe: str) -> int:
    return DEFAULT_SEASON_LENGTHS.get(timeframe, 168)


@dataclass(frozen=True)
class DecompositionConfig:
    trend_length: int = 50
    season_length: int = 168
    season_smoothing: int = 1
    normalize_seasonality: bool = True
    residual_std_window: int = 100
    standardize_residuals: bool = True
    model: DecompositionModel = DecompositionModel.ADDITIVE
    require_full_residual_window: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'trend_length', clamp_length(self.trend_length, 3))
        object.__setattr__(self, 'season_length', clamp_length(self.season_length, 2))
        object.__setattr__(self, 'season_smoothing', clamp_length(self.season_smoothing, 1))
        object.__setattr__(self, 'residual_std_window', clamp_length(self.residual_std_window, 5))
        object.__setattr__(self, 'model', DecompositionModel(self.model))

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None, timeframe: str = None) -> 'DecompositionConfig':
        values = _known_keys(cls, data)
        if 'season_length' not in values and timeframe:
            values['season_length'] = default_season_length(timeframe)
        return cls(**values)


# ---------------------------------------------------------------------------
# Indicators / price modes
# ---------------------------------------------------------------------------

class PriceMode(Enum):
    CANDLES = "candles"
    OHLC = "ohlc"
    HEIKIN = "heikin"
    RANGE = "range"
    RENKO = "renko"
    KAGI = "kagi"


_NON_NEGATIVE_SETTINGS = {
    'bb_mult', 'keltner_mult', 'psar_step', 'psar_max_step',
    'range_size', 'renko_box_size', 'kagi_reversal_size',
}


@dataclass(frozen=True)
class IndicatorSettings:
    """Per-indicator parameters (lengths clamped to >= 1, multipliers to >= 0)."""
    ema_length: int = 50
    ema_fast_length: int = 20
    ema_slow_length: int = 100
    sma_length: int = 20
    bb_length: int = 20
    bb_mult: float = 2.0
    donchian_length: int = 20
    rsi_length: int = 14
    stoch_length: int = 14
    stoch_smoothing: int = 3
    cci_length: int = 20
    wpr_length: int = 14
    momentum_length: int = 10
    roc_length: int = 10
    vr_length: int = 26
    atr_length: int = 14
    adx_length: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    keltner_ma_length: int = 20
    keltner_atr_length: int = 20
    keltner_mult: float = 1.5
    range_size: float = 0.0
    renko_box_size: float = 0.0
    kagi_reversal_size: float = 0.0
    ich_conversion: int = 9
    ich_base: int = 26
    ich_span_b: int = 52
    ich_displacement: int = 26
    bias_length: int = 20
    dma_fast_length: int = 10
    dma_slow_length: int = 50
    trix_length: int = 18
    trix_signal: int = 9
    psar_step: float = 0.02
    psar_max_step: float = 0.2

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _NON_NEGATIVE_SETTINGS:
                object.__setattr__(self, f.name, clamp_float(value, f.default, minimum=0.0))
            else:
                object.__setattr__(self, f.name, clamp_length(value, 1))

    @classmethod
    def from_dict(cls, data: Dict[str, Any] = None) -> 'IndicatorSettings':
        return cls(**_known_keys(cls, data))


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------

@dataclass
class ChartConfig:
    """Everything one pipeline run depends on."""
    indicators: IndicatorSettings = field(default_factory=IndicatorSettings)
    preprocessing: PreprocessingConfig = field(default_factory=PreprocessingConfig)
    decomposition: DecompositionConfig = field(default_factory=DecompositionConfig)
    config_hash: Optional[ConfigHash] = None

    def __post_init__(self):
        if self.config_hash is None:
            combined = {
                'indicators': asdict(self.indicators, dict_factory=_enum_safe_dict),
                'preprocessing': asdict(self.preprocessing, dict_factory=_enum_safe_dict),
                'decomposition': asdict(self.decomposition, dict_factory=_enum_safe_dict)
            }
            from datetime import datetime, timezone
            self.config_hash = ConfigHash(
                hash_value=ConfigHash.compute(combined),
                timestamp=datetime.now(timezone.utc).isoformat()
            )

    @classmethod
    def from_dicts(cls, indicators: Dict[str, Any] = None, preprocessing: Dict[str, Any] = None,
                   decomposition: Dict[str, Any] = None, timeframe: str = None) -> 'ChartConfig':
        return cls(
            indicators=IndicatorSettings.from_dict(indicators),
            preprocessing=PreprocessingConfig.from_dict(preprocessing),
            decomposition=DecompositionConfig.from_dict(decomposition, timeframe),
        )
