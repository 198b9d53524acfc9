"""
Unit tests for core models.
"""

import math
import unittest
from datetime import datetime, timezone, timedelta

from chartcore.models.ohlcv import Bar, OHLCV
from chartcore.models.config import (
    ConfigHash, DecompositionConfig, IndicatorSettings, MissingValueStrategy,
    OutlierConfig, PreprocessingConfig, ChartConfig
)
from chartcore.models.series import LinePoint, close_line
from chartcore.utils.numeric import F, clamp_length, is_missing


class TestBar(unittest.TestCase):
    """Test Bar model."""

    def test_bar_creation(self):
        """Test bar creation and validation."""
        timestamp = datetime.now(timezone.utc)
        bar = Bar(open='1.1000', high=1.1010, low=1.0990, close=1.1005, volume=1000000, time=timestamp)

        self.assertEqual(bar.open, 1.1)
        self.assertTrue(bar.is_bullish)
        self.assertAlmostEqual(bar.body_size, 0.0005)
        self.assertTrue(bar.is_complete)

    def test_bar_validation(self):
        """Test bar validation."""
        with self.assertRaises(ValueError):
            Bar(open=1.1000, high=1.0990, low=1.1010, close=1.1005, volume=1000000, time=0)

    def test_missing_prices_allowed(self):
        bar = Bar(open=1.0, high=2.0, low=0.5, close=None, volume=None, time=0)
        self.assertFalse(bar.is_complete)
        self.assertTrue(math.isnan(bar.close))
        self.assertEqual(bar.volume_or_zero, 0.0)

    def test_from_dict_accepts_timestamp_key(self):
        bar = Bar.from_dict({'timestamp': 42, 'open': 1, 'high': 2, 'low': 1, 'close': 2})
        self.assertEqual(bar.time, 42)
        self.assertEqual(bar.volume, 0.0)
        self.assertEqual(Bar.from_dict(bar.to_dict()), bar)


class TestOHLCV(unittest.TestCase):
    """Test OHLCV model."""

    def setUp(self):
        """Set up test data."""
        timestamp = datetime.now(timezone.utc)
        self.bars = [
            Bar(open=1.1 + i * 0.0001, high=1.101 + i * 0.0001, low=1.099 + i * 0.0001,
                close=1.1005 + i * 0.0001, volume=1000000, time=timestamp + timedelta(minutes=15 * i))
            for i in range(5)
        ]

    def test_ohlcv_creation(self):
        """Test OHLCV creation."""
        ohlcv = OHLCV(symbol='EURUSD', bars=tuple(self.bars), timeframe='15m')

        self.assertEqual(ohlcv.symbol, 'EURUSD')
        self.assertEqual(ohlcv.length, 5)
        self.assertEqual(ohlcv.latest_bar, self.bars[-1])

    def test_append_keeps_original(self):
        ohlcv = OHLCV(symbol='EURUSD', bars=tuple(self.bars[:4]), timeframe='15m')
        longer = ohlcv.append(self.bars[4])
        self.assertEqual(ohlcv.length, 4)
        self.assertEqual(longer.length, 5)

    def test_append_rejects_older_bar(self):
        ohlcv = OHLCV(symbol='EURUSD', bars=tuple(self.bars), timeframe='15m')
        with self.assertRaises(ValueError):
            ohlcv.append(self.bars[0])


class TestNumeric(unittest.TestCase):

    def test_float_conversion(self):
        self.assertEqual(F('1.5'), 1.5)
        self.assertTrue(math.isnan(F(None)))
        self.assertTrue(math.isnan(F('abc')))
        with self.assertRaises(TypeError):
            F(True)

    def test_missing(self):
        self.assertTrue(is_missing(None))
        self.assertTrue(is_missing(float('nan')))
        self.assertTrue(is_missing(float('inf')))
        self.assertFalse(is_missing(0.0))

    def test_clamp_length(self):
        self.assertEqual(clamp_length(0), 1)
        self.assertEqual(clamp_length(2.7), 2)
        self.assertEqual(clamp_length('x', 3), 3)
        self.assertEqual(clamp_length(1, 5), 5)

    def test_close_line_marks_missing(self):
        bars = [Bar(1, 1, 1, 1, 0, 0), Bar(1, 1, 1, None, 0, 1)]
        self.assertEqual(close_line(bars), [LinePoint(0, 1.0), LinePoint(1, None)])


class TestConfigModels(unittest.TestCase):

    def test_indicator_settings_clamped(self):
        settings = IndicatorSettings(ema_length=0, bb_mult=-1, renko_box_size='bad')
        self.assertEqual(settings.ema_length, 1)
        self.assertEqual(settings.bb_mult, 0.0)
        self.assertEqual(settings.renko_box_size, 0.0)

    def test_indicator_settings_ignores_unknown_keys(self):
        settings = IndicatorSettings.from_dict({'rsi_length': 7, 'unknown': 1})
        self.assertEqual(settings.rsi_length, 7)

    def test_decomposition_minimums(self):
        cfg = DecompositionConfig(trend_length=1, season_length=1, season_smoothing=0, residual_std_window=2)
        self.assertEqual(cfg.trend_length, 3)
        self.assertEqual(cfg.season_length, 2)
        self.assertEqual(cfg.season_smoothing, 1)
        self.assertEqual(cfg.residual_std_window, 5)

    def test_decomposition_season_from_timeframe(self):
        self.assertEqual(DecompositionConfig.from_dict({}, '1h').season_length, 168)
        self.assertEqual(DecompositionConfig.from_dict({}, '1d').season_length, 7)
        self.assertEqual(DecompositionConfig.from_dict({'season_length': 12}, '1d').season_length, 12)

    def test_preprocessing_from_dict(self):
        cfg = PreprocessingConfig.from_dict({'missing_values': {'strategy': 'interpolate'}})
        self.assertEqual(cfg.missing_values.strategy, MissingValueStrategy.INTERPOLATE)
        self.assertFalse(cfg.outliers.enabled)

    def test_unknown_enum_rejected(self):
        with self.assertRaises(ValueError):
            PreprocessingConfig.from_dict({'scaling': {'method': 'bogus'}})

    def test_winsor_percentiles_ordered(self):
        cfg = OutlierConfig(winsor_lower_percentile=95, winsor_upper_percentile=5)
        self.assertEqual((cfg.winsor_lower_percentile, cfg.winsor_upper_percentile), (5, 95))

    def test_config_hash_deterministic(self):
        a = ConfigHash.of(IndicatorSettings())
        b = ConfigHash.of(IndicatorSettings())
        c = ConfigHash.of(IndicatorSettings(ema_length=21))
        self.assertEqual(a.hash_value, b.hash_value)
        self.assertNotEqual(a.hash_value, c.hash_value)

    def test_chart_config_hash(self):
        self.assertEqual(
            ChartConfig().config_hash.hash_value,
            ChartConfig.from_dicts().config_hash.hash_value
        )


if __name__ == '__main__':
    unittest.main()
