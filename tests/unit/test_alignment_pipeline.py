"""
Unit tests for base-index alignment and the indicator pipeline.
"""

import unittest

from chartcore.models.config import IndicatorSettings, PreprocessingConfig
from chartcore.models.ohlcv import Bar
from chartcore.models.series import HistogramPoint, LinePoint
from chartcore.orchestration.alignment import map_hist_to_base, map_to_base, map_volume_to_base
from chartcore.orchestration.pipeline import IndicatorPipeline


def make_bars(n):
    bars = []
    for i in range(n):
        close = 100 + (i % 9) - (i % 4) * 0.7 + i * 0.05
        bars.append(Bar(open=close - 0.3, high=close + 1, low=close - 1, close=close, volume=100 + i, time=i * 300))
    return bars


class TestAlignment(unittest.TestCase):

    def setUp(self):
        self.base = [None] * 4

    def test_right_aligned(self):
        points = [LinePoint(2, 100), LinePoint(3, 200)]
        self.assertEqual(map_to_base(self.base, points), [None, None, 100, 200])

    def test_empty_output(self):
        self.assertEqual(map_to_base(self.base, []), [None] * 4)
        self.assertEqual(map_to_base([], [LinePoint(0, 1)]), [])

    def test_longer_output_keeps_tail(self):
        points = [LinePoint(i, i) for i in range(6)]
        self.assertEqual(map_to_base(self.base, points), [2, 3, 4, 5])

    def test_missing_values_become_none(self):
        points = [LinePoint(0, float('nan')), LinePoint(1, 5)]
        self.assertEqual(map_to_base(self.base, points), [None, None, None, 5])

    def test_trailing_gap(self):
        points = [LinePoint(0, 1), LinePoint(1, 2)]
        self.assertEqual(map_to_base(self.base, points, trailing_gap=1), [None, 1, 2, None])
        self.assertEqual(map_to_base(self.base, points, trailing_gap=4), [None] * 4)

    def test_histogram(self):
        hist = [HistogramPoint(3, -1.0, False)]
        self.assertEqual(map_hist_to_base(self.base, hist), [None, None, None, hist[0]])

    def test_volume_normalized(self):
        volume = [HistogramPoint(0, 10.0, True), HistogramPoint(1, 20.0, False)]
        result = map_volume_to_base([None, None], volume)
        self.assertAlmostEqual(result[0].value, 0.1)
        self.assertAlmostEqual(result[1].value, 0.2)
        self.assertFalse(result[1].rising)

    def test_volume_zero_max(self):
        volume = [HistogramPoint(0, 0.0, True)]
        self.assertEqual(map_volume_to_base([None], volume)[0].value, 0.0)


class TestIndicatorPipeline(unittest.TestCase):

    def setUp(self):
        self.bars = make_bars(150)

    def test_every_series_aligned_to_bars(self):
        result = IndicatorPipeline().run(self.bars, '5m', 'candles')
        self.assertEqual(result.bars, self.bars)
        self.assertIn('EMA 50', result.aligned)
        self.assertIn('BB Upper', result.aligned)
        for name, values in result.aligned.items():
            self.assertEqual(len(values), len(self.bars), name)

    def test_warmup_slots_are_empty(self):
        result = IndicatorPipeline().run(self.bars, '5m')
        self.assertEqual(result.aligned['SMA 20'][:19], [None] * 19)
        self.assertIsNotNone(result.aligned['SMA 20'][19])
        self.assertEqual(result.aligned['Ichimoku Chikou'][-26:], [None] * 26)
        self.assertEqual(result.aligned['Ichimoku Chikou'][0], self.bars[26].close)

    def test_deterministic(self):
        first = IndicatorPipeline().run(self.bars, '15m', 'heikin')
        second = IndicatorPipeline().run(self.bars, '15m', 'heikin')
        self.assertEqual(first.config_hash.hash_value, second.config_hash.hash_value)
        self.assertEqual(first.aligned['RSI 14'], second.aligned['RSI 14'])

    def test_settings_change_hash(self):
        a = IndicatorPipeline().run(self.bars, '5m')
        b = IndicatorPipeline(IndicatorSettings(ema_length=21)).run(self.bars, '5m')
        self.assertNotEqual(a.config_hash.hash_value, b.config_hash.hash_value)
        self.assertIn('EMA 21', b.aligned)

    def test_synthetic_mode(self):
        pipeline = IndicatorPipeline(IndicatorSettings(renko_box_size=1.0))
        result = pipeline.run(self.bars, '5m', 'renko')
        self.assertEqual(result.mode, 'renko')
        self.assertNotEqual(result.bars, self.bars)
        self.assertEqual(len(result.aligned['Volume']), len(result.bars))

    def test_preprocessed_close(self):
        pipeline = IndicatorPipeline(preprocessing=PreprocessingConfig(enabled=False))
        result = pipeline.run(self.bars, '5m')
        self.assertEqual(result.aligned['Close Preprocessed'], [b.close for b in self.bars])


if __name__ == '__main__':
    unittest.main()
