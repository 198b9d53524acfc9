import math
import unittest

from chartcore.analysis.decomposition import (
    compute_decomposition, seasonal_pattern, standardize_residuals
)
from chartcore.models.config import DecompositionConfig
from chartcore.models.series import LinePoint, values_of

PATTERN = [1.0, -1.0, 2.0, -2.0]


def seasonal_line(n=80, level=10.0):
    return [LinePoint(i, level + 0.1 * i + PATTERN[i % 4]) for i in range(n)]


class TestDecomposition(unittest.TestCase):

    def setUp(self):
        self.config = DecompositionConfig(trend_length=4, season_length=4, residual_std_window=10)

    def test_empty_input(self):
        result = compute_decomposition([], self.config)
        self.assertEqual(result.trend, [])
        self.assertEqual(result.residual, [])

    def test_pattern_has_zero_mean(self):
        result = compute_decomposition(seasonal_line(), self.config)
        self.assertEqual(len(result.pattern), 4)
        self.assertAlmostEqual(sum(result.pattern) / 4, 0.0)

    def test_components_aligned_with_input(self):
        data = seasonal_line()
        result = compute_decomposition(data, self.config)
        for component in (result.trend, result.seasonal, result.residual):
            self.assertEqual([p.time for p in component], [p.time for p in data])

    def test_trend_undefined_at_edges(self):
        result = compute_decomposition(seasonal_line(), self.config)
        trend = values_of(result.trend)
        self.assertEqual(trend[:2], [None, None])
        self.assertEqual(trend[-2:], [None, None])
        self.assertIsNotNone(trend[2])
        self.assertIsNotNone(trend[-3])
        seasonal = values_of(result.seasonal)
        self.assertEqual([s is None for s in seasonal], [t is None for t in trend])

    def test_components_sum_to_value(self):
        cfg = DecompositionConfig(trend_length=4, season_length=4, standardize_residuals=False)
        data = seasonal_line()
        result = compute_decomposition(data, cfg)
        for p, t, s, r in zip(data, result.trend, result.seasonal, result.residual):
            if t.value is not None:
                self.assertAlmostEqual(t.value + s.value + r.value, p.value)

    def test_short_history_keeps_raw_residual(self):
        data = seasonal_line()
        residual = values_of(compute_decomposition(data, self.config).residual)
        raw_cfg = DecompositionConfig(trend_length=4, season_length=4, standardize_residuals=False)
        raw = values_of(compute_decomposition(data, raw_cfg).residual)
        self.assertEqual(residual[:2], [None, None])
        self.assertEqual(residual[2:9], raw[2:9])
        self.assertTrue(all(r is not None for r in raw[2:9]))
        self.assertIsNotNone(residual[9])

    def test_partial_residual_window(self):
        cfg = DecompositionConfig(trend_length=4, season_length=4, residual_std_window=10,
                                  require_full_residual_window=False)
        residual = values_of(compute_decomposition(seasonal_line(), cfg).residual)
        self.assertIsNotNone(residual[3])

    def test_multiplicative_falls_back_on_non_positive(self):
        data = seasonal_line()
        data[5] = LinePoint(5, 0.0)
        cfg = DecompositionConfig(trend_length=4, season_length=4, model='multiplicative')
        self.assertEqual(compute_decomposition(data, cfg).model, 'additive')

    def test_multiplicative(self):
        cfg = DecompositionConfig(trend_length=4, season_length=4, model='multiplicative',
                                  standardize_residuals=False)
        data = seasonal_line()
        result = compute_decomposition(data, cfg)
        self.assertEqual(result.model, 'multiplicative')
        for p, t, s, r in zip(data, result.trend, result.seasonal, result.residual):
            if t.value is not None:
                self.assertGreater(t.value, 0)
                self.assertAlmostEqual(t.value * s.value * r.value, p.value)

    def test_first_residual_with_partial_window_is_raw(self):
        data = seasonal_line(20)
        cfg = DecompositionConfig(trend_length=3, season_length=2, residual_std_window=5,
                                  require_full_residual_window=False)
        raw_cfg = DecompositionConfig(trend_length=3, season_length=2, standardize_residuals=False)
        residual = values_of(compute_decomposition(data, cfg).residual)
        raw = values_of(compute_decomposition(data, raw_cfg).residual)
        self.assertIsNone(residual[0])
        self.assertIsNotNone(raw[1])
        self.assertEqual(residual[1], raw[1])

    def test_multiplicative_short_history_keeps_ratio_residual(self):
        data = seasonal_line()
        cfg = DecompositionConfig(trend_length=4, season_length=4, model='multiplicative',
                                  residual_std_window=10)
        raw_cfg = DecompositionConfig(trend_length=4, season_length=4, model='multiplicative',
                                      standardize_residuals=False)
        residual = values_of(compute_decomposition(data, cfg).residual)
        raw = values_of(compute_decomposition(data, raw_cfg).residual)
        self.assertAlmostEqual(residual[2], raw[2])
        self.assertGreater(residual[2], 0)

    def test_season_length_clamped_to_series(self):
        data = [LinePoint(i, 10.0 + PATTERN[i % 4] + 0.1 * i) for i in range(12)]
        cfg = DecompositionConfig(trend_length=4, season_length=168)
        result = compute_decomposition(data, cfg)
        self.assertEqual(len(result.pattern), 12)
        self.assertAlmostEqual(sum(result.pattern) / 12, 0.0)
        populated = [s.value for s in result.seasonal if s.value is not None]
        self.assertEqual(len(populated), 8)

    def test_trend_length_longer_than_series(self):
        result = compute_decomposition(seasonal_line(6), DecompositionConfig(trend_length=50, season_length=4))
        self.assertTrue(all(p.value is None for p in result.trend))
        self.assertTrue(all(p.value is None for p in result.residual))


class TestDecompositionHelpers(unittest.TestCase):

    def test_seasonal_pattern_smoothing_wraps(self):
        pattern = seasonal_pattern([3.0, 0.0, 0.0], 3, smoothing=3, normalize=False)
        self.assertEqual(pattern, [1.0, 1.0, 1.0])

    def test_seasonal_pattern_without_observations(self):
        self.assertEqual(seasonal_pattern([None, None], 2), [0.0, 0.0])

    def test_standardize_residuals(self):
        result = standardize_residuals([1, 2, 3, 4, 5], 5)
        self.assertEqual(result[:4], [1, 2, 3, 4])
        self.assertAlmostEqual(result[4], 2 / math.sqrt(2))

    def test_zero_deviation_divides_by_one(self):
        self.assertEqual(standardize_residuals([2.0] * 5, 5)[-1], 0.0)


if __name__ == '__main__':
    unittest.main()
