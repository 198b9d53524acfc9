"""
Unit tests for the indicator library.
"""

import math
import unittest

import pytest

from chartcore.models.ohlcv import Bar
from chartcore.models.series import LinePoint, values_of
from chartcore.utils.numeric import NAN
from chartcore.indicators.atr import (
    compute_atr, compute_atr_percent, compute_true_range, estimate_atr_range, true_range
)
from chartcore.indicators.bands import compute_bollinger, compute_donchian, compute_keltner
from chartcore.indicators.momentum import (
    compute_bias, compute_macd, compute_momentum, compute_roc, compute_rsi, compute_trix
)
from chartcore.indicators.moving_average import compute_dma, compute_ema, compute_sma
from chartcore.indicators.oscillators import compute_cci, compute_kdj, compute_stochastic, compute_williams_r
from chartcore.indicators.trend import SarState, compute_adx, compute_ichimoku, compute_parabolic_sar, sar_step
from chartcore.indicators.volume import compute_obv, compute_volume, compute_vr, compute_vwap


def line(values):
    return [LinePoint(i, v) for i, v in enumerate(values)]


def make_bars(closes, spread=1.0, volume=100.0):
    return [
        Bar(open=c, high=c + spread, low=c - spread, close=c, volume=volume, time=i)
        for i, c in enumerate(closes)
    ]


def zigzag(n, base=100.0):
    return [base + (i % 7) - (i % 3) * 1.5 + i * 0.2 for i in range(n)]


class TestMovingAverages(unittest.TestCase):

    def test_sma_reference(self):
        result = compute_sma(line([1, 2, 3, 4, 5]), 3)
        self.assertEqual(values_of(result), [2, 3, 4])
        self.assertEqual([p.time for p in result], [2, 3, 4])

    def test_sma_length(self):
        for length in range(1, 8):
            self.assertEqual(len(compute_sma(line(range(5)), length)), max(0, 5 - length + 1))

    def test_ema_seeded_with_mean(self):
        result = compute_ema(line([1, 2, 3, 4]), 3)
        self.assertEqual(result[0], LinePoint(2, 2.0))
        self.assertAlmostEqual(result[1].value, 4 * 0.5 + 2 * 0.5)

    def test_ema_deterministic(self):
        data = line(zigzag(60))
        self.assertEqual(compute_ema(data, 10), compute_ema(data, 10))

    def test_ema_insufficient_data(self):
        self.assertEqual(compute_ema(line([1, 2]), 3), [])

    def test_dma_tail_aligned(self):
        data = line(range(10))
        result = compute_dma(data, 2, 4)
        self.assertEqual(len(result), 7)
        # SMA2 - SMA4 of a unit ramp is 1
        self.assertTrue(all(p.value == pytest.approx(1.0) for p in result))
        self.assertEqual(result[-1].time, 9)


class TestMomentum(unittest.TestCase):

    def test_rsi_all_gains(self):
        result = compute_rsi(line(range(20)), 14)
        self.assertEqual(len(result), 6)
        self.assertAlmostEqual(result[0].value, 100 - 100 / 101)

    def test_rsi_bounded(self):
        result = compute_rsi(line(zigzag(80)), 14)
        self.assertTrue(all(0 <= p.value <= 100 for p in result))

    def test_momentum_and_roc(self):
        data = line([10, 11, 12, 0, 14])
        self.assertEqual(values_of(compute_momentum(data, 2)), [2, -11, 2])
        roc = compute_roc(line([0, 5, 10]), 1)
        self.assertEqual(roc[0].value, 0.0)
        self.assertAlmostEqual(roc[1].value, 100.0)

    def test_bias_zero_average(self):
        result = compute_bias(line([0, 0, 0, 2]), 2)
        self.assertEqual(values_of(result), [None, None, pytest.approx(100.0)])

    def test_trix_signal(self):
        data = line(zigzag(120))
        result = compute_trix(data, 5, 3)
        self.assertEqual(len(result.signal), len(result.trix) - 2)
        self.assertEqual(compute_trix(data, 5, 1).signal, [])

    def test_macd_shares_tail(self):
        result = compute_macd(line(zigzag(40)), 3, 5, 2)
        self.assertEqual(len(result.macd), 35)
        self.assertEqual(len(result.signal), 35)
        self.assertEqual(len(result.histogram), 35)
        last = result.histogram[-1]
        self.assertAlmostEqual(last.value, result.macd[-1].value - result.signal[-1].value)
        self.assertEqual(last.rising, last.value >= 0)

    def test_macd_insufficient(self):
        self.assertEqual(compute_macd(line([1, 2, 3]), 3, 5, 2).macd, [])


class TestOscillators(unittest.TestCase):

    def test_flat_fallbacks(self):
        bars = [Bar(5, 5, 5, 5, 1, i) for i in range(10)]
        self.assertTrue(all(p.value == 50.0 for p in compute_stochastic(bars, 5, 3).k))
        self.assertTrue(all(p.value == -50.0 for p in compute_williams_r(bars, 5)))
        self.assertTrue(all(p.value == 0.0 for p in compute_cci(bars, 5)))

    def test_stochastic_range(self):
        result = compute_stochastic(make_bars(zigzag(50)), 14, 3)
        self.assertEqual(len(result.k), 37)
        self.assertEqual(len(result.d), 35)
        self.assertTrue(all(0 <= p.value <= 100 for p in result.k))

    def test_kdj_j_derived(self):
        result = compute_kdj(make_bars(zigzag(50)), 9, 3)
        self.assertEqual(len(result.j), len(result.d))
        for k, d, j in zip(result.k[-len(result.d):], result.d, result.j):
            self.assertAlmostEqual(j.value, 3 * k.value - 2 * d.value)
            self.assertEqual(j.time, d.time)


class TestVolatilityAndBands(unittest.TestCase):

    def test_true_range(self):
        bars = [Bar(10, 11, 9, 10, 0, 0), Bar(12, 14, 12, 13, 0, 1)]
        self.assertEqual(compute_true_range(bars), [LinePoint(1, 4.0)])

    def test_atr_offset_and_constant_range(self):
        bars = make_bars([100.0] * 20)
        result = compute_atr(bars, 14)
        self.assertEqual(len(result), 6)
        self.assertEqual(result[0].time, 14)
        self.assertTrue(all(p.value == pytest.approx(2.0) for p in result))
        self.assertAlmostEqual(compute_atr_percent(bars, 14)[0].value, 2.0)

    def test_estimate_atr_range(self):
        self.assertAlmostEqual(estimate_atr_range(make_bars([100.0] * 5)), 2.0)
        self.assertTrue(math.isnan(estimate_atr_range(make_bars([100.0]))))

    def test_bollinger_constant_series(self):
        result = compute_bollinger(line([3.0] * 10), 5, 2)
        self.assertEqual(values_of(result.upper), values_of(result.basis))
        self.assertEqual(values_of(result.lower), values_of(result.basis))

    def test_donchian(self):
        result = compute_donchian(make_bars([1, 2, 3, 4]), 2)
        self.assertEqual(values_of(result.upper), [3, 4, 5])
        self.assertEqual(values_of(result.lower), [0, 1, 2])
        self.assertEqual(values_of(result.basis), [1.5, 2.5, 3.5])

    def test_keltner_bands_follow_atr(self):
        bars = make_bars([100.0] * 30)
        result = compute_keltner(bars, line([b.close for b in bars]), 5, 10, 1.5)
        self.assertEqual(len(result.basis), 26)
        self.assertEqual(len(result.upper), 20)
        self.assertAlmostEqual(result.upper[-1].value, 103.0)
        self.assertAlmostEqual(result.lower[-1].value, 97.0)


class TestTrend(unittest.TestCase):

    def test_adx_offsets(self):
        bars = make_bars(zigzag(30))
        result = compute_adx(bars, 5)
        self.assertEqual(len(result.di_plus), 25)
        self.assertEqual(result.di_plus[0].time, 5)
        self.assertEqual(len(result.adx), 20)
        self.assertEqual(result.adx[0].time, 10)
        self.assertTrue(all(0 <= p.value <= 100 for p in result.adx))

    def test_adx_insufficient(self):
        self.assertEqual(compute_adx(make_bars([1, 2, 3]), 5).di_plus, [])

    def test_parabolic_sar_flip(self):
        closes = [10.0 + i for i in range(10)] + [5.0]
        bars = make_bars(closes, spread=0.5)
        result = compute_parabolic_sar(bars)
        self.assertEqual(len(result), 10)
        for point, bar in zip(result[:-1], bars[1:-1]):
            self.assertLessEqual(point.value, bar.low)
        # Breach flips short with SAR at the prior extreme high
        self.assertEqual(result[-1].value, 19.5)

    def test_ichimoku_omits_shifted_points(self):
        bars = make_bars([float(i) for i in range(10)])
        result = compute_ichimoku(bars, 2, 3, 4, 3)
        self.assertEqual(len(result.tenkan), 9)
        self.assertEqual(len(result.kijun), 8)
        self.assertEqual(len(result.chikou), 7)
        self.assertEqual(result.chikou[0], LinePoint(0, 3.0))
        self.assertEqual(len(result.span_a), 5)
        self.assertEqual(len(result.span_b), 4)
        self.assertEqual(result.span_a[-1].time, 9)
        self.assertEqual(result.span_b[-1].time, 9)


class TestVolume(unittest.TestCase):

    def test_obv(self):
        bars = make_bars([1, 2, 2, 1], volume=10)
        self.assertEqual(values_of(compute_obv(bars)), [10, 10, 0])

    def test_vwap_constant_volume(self):
        bars = make_bars([1, 3], volume=10)
        self.assertEqual(values_of(compute_vwap(bars)), [1, 2])

    def test_vwap_zero_volume_uses_typical_price(self):
        bars = make_bars([4], volume=0)
        self.assertEqual(values_of(compute_vwap(bars)), [4])

    def test_vr(self):
        bars = make_bars([1, 2, 1, 1], volume=10)
        # up 10, down 10, same 10 -> (10 + 5) / (10 + 5)
        self.assertEqual(values_of(compute_vr(bars, 3)), [100.0])

    def test_volume_histogram(self):
        bars = [Bar(2, 3, 1, 1, 5, 0), Bar(1, 3, 1, 2, None, 1)]
        result = compute_volume(bars)
        self.assertEqual([(p.value, p.rising) for p in result], [(5, False), (0.0, True)])


def gap_bar(time):
    return Bar(open=NAN, high=NAN, low=NAN, close=NAN, volume=100.0, time=time)


class TestMissingInputs(unittest.TestCase):
    """A missing point yields None and the running state carries across it."""

    def test_ema_gap(self):
        result = compute_ema(line([1, 2, 3, None, 5]), 3)
        self.assertEqual([p.time for p in result], [2, 3, 4])
        self.assertEqual(values_of(result), [2.0, None, 3.5])
        self.assertEqual(result[-1].value, compute_ema(line([1, 2, 3, 5]), 3)[-1].value)

    def test_rsi_gap(self):
        result = compute_rsi(line([1, 2, 3, float('nan'), 2]), 2)
        self.assertEqual([p.time for p in result], [2, 3, 4])
        self.assertIsNone(result[1].value)
        self.assertEqual(result[2].value, 50.0)
        self.assertEqual(result[2].value, compute_rsi(line([1, 2, 3, 2]), 2)[-1].value)

    def test_atr_gap(self):
        bars = make_bars([10, 11, 12, 13, 14])
        bars[3] = gap_bar(3)
        bars.append(Bar(open=15, high=18, low=12, close=15, volume=100.0, time=5))
        result = compute_atr(bars, 2)
        self.assertEqual([p.time for p in result], [2, 3, 4, 5])
        self.assertEqual(values_of(result), [2.0, None, None, 4.0])
        self.assertEqual(result[-1].value, (2.0 + true_range(bars[4], bars[5])) / 2)

    def test_adx_gap(self):
        bars = make_bars([10.0 + i for i in range(30)])
        bars[15] = gap_bar(15)
        result = compute_adx(bars, 5)
        self.assertEqual([p.time for p in result.di_plus], list(range(5, 30)))
        self.assertEqual([p.time for p in result.adx], list(range(10, 30)))
        gaps = {15, 16}
        for series, expected in ((result.di_plus, 50.0), (result.di_minus, 0.0), (result.adx, 100.0)):
            for p in series:
                if p.time in gaps:
                    self.assertIsNone(p.value)
                else:
                    self.assertEqual(p.value, expected)

    def test_parabolic_sar_gap(self):
        clean = make_bars([10.0 + i for i in range(10)], spread=0.5)
        bars = list(clean)
        bars[5] = gap_bar(5)
        result = compute_parabolic_sar(bars)
        self.assertEqual(len(result), 9)
        self.assertEqual(values_of(result)[4:6], [None, None])
        self.assertEqual(values_of(result)[:4], values_of(compute_parabolic_sar(clean))[:4])

        state = SarState(is_long=True, af=0.02, ep=bars[1].high, sar=bars[0].low)
        for i in range(1, 5):
            state = sar_step(state, bars, i, 0.02, 0.2)
        state = sar_step(state, bars, 7, 0.02, 0.2)
        self.assertEqual(result[6].value, state.sar)
        self.assertLessEqual(result[6].value, bars[7].low)


if __name__ == '__main__':
    unittest.main()
