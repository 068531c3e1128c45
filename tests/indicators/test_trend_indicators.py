"""Tests for trend indicators (EMA, MACD, HMA, SAR, VWAO, ATSO)."""

import math

import pytest
from tafusion.indicators.base_indicator import IndicatorError, InsufficientDataError
from tafusion.indicators.trend_indicators import (
    AdaptiveTrendStrengthOscillator,
    EMAIndicator,
    HullMovingAverage,
    MACDIndicator,
    ParabolicSAR,
    VolumeWeightedAroonOscillator,
)
from tafusion.utils.config import IndicatorConfig


def feed_closes(indicator, closes):
    for close in closes:
        indicator.add(close)
    return indicator


class TestEMAIndicator:
    """Tests for streaming EMA."""

    def test_seeded_with_simple_average(self):
        ema = feed_closes(EMAIndicator(period=3), [1, 2, 3])
        assert ema.calculate() == pytest.approx(2.0)

    def test_smoothing_step(self):
        ema = feed_closes(EMAIndicator(period=3), [1, 2, 3, 4])
        assert ema.calculate() == pytest.approx(3.0)

    def test_not_ready_before_period(self):
        ema = feed_closes(EMAIndicator(period=3), [1, 2])
        assert not ema.ready
        assert ema.values == []

    def test_accepts_negative_inputs(self):
        ema = feed_closes(EMAIndicator(period=2), [-4, -2])
        assert ema.calculate() == pytest.approx(-3.0)

    def test_non_finite_input_raises(self):
        with pytest.raises(ValueError, match="finite"):
            EMAIndicator().add(float("nan"))


class TestMACDIndicator:
    """Tests for Moving Average Convergence Divergence."""

    def test_macd_name(self):
        assert MACDIndicator(12, 26, 9).name == "MACD_12_26_9"

    def test_fast_not_below_slow_raises(self):
        with pytest.raises(ValueError, match="fast period"):
            MACDIndicator(fast_period=26, slow_period=12)

    def test_constant_prices(self):
        macd = feed_closes(MACDIndicator(2, 3, 2), [10] * 6)

        line, signal, histogram = macd.calculate()
        assert line == pytest.approx(0.0)
        assert signal == pytest.approx(0.0)
        assert histogram == pytest.approx(0.0)

    def test_uptrend_positive_macd(self):
        macd = feed_closes(MACDIndicator(2, 4, 2), [float(i) for i in range(1, 15)])

        line, signal, histogram = macd.calculate()
        assert line > 0
        assert histogram == pytest.approx(line - signal)

    def test_signal_lags_macd_line(self):
        macd = feed_closes(MACDIndicator(2, 3, 2), [1, 2, 3])
        assert len(macd.macd_values) == 1
        assert macd.signal_values == []

    def test_crossover_needs_signal_history(self):
        macd = feed_closes(MACDIndicator(2, 3, 2), [1, 2, 3, 4])
        with pytest.raises(InsufficientDataError):
            macd.is_bullish_crossover()

    def test_bullish_crossover_after_reversal(self):
        macd = feed_closes(MACDIndicator(2, 3, 2), [10, 10, 10, 9, 7, 4, 10])
        assert macd.is_bullish_crossover()
        assert not macd.is_bearish_crossover()

    def test_plot_series_end_on_same_bar(self):
        macd = feed_closes(MACDIndicator(2, 3, 2), [1, 2, 3, 4])
        line, signal, histogram = macd.get_plot_data(start_time=1000, interval=60)

        assert line.x == [0.0, 1.0]
        assert signal.x == [1.0]
        assert histogram.x == [1.0]
        assert signal.timestamp == [1060]
        assert histogram.type == "bar"

    def test_reset(self):
        macd = feed_closes(MACDIndicator(2, 3, 2), [1, 2, 3, 4, 5])
        macd.reset()
        assert macd.macd_values == []
        assert macd.signal_values == []
        assert macd.histogram_values == []


class TestHullMovingAverage:
    """Tests for Hull Moving Average."""

    def test_rejects_non_positive_price(self):
        hma = HullMovingAverage()
        with pytest.raises(ValueError, match="positive"):
            hma.add(0.0)
        with pytest.raises(ValueError):
            hma.add(-1.0)

    def test_tracks_linear_series_without_lag(self):
        hma = feed_closes(HullMovingAverage(period=4), [1, 2, 3, 4, 5, 6])
        assert hma.values == pytest.approx([5.0, 6.0])

    def test_trend_direction(self):
        assert feed_closes(HullMovingAverage(4), [1, 2, 3, 4, 5, 6]).get_trend_direction() == "Bullish"
        assert feed_closes(HullMovingAverage(4), [6, 5, 4, 3, 2, 1]).get_trend_direction() == "Bearish"
        assert feed_closes(HullMovingAverage(4), [3] * 6).get_trend_direction() == "Neutral"

    def test_bullish_crossover(self):
        hma = feed_closes(HullMovingAverage(4), [5, 5, 5, 5, 4, 8])
        assert hma.is_bullish_crossover()
        assert not hma.is_bearish_crossover()

    def test_bearish_crossover(self):
        hma = feed_closes(HullMovingAverage(4), [5, 5, 5, 5, 6, 2])
        assert hma.is_bearish_crossover()
        assert not hma.is_bullish_crossover()

    def test_queries_need_two_values(self):
        hma = feed_closes(HullMovingAverage(4), [1, 2, 3, 4, 5])
        with pytest.raises(InsufficientDataError):
            hma.is_bullish_crossover()
        with pytest.raises(InsufficientDataError):
            hma.get_trend_direction()

    def test_period_below_talib_minimum(self):
        hma = feed_closes(HullMovingAverage(period=2), [1, 2, 3])
        assert hma.values == pytest.approx([7 / 3, 10 / 3])

    def test_plot_data(self):
        hma = feed_closes(HullMovingAverage(4), [5, 5, 5, 5, 4, 8])
        series = hma.get_plot_data()

        assert [s.name for s in series] == ["Hull Moving Average", "Price", "Signals"]
        assert series[1].y == [4, 8]
        assert series[2].y == [1.0]


class TestParabolicSAR:
    """Tests for Parabolic SAR."""

    def test_invalid_acceleration_raises(self):
        with pytest.raises(ValueError):
            ParabolicSAR(step=0.0)
        with pytest.raises(ValueError):
            ParabolicSAR(step=0.1, max_step=0.05)

    def test_initialised_on_second_bar(self):
        sar = ParabolicSAR()
        sar.add(10, 9)
        assert sar.values == []
        assert not sar.is_uptrend()

        sar.add(11, 10)
        assert sar.values == [9]
        assert sar.is_uptrend()

    def test_acceleration_and_reversal(self):
        sar = ParabolicSAR()
        for bar in [(10, 9), (11, 10), (12, 11)]:
            sar.add(*bar)
        assert sar.values[-1] == pytest.approx(9.04)

        sar.add(8, 7)
        assert not sar.is_uptrend()
        assert sar.values[-1] == pytest.approx(12.0)

    def test_invalid_bar_raises(self):
        with pytest.raises(ValueError):
            ParabolicSAR().add(-1, -2)
        with pytest.raises(ValueError):
            ParabolicSAR().add(9, 10)

    def test_reset(self):
        sar = ParabolicSAR()
        sar.add(10, 9)
        sar.add(11, 10)
        sar.reset()
        assert sar.values == []
        assert not sar.is_uptrend()


class TestVolumeWeightedAroonOscillator:
    """Tests for VWAO."""

    @staticmethod
    def feed(vwao, bars, volume=100.0):
        for high, low in bars:
            vwao.add(high, low, (high + low) / 2, volume)
        return vwao

    def test_rising_highs_max_reading(self):
        vwao = self.feed(VolumeWeightedAroonOscillator(2), [(10, 9), (11, 10), (12, 11)])
        assert vwao.values == [100.0]

    def test_falling_lows_min_reading(self):
        vwao = self.feed(VolumeWeightedAroonOscillator(2), [(12, 11), (11, 10), (10, 9)])
        assert vwao.values == [-100.0]

    def test_thin_volume_dampens_extreme(self):
        vwao = VolumeWeightedAroonOscillator(2)
        for (high, low), volume in zip([(10, 9), (11, 10), (12, 11)], [100, 100, 10]):
            vwao.add(high, low, low, volume)
        assert vwao.calculate() == pytest.approx(100 * 10 / 70)

    def test_zero_volume_window_raises(self):
        vwao = VolumeWeightedAroonOscillator(2)
        vwao.add(10, 9, 9.5, 0)
        vwao.add(10, 9, 9.5, 0)
        with pytest.raises(IndicatorError, match="volume is zero"):
            vwao.add(10, 9, 9.5, 0)

    def test_invalid_input_raises(self):
        with pytest.raises(ValueError, match="invalid price or volume"):
            VolumeWeightedAroonOscillator().add(9, 10, 9.5, 100)
        with pytest.raises(ValueError, match="invalid price or volume"):
            VolumeWeightedAroonOscillator().add(10, 9, 9.5, -1)

    def test_strong_trend_crossover(self):
        vwao = self.feed(
            VolumeWeightedAroonOscillator(2),
            [(10, 9), (10, 9), (10, 9), (11, 10), (12, 11)],
        )
        # readings 0, 50, 100; only the last max(period, 2) are kept
        assert vwao.values == [50.0, 100.0]
        assert vwao.is_bullish_crossover()
        assert not vwao.is_bearish_crossover()

    def test_crossover_needs_two_values(self):
        vwao = self.feed(VolumeWeightedAroonOscillator(2), [(10, 9), (11, 10), (12, 11)])
        with pytest.raises(InsufficientDataError):
            vwao.is_bullish_crossover()

    def test_plot_data(self):
        vwao = self.feed(
            VolumeWeightedAroonOscillator(2),
            [(10, 9), (10, 9), (10, 9), (11, 10), (12, 11)],
        )
        series = vwao.get_plot_data()
        assert [s.name for s in series] == ["Volume Weighted Aroon Oscillator", "Signals"]
        assert series[1].x == [1.0]


class TestAdaptiveTrendStrengthOscillator:
    """Tests for ATSO."""

    @staticmethod
    def build():
        return AdaptiveTrendStrengthOscillator(
            min_period=2, max_period=3, volatility_period=3,
            config=IndicatorConfig(atso_ema_period=1),
        )

    @staticmethod
    def feed(atso, closes):
        for close in closes:
            atso.add(close + 1, close - 1, close)
        return atso

    def test_invalid_periods_raise(self):
        with pytest.raises(ValueError, match="ATSO periods"):
            AdaptiveTrendStrengthOscillator(min_period=0)
        with pytest.raises(ValueError, match="ATSO periods"):
            AdaptiveTrendStrengthOscillator(min_period=5, max_period=3)

    def test_invalid_ema_period_raises(self):
        with pytest.raises(ValueError, match="EMA period"):
            AdaptiveTrendStrengthOscillator(config=IndicatorConfig(atso_ema_period=0))

    def test_uptrend_reading(self):
        atso = self.feed(self.build(), [10, 11, 12])
        assert atso.values == [100.0]

    def test_downtrend_reading(self):
        atso = self.feed(self.build(), [12, 11, 10])
        assert atso.values == [-100.0]

    def test_crossover_is_pure(self):
        atso = self.build()
        assert not atso.is_bullish_crossover()
        assert not atso.is_bearish_crossover()

        self.feed(atso, [12, 11, 10, 15])
        assert atso.values[-1] == pytest.approx(100 / 13)
        assert atso.is_bullish_crossover()
        assert not atso.is_bearish_crossover()

    def test_adaptive_period_shortens_on_wide_bars(self):
        atso = self.feed(self.build(), [10, 11, 12])
        assert atso.adaptive_period() == 3

        atso.add(20, 10, 15)
        assert atso.adaptive_period() == 2

    def test_infinite_high_keeps_longest_period(self):
        atso = self.feed(self.build(), [10, 11, 12])
        atso.add(math.inf, 11, 12)

        assert atso.adaptive_period() == 3
        assert all(math.isfinite(v) for v in atso.values)

    def test_reset(self):
        atso = self.feed(self.build(), [10, 11, 12])
        atso.reset()
        assert atso.values == []
        assert atso.get_plot_data() == []
