"""Trend-following indicators fed one bar at a time."""

import math
from collections import deque
from typing import Optional

import numpy as np
import talib

from ..utils.config import IndicatorConfig
from .base_indicator import (
    BaseIndicator,
    IndicatorError,
    clamp,
    is_non_negative_price,
    is_valid_price,
    is_valid_volume,
)
from .plotting import PlotData, make_series, make_marker_series


def _check_period(label: str, period: int) -> None:
    if period < 1:
        raise ValueError(f"{label} must be at least 1, got {period}")


def _wma(values, period: int) -> float:
    """Weighted moving average of the last ``period`` values, newest weighted highest."""
    window = np.asarray(list(values)[-period:], dtype=float)
    # TA-Lib rejects a period of 1
    if period == 1:
        return float(window[-1])
    return float(talib.WMA(window, timeperiod=period)[-1])


class EMAIndicator(BaseIndicator):
    """Exponential Moving Average.

    The first value is the simple average of the first ``period`` inputs;
    after that each input moves the average by alpha = 2 / (period + 1).
    Accepts any finite input so it can smooth oscillators as well as prices.
    """

    def __init__(self, period: int = 20):
        _check_period("EMA period", period)
        self.period = period
        self._alpha = 2.0 / (period + 1)
        self._seed: list[float] = []
        self._current: Optional[float] = None
        self._values = deque(maxlen=max(period, 2))

    @property
    def name(self) -> str:
        return f"EMA_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["close"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    @property
    def ready(self) -> bool:
        return self._current is not None

    def add(self, value: float) -> None:
        if not math.isfinite(value):
            raise ValueError(f"EMA input must be finite, got {value}")

        if self._current is None:
            self._seed.append(value)
            if len(self._seed) < self.period:
                return
            self._current = sum(self._seed) / self.period
            self._seed = []
        else:
            self._current += self._alpha * (value - self._current)
        self._values.append(self._current)

    def reset(self) -> None:
        self._seed = []
        self._current = None
        self._values.clear()


class MACDIndicator(BaseIndicator):
    """Moving Average Convergence Divergence.

    MACD is calculated as:
    - MACD Line: Fast EMA - Slow EMA
    - Signal Line: EMA of MACD Line
    - Histogram: MACD Line - Signal Line

    Signals:
    - MACD crosses above Signal: Bullish
    - MACD crosses below Signal: Bearish
    """

    def __init__(self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9):
        """Initialize MACD indicator.

        Args:
            fast_period: Fast EMA period (default: 12)
            slow_period: Slow EMA period (default: 26)
            signal_period: Signal line EMA period (default: 9)

        Raises:
            ValueError: Non-positive period or fast period not below slow period
        """
        _check_period("MACD fast period", fast_period)
        _check_period("MACD slow period", slow_period)
        _check_period("MACD signal period", signal_period)
        if fast_period >= slow_period:
            raise ValueError(
                f"MACD fast period ({fast_period}) must be below slow period ({slow_period})"
            )

        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period
        self._fast = EMAIndicator(fast_period)
        self._slow = EMAIndicator(slow_period)
        self._signal = EMAIndicator(signal_period)
        maxlen = slow_period + signal_period
        self._macd_values = deque(maxlen=maxlen)
        self._signal_values = deque(maxlen=maxlen)
        self._histogram_values = deque(maxlen=maxlen)

    @property
    def name(self) -> str:
        return f"MACD_{self.fast_period}_{self.slow_period}_{self.signal_period}"

    @property
    def required_columns(self) -> list[str]:
        return ["close"]

    @property
    def values(self) -> list[float]:
        return list(self._macd_values)

    @property
    def macd_values(self) -> list[float]:
        return list(self._macd_values)

    @property
    def signal_values(self) -> list[float]:
        return list(self._signal_values)

    @property
    def histogram_values(self) -> list[float]:
        return list(self._histogram_values)

    def add(self, close: float) -> None:
        if not is_non_negative_price(close):
            raise ValueError(f"invalid close price: {close}")

        self._fast.add(close)
        self._slow.add(close)
        if not self._slow.ready:
            return

        macd = self._fast.calculate() - self._slow.calculate()
        self._macd_values.append(macd)
        self._signal.add(macd)
        if self._signal.ready:
            signal = self._signal.calculate()
            self._signal_values.append(signal)
            self._histogram_values.append(macd - signal)

    def reset(self) -> None:
        self._fast.reset()
        self._slow.reset()
        self._signal.reset()
        self._macd_values.clear()
        self._signal_values.clear()
        self._histogram_values.clear()

    def calculate(self) -> tuple[float, float, float]:
        """Return the latest (macd, signal, histogram) triple."""
        self._require(self._signal_values, 1, "calculate")
        return self._macd_values[-1], self._signal_values[-1], self._histogram_values[-1]

    def is_bullish_crossover(self) -> bool:
        self._require(self._signal_values, 2, "crossover")
        return (self._macd_values[-2] <= self._signal_values[-2]
                and self._macd_values[-1] > self._signal_values[-1])

    def is_bearish_crossover(self) -> bool:
        self._require(self._signal_values, 2, "crossover")
        return (self._macd_values[-2] >= self._signal_values[-2]
                and self._macd_values[-1] < self._signal_values[-1])

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        if not self._macd_values:
            return []
        # signal and histogram start later than the MACD line
        lag = len(self._macd_values) - len(self._signal_values)
        return [
            make_series("MACD", list(self._macd_values), start_time, interval),
            make_series("Signal Line", list(self._signal_values), start_time, interval, offset=lag),
            make_series(
                "Histogram", list(self._histogram_values), start_time, interval,
                type="bar", offset=lag,
            ),
        ]


class HullMovingAverage(BaseIndicator):
    """Hull Moving Average.

    HMA = WMA(2 * WMA(close, n/2) - WMA(close, n), sqrt(n))

    Tracks price closely with little lag. Price crossing above the HMA
    is bullish, crossing below is bearish.
    """

    def __init__(self, period: int = 9):
        _check_period("HMA period", period)
        self.period = period
        self.half_period = max(1, period // 2)
        self.sqrt_period = max(1, int(math.sqrt(period)))
        self._closes = deque(maxlen=period)
        self._raw = deque(maxlen=self.sqrt_period)
        self._values = deque(maxlen=max(period, 2))
        self._prices = deque(maxlen=max(period, 2))

    @property
    def name(self) -> str:
        return f"HMA_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["close"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, close: float) -> None:
        if not is_valid_price(close):
            raise ValueError(f"price must be positive: {close}")

        self._closes.append(close)
        if len(self._closes) < self.period:
            return

        raw = 2.0 * _wma(self._closes, self.half_period) - _wma(self._closes, self.period)
        self._raw.append(raw)
        if len(self._raw) < self.sqrt_period:
            return

        self._values.append(_wma(self._raw, self.sqrt_period))
        self._prices.append(close)

    def reset(self) -> None:
        self._closes.clear()
        self._raw.clear()
        self._values.clear()
        self._prices.clear()

    def is_bullish_crossover(self) -> bool:
        """Close moved from at/below the HMA to above it."""
        self._require(self._values, 2, "crossover")
        return self._prices[-2] <= self._values[-2] and self._prices[-1] > self._values[-1]

    def is_bearish_crossover(self) -> bool:
        """Close moved from at/above the HMA to below it."""
        self._require(self._values, 2, "crossover")
        return self._prices[-2] >= self._values[-2] and self._prices[-1] < self._values[-1]

    def get_trend_direction(self) -> str:
        self._require(self._values, 2, "trend direction")
        if self._values[-1] > self._values[-2]:
            return "Bullish"
        if self._values[-1] < self._values[-2]:
            return "Bearish"
        return "Neutral"

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        values = list(self._values)
        if not values:
            return []
        prices = list(self._prices)
        markers = []
        for i in range(1, len(values)):
            if prices[i - 1] <= values[i - 1] and prices[i] > values[i]:
                markers.append((i, 1.0))
            elif prices[i - 1] >= values[i - 1] and prices[i] < values[i]:
                markers.append((i, -1.0))
        return [
            make_series("Hull Moving Average", values, start_time, interval),
            make_series("Price", prices, start_time, interval),
            make_marker_series("Signals", markers, start_time, interval, signal="crossover"),
        ]


class ParabolicSAR(BaseIndicator):
    """Parabolic Stop And Reverse.

    The stop trails price, accelerating by ``step`` each time a new
    extreme point is made (capped at ``max_step``) and flipping sides
    when price crosses it. The trend is initialised on the second bar.
    """

    def __init__(self, step: float = 0.02, max_step: float = 0.2):
        if step <= 0 or max_step < step:
            raise ValueError(f"invalid SAR acceleration: step={step}, max_step={max_step}")
        self.step = step
        self.max_step = max_step
        self._values = deque(maxlen=256)
        self.reset()

    @property
    def name(self) -> str:
        return f"SAR_{self.step}_{self.max_step}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float) -> None:
        if not (is_non_negative_price(high) and is_non_negative_price(low)) or high < low:
            raise ValueError(f"invalid high/low: {high}/{low}")

        if self._prev_high is None:
            self._prev_high, self._prev_low = high, low
            return

        if not self._values:
            self._uptrend = high >= self._prev_high
            if self._uptrend:
                self._sar = min(low, self._prev_low)
                self._ep = max(high, self._prev_high)
            else:
                self._sar = max(high, self._prev_high)
                self._ep = min(low, self._prev_low)
            self._af = self.step
        else:
            self._advance(high, low)

        self._values.append(self._sar)
        self._prev_high, self._prev_low = high, low

    def _advance(self, high: float, low: float) -> None:
        sar = self._sar + self._af * (self._ep - self._sar)
        if self._uptrend:
            sar = min(sar, self._prev_low)
            if low < sar:
                self._uptrend = False
                sar, self._ep, self._af = self._ep, low, self.step
            elif high > self._ep:
                self._ep = high
                self._af = min(self._af + self.step, self.max_step)
        else:
            sar = max(sar, self._prev_high)
            if high > sar:
                self._uptrend = True
                sar, self._ep, self._af = self._ep, high, self.step
            elif low < self._ep:
                self._ep = low
                self._af = min(self._af + self.step, self.max_step)
        self._sar = sar

    def reset(self) -> None:
        self._prev_high: Optional[float] = None
        self._prev_low: Optional[float] = None
        self._uptrend = False
        self._sar = 0.0
        self._ep = 0.0
        self._af = self.step
        self._values.clear()

    def is_uptrend(self) -> bool:
        return bool(self._values) and self._uptrend

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        if not self._values:
            return []
        return [make_series("Parabolic SAR", list(self._values), start_time, interval, type="scatter")]


class VolumeWeightedAroonOscillator(BaseIndicator):
    """Volume Weighted Aroon Oscillator (VWAO).

    Over the last ``period + 1`` bars, Aroon up/down measure how recent
    the highest high and lowest low are. Each side is scaled by the
    volume of its extreme bar relative to the window's average volume
    (capped at 1), so extremes made on thin volume count for less.

        VWAO = clamp(up - down, -100, 100)
    """

    def __init__(self, period: int = 14, config: Optional[IndicatorConfig] = None):
        _check_period("VWAO period", period)
        config = config or IndicatorConfig()
        if not 0 < config.vwao_strong_trend <= 100:
            raise ValueError(f"VWAO strong trend must be in (0, 100], got {config.vwao_strong_trend}")

        self.period = period
        self.strong_trend = config.vwao_strong_trend
        self._highs = deque(maxlen=period + 1)
        self._lows = deque(maxlen=period + 1)
        self._volumes = deque(maxlen=period + 1)
        self._values = deque(maxlen=max(period, 2))

    @property
    def name(self) -> str:
        return f"VWAO_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close", "volume"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float, close: float, volume: float) -> None:
        if not high >= low or not is_non_negative_price(close) or not is_valid_volume(volume):
            raise ValueError("invalid price or volume")

        self._highs.append(high)
        self._lows.append(low)
        self._volumes.append(volume)
        if len(self._highs) < self.period + 1:
            return

        self._values.append(self._oscillator())

    def _oscillator(self) -> float:
        highs = list(self._highs)
        lows = list(self._lows)
        volumes = np.asarray(self._volumes, dtype=float)
        mean_volume = float(volumes.mean())
        if mean_volume == 0:
            raise IndicatorError(f"{self.name}: window volume is zero")

        # most recent bar wins ties
        high_idx = len(highs) - 1 - highs[::-1].index(max(highs))
        low_idx = len(lows) - 1 - lows[::-1].index(min(lows))

        up = 100.0 * high_idx / self.period * min(1.0, volumes[high_idx] / mean_volume)
        down = 100.0 * low_idx / self.period * min(1.0, volumes[low_idx] / mean_volume)
        return clamp(float(up - down), -100.0, 100.0)

    def reset(self) -> None:
        self._highs.clear()
        self._lows.clear()
        self._volumes.clear()
        self._values.clear()

    def is_bullish_crossover(self) -> bool:
        """Oscillator rose through the strong uptrend level."""
        self._require(self._values, 2, "crossover")
        return self._values[-2] <= self.strong_trend < self._values[-1]

    def is_bearish_crossover(self) -> bool:
        """Oscillator fell through the strong downtrend level."""
        self._require(self._values, 2, "crossover")
        return self._values[-2] >= -self.strong_trend > self._values[-1]

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        values = list(self._values)
        if not values:
            return []
        markers = []
        for i in range(1, len(values)):
            if values[i - 1] <= self.strong_trend < values[i]:
                markers.append((i, 1.0))
            elif values[i - 1] >= -self.strong_trend > values[i]:
                markers.append((i, -1.0))
        return [
            make_series("Volume Weighted Aroon Oscillator", values, start_time, interval),
            make_marker_series("Signals", markers, start_time, interval, signal="crossover"),
        ]


class AdaptiveTrendStrengthOscillator(BaseIndicator):
    """Adaptive Trend Strength Oscillator (ATSO).

    Sums directional range movement over a lookback that shortens when
    recent bar ranges expand relative to the ``volatility_period`` average:

        raw = (up - down) / (up + down) * 100

    The raw reading is smoothed by an EMA of ``config.atso_ema_period``.
    """

    def __init__(
        self,
        min_period: int = 2,
        max_period: int = 14,
        volatility_period: int = 14,
        config: Optional[IndicatorConfig] = None,
    ):
        if min_period < 1 or max_period < min_period or volatility_period < 1:
            raise ValueError(
                f"invalid ATSO periods: min={min_period}, max={max_period}, "
                f"volatility={volatility_period}"
            )
        config = config or IndicatorConfig()

        self.min_period = min_period
        self.max_period = max_period
        self.volatility_period = volatility_period
        self._ema = EMAIndicator(config.atso_ema_period)
        self._warmup = max(max_period, volatility_period)
        self._highs = deque(maxlen=self._warmup + 1)
        self._lows = deque(maxlen=self._warmup + 1)
        self._closes = deque(maxlen=self._warmup + 1)
        self._values = deque(maxlen=max(max_period, 2))

    @property
    def name(self) -> str:
        return f"ATSO_{self.min_period}_{self.max_period}_{self.volatility_period}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float, close: float) -> None:
        if not high >= low or not is_non_negative_price(close):
            raise ValueError(f"invalid bar: high={high}, low={low}, close={close}")

        self._highs.append(high)
        self._lows.append(low)
        self._closes.append(close)
        if len(self._closes) < self._warmup:
            return

        self._ema.add(self._directional_strength(self.adaptive_period()))
        if self._ema.ready:
            self._values.append(self._ema.calculate())

    def adaptive_period(self) -> int:
        """Lookback length, shorter when recent ranges outgrow the average range."""
        ranges = np.asarray(self._highs, dtype=float) - np.asarray(self._lows, dtype=float)
        average = float(ranges[-self.volatility_period:].mean())
        recent = float(ranges[-self.min_period:].mean())
        if average == 0 or recent == 0:
            return self.max_period
        scaled = self.max_period * average / recent
        # infinite or NaN bar ranges
        if not math.isfinite(scaled):
            return self.max_period
        return int(clamp(round(scaled), self.min_period, self.max_period))

    def _directional_strength(self, period: int) -> float:
        period = min(period, len(self._closes) - 1)
        if period < 1:
            return 0.0
        highs = list(self._highs)[-(period + 1):]
        lows = list(self._lows)[-(period + 1):]
        closes = list(self._closes)[-(period + 1):]

        up = down = 0.0
        for i in range(1, len(closes)):
            if closes[i] > closes[i - 1]:
                up += max(0.0, highs[i] - lows[i - 1])
            else:
                down += max(0.0, highs[i - 1] - lows[i])

        total = up + down
        if total == 0 or not math.isfinite(total):
            return 0.0
        return (up - down) / total * 100.0

    def reset(self) -> None:
        self._ema.reset()
        self._highs.clear()
        self._lows.clear()
        self._closes.clear()
        self._values.clear()

    def is_bullish_crossover(self) -> bool:
        """Smoothed strength turned positive on the latest step."""
        if len(self._values) < 2:
            return False
        return self._values[-2] <= 0 < self._values[-1]

    def is_bearish_crossover(self) -> bool:
        """Smoothed strength turned negative on the latest step."""
        if len(self._values) < 2:
            return False
        return self._values[-2] >= 0 > self._values[-1]

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        values = list(self._values)
        if not values:
            return []
        markers = []
        for i in range(1, len(values)):
            if values[i - 1] <= 0 < values[i]:
                markers.append((i, 1.0))
            elif values[i - 1] >= 0 > values[i]:
                markers.append((i, -1.0))
        return [
            make_series("Adaptive Trend Strength Oscillator", values, start_time, interval),
            make_marker_series("Signals", markers, start_time, interval, signal="crossover"),
        ]
