"""Volume and volatility indicators fed one bar at a time."""

from collections import deque
from typing import Optional

import numpy as np
import talib

from ..utils.config import IndicatorConfig
from .base_indicator import (
    BaseIndicator,
    is_non_negative_price,
    is_valid_price,
    is_valid_volume,
)
from .plotting import PlotData, make_series, make_marker_series


def _check_volume_bar(high: float, low: float, close: float, volume: float) -> None:
    if not high >= low:
        raise ValueError(f"high ({high}) must be >= low ({low})")
    if not is_non_negative_price(close):
        raise ValueError(f"invalid close price: {close}")
    if not is_valid_volume(volume):
        raise ValueError(f"invalid volume: {volume}")


class MoneyFlowIndex(BaseIndicator):
    """Money Flow Index (volume-weighted RSI).

    Raw money flow is typical price * volume, divided by
    ``config.mfi_volume_scale``. Flow is positive when the typical price
    rose from the previous bar and negative when it fell.

        MFI = 100 - 100 / (1 + positive_flow / negative_flow)

    - MFI > overbought (default 80): buying pressure stretched
    - MFI < oversold (default 20): selling pressure stretched
    """

    def __init__(self, period: int = 5, config: Optional[IndicatorConfig] = None):
        """Initialize MFI.

        Args:
            period: Number of money flows summed (default: 5)
            config: Threshold and volume scale settings

        Raises:
            ValueError: Invalid period or configuration
        """
        if period < 1:
            raise ValueError(f"MFI period must be at least 1, got {period}")
        config = config or IndicatorConfig()
        config.validate()

        self.period = period
        self.overbought = config.mfi_overbought
        self.oversold = config.mfi_oversold
        self.volume_scale = config.mfi_volume_scale
        self._prev_typical: Optional[float] = None
        self._flows = deque(maxlen=period)
        self._closes = deque(maxlen=max(period, 3))
        self._values = deque(maxlen=max(period, 2))

    @property
    def name(self) -> str:
        return f"MFI_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close", "volume"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float, close: float, volume: float) -> None:
        _check_volume_bar(high, low, close, volume)
        typical = (high + low + close) / 3.0
        self._closes.append(close)

        if self._prev_typical is None:
            self._prev_typical = typical
            return

        flow = typical * volume / self.volume_scale
        if typical > self._prev_typical:
            self._flows.append(flow)
        elif typical < self._prev_typical:
            self._flows.append(-flow)
        else:
            self._flows.append(0.0)
        self._prev_typical = typical

        if len(self._flows) < self.period:
            return

        positive = sum(f for f in self._flows if f > 0)
        negative = -sum(f for f in self._flows if f < 0)
        self._values.append(self._mfi(positive, negative))

    @staticmethod
    def _mfi(positive: float, negative: float) -> float:
        if negative == 0:
            return 50.0 if positive == 0 else 100.0
        if positive == 0:
            return 0.0
        return 100.0 - 100.0 / (1.0 + positive / negative)

    def reset(self) -> None:
        self._prev_typical = None
        self._flows.clear()
        self._closes.clear()
        self._values.clear()

    def is_bullish_crossover(self) -> bool:
        """MFI rose through the oversold level.

        With a single value the previous reading is taken as 0.
        """
        self._require(self._values, 1, "crossover")
        prev = self._values[-2] if len(self._values) > 1 else 0.0
        return prev < self.oversold < self._values[-1]

    def is_bearish_crossover(self) -> bool:
        """MFI fell through the overbought level.

        With a single value the previous reading is taken as the overbought level.
        """
        self._require(self._values, 1, "crossover")
        prev = self._values[-2] if len(self._values) > 1 else self.overbought
        return prev >= self.overbought > self._values[-1]

    def get_zone(self) -> str:
        value = self.calculate()
        if value > self.overbought:
            return "Overbought"
        if value < self.oversold:
            return "Oversold"
        return "Neutral"

    def is_divergence(self) -> str:
        """Compare the last three closes with the last two MFI readings.

        Returns:
            "bullish" when the newest close is the lowest of the three while
            MFI rises, "bearish" when it is the highest while MFI falls,
            otherwise "none"

        Raises:
            InsufficientDataError: Fewer than three closes or two MFI values
        """
        self._require(self._closes, 3, "divergence")
        self._require(self._values, 2, "divergence")
        first, second, latest = list(self._closes)[-3:]
        prev_mfi, curr_mfi = self._values[-2], self._values[-1]

        if latest < first and latest < second and curr_mfi > prev_mfi:
            return "bullish"
        if latest > first and latest > second and curr_mfi < prev_mfi:
            return "bearish"
        return "none"

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        values = list(self._values)
        if not values:
            return []

        markers = []
        for i, value in enumerate(values):
            if i > 0 and values[i - 1] < self.oversold < value:
                markers.append((i, 1.0))
            elif i > 0 and values[i - 1] >= self.overbought > value:
                markers.append((i, -1.0))
            elif value > self.overbought:
                markers.append((i, -2.0))
            elif value < self.oversold:
                markers.append((i, 2.0))

        return [
            make_series("MFI", values, start_time, interval),
            make_marker_series("Signals", markers, start_time, interval, signal="crossover"),
        ]


class ATRIndicator(BaseIndicator):
    """Average True Range indicator.

    ATR measures volatility:
    - High ATR: High volatility, wider stops needed
    - Low ATR: Low volatility, tighter stops possible

    True range comes from TA-Lib; the ATR is its simple average over the
    last ``period`` bars.
    """

    def __init__(self, period: int = 14, validate_close: bool = True):
        """Initialize ATR indicator.

        Args:
            period: Number of true ranges averaged (default: 14)
            validate_close: Reject closes outside the bar's [low, high]
        """
        if period < 1:
            raise ValueError(f"ATR period must be at least 1, got {period}")
        self.period = period
        self.validate_close = validate_close
        self._highs = deque(maxlen=period + 1)
        self._lows = deque(maxlen=period + 1)
        self._closes = deque(maxlen=period + 1)
        self._values = deque(maxlen=max(period, 2))

    @property
    def name(self) -> str:
        return f"ATR_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float, close: float) -> None:
        if not (is_valid_price(high) and is_valid_price(low)) or high < low:
            raise ValueError(f"invalid high/low: {high}/{low}")
        if not is_non_negative_price(close):
            raise ValueError(f"invalid close price: {close}")
        if self.validate_close and not low <= close <= high:
            raise ValueError(f"close {close} outside bar range [{low}, {high}]")

        self._highs.append(high)
        self._lows.append(low)
        self._closes.append(close)
        if len(self._closes) < self.period + 1:
            return

        true_range = talib.TRANGE(
            np.asarray(self._highs, dtype=float),
            np.asarray(self._lows, dtype=float),
            np.asarray(self._closes, dtype=float),
        )
        self._values.append(float(np.mean(true_range[1:])))

    def reset(self) -> None:
        self._highs.clear()
        self._lows.clear()
        self._closes.clear()
        self._values.clear()

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        if not self._values:
            return []
        return [make_series("Average True Range", list(self._values), start_time, interval)]


class BollingerBands(BaseIndicator):
    """Bollinger Bands.

    Middle band is the simple average of the last ``period`` closes; the
    outer bands sit ``multiplier`` sample standard deviations away.
    """

    def __init__(self, period: int = 20, multiplier: float = 2.0):
        if period < 1:
            raise ValueError(f"Bollinger period must be at least 1, got {period}")
        if multiplier <= 0:
            raise ValueError(f"Bollinger multiplier must be positive, got {multiplier}")
        self.period = period
        self.multiplier = multiplier
        self._closes = deque(maxlen=period)
        self._upper = deque(maxlen=max(period, 2))
        self._middle = deque(maxlen=max(period, 2))
        self._lower = deque(maxlen=max(period, 2))

    @property
    def name(self) -> str:
        return f"BBANDS_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["close"]

    @property
    def values(self) -> list[float]:
        return list(self._middle)

    @property
    def upper(self) -> list[float]:
        return list(self._upper)

    @property
    def middle(self) -> list[float]:
        return list(self._middle)

    @property
    def lower(self) -> list[float]:
        return list(self._lower)

    def add(self, close: float) -> None:
        if not is_non_negative_price(close):
            raise ValueError(f"invalid close price: {close}")

        self._closes.append(close)
        if len(self._closes) < self.period:
            return

        window = np.asarray(self._closes, dtype=float)
        middle = float(window.mean())
        stdev = float(window.std(ddof=1)) if self.period > 1 else 0.0
        self._middle.append(middle)
        self._upper.append(middle + self.multiplier * stdev)
        self._lower.append(middle - self.multiplier * stdev)

    def reset(self) -> None:
        self._closes.clear()
        self._upper.clear()
        self._middle.clear()
        self._lower.clear()

    def calculate(self) -> tuple[float, float, float]:
        """Return the latest (upper, middle, lower) bands."""
        self._require(self._middle, 1, "calculate")
        return self._upper[-1], self._middle[-1], self._lower[-1]

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        if not self._middle:
            return []
        return [
            make_series("Bollinger Upper", list(self._upper), start_time, interval),
            make_series("Bollinger Middle", list(self._middle), start_time, interval),
            make_series("Bollinger Lower", list(self._lower), start_time, interval),
        ]


class VWAPIndicator(BaseIndicator):
    """Volume Weighted Average Price.

    Cumulative typical price * volume over cumulative volume since the
    last reset. No value is produced while cumulative volume is zero.
    """

    def __init__(self):
        self._cum_price_volume = 0.0
        self._cum_volume = 0.0
        self._values = deque(maxlen=1024)

    @property
    def name(self) -> str:
        return "VWAP"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close", "volume"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float, close: float, volume: float) -> None:
        _check_volume_bar(high, low, close, volume)
        typical = (high + low + close) / 3.0
        self._cum_price_volume += typical * volume
        self._cum_volume += volume
        if self._cum_volume > 0:
            self._values.append(self._cum_price_volume / self._cum_volume)

    def reset(self) -> None:
        self._cum_price_volume = 0.0
        self._cum_volume = 0.0
        self._values.clear()

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        if not self._values:
            return []
        return [make_series("VWAP", list(self._values), start_time, interval)]
