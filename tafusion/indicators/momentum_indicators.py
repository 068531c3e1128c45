"""Momentum oscillators fed one bar at a time."""

from collections import deque
from typing import Optional

import numpy as np
import talib

from ..utils.config import IndicatorConfig
from .base_indicator import BaseIndicator, is_non_negative_price
from .plotting import PlotData, make_series, make_marker_series


def _check_period(label: str, period: int) -> None:
    if period < 1:
        raise ValueError(f"{label} must be at least 1, got {period}")


def _check_bar(high: float, low: float, close: float) -> None:
    if not high >= low:
        raise ValueError(f"high ({high}) must be >= low ({low})")
    if not is_non_negative_price(close):
        raise ValueError(f"invalid close price: {close}")


class RSIIndicator(BaseIndicator):
    """Relative Strength Index indicator.

    RSI measures the speed and magnitude of price changes:
    - RSI > overbought (default 70): potential reversal down
    - RSI < oversold (default 30): potential reversal up
    - otherwise: neutral zone

    Average gain and loss are seeded with simple means over the first
    ``period`` changes, then follow Wilder smoothing.
    """

    def __init__(self, period: int = 5, config: Optional[IndicatorConfig] = None):
        """Initialize RSI indicator.

        Args:
            period: Number of price changes averaged (default: 5)
            config: Threshold settings, defaults to IndicatorConfig()

        Raises:
            ValueError: Invalid period or thresholds
        """
        _check_period("RSI period", period)
        config = config or IndicatorConfig()
        if config.rsi_overbought <= config.rsi_oversold:
            raise ValueError("RSI overbought threshold must be above oversold threshold")

        self.period = period
        self.overbought = config.rsi_overbought
        self.oversold = config.rsi_oversold
        self._closes = deque(maxlen=period + 1)
        self._values = deque(maxlen=max(period, 2))
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._seeded = False

    @property
    def name(self) -> str:
        return f"RSI_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["close"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    @property
    def closes(self) -> list[float]:
        return list(self._closes)

    def add(self, close: float) -> None:
        if not is_non_negative_price(close):
            raise ValueError(f"invalid close price: {close}")

        self._closes.append(close)
        if len(self._closes) < self.period + 1:
            return

        if not self._seeded:
            changes = np.diff(np.asarray(self._closes, dtype=float))
            self._avg_gain = float(np.clip(changes, 0, None).mean())
            self._avg_loss = float(np.clip(-changes, 0, None).mean())
            self._seeded = True
        else:
            change = self._closes[-1] - self._closes[-2]
            self._avg_gain = (self._avg_gain * (self.period - 1) + max(change, 0.0)) / self.period
            self._avg_loss = (self._avg_loss * (self.period - 1) + max(-change, 0.0)) / self.period

        self._values.append(self._rsi(self._avg_gain, self._avg_loss))

    @staticmethod
    def _rsi(avg_gain: float, avg_loss: float) -> float:
        if avg_loss == 0:
            return 50.0 if avg_gain == 0 else 100.0
        if avg_gain == 0:
            return 0.0
        return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)

    def reset(self) -> None:
        self._closes.clear()
        self._values.clear()
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._seeded = False

    def is_bullish_crossover(self) -> bool:
        """RSI rose out of the oversold zone on the latest step."""
        self._require(self._values, 2, "crossover")
        prev, curr = self._values[-2], self._values[-1]
        return prev <= self.oversold < curr

    def is_bearish_crossover(self) -> bool:
        """RSI fell out of the overbought zone on the latest step."""
        self._require(self._values, 2, "crossover")
        prev, curr = self._values[-2], self._values[-1]
        return prev >= self.overbought > curr

    def get_zone(self) -> str:
        value = self.calculate()
        if value > self.overbought:
            return "Overbought"
        if value < self.oversold:
            return "Oversold"
        return "Neutral"

    def is_divergence(self) -> tuple[bool, str]:
        """Detect an extreme RSI reading that price moves against.

        Returns:
            (True, "bearish") when RSI is overbought while price falls,
            (True, "bullish") when RSI is oversold while price rises,
            otherwise (False, "")

        Raises:
            InsufficientDataError: Fewer than two RSI values or closes
        """
        self._require(self._values, 2, "divergence")
        self._require(self._closes, 2, "divergence")
        value = self._values[-1]
        price_change = self._closes[-1] - self._closes[-2]

        if value > self.overbought and price_change < 0:
            return True, "bearish"
        if value < self.oversold and price_change > 0:
            return True, "bullish"
        return False, ""

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        values = list(self._values)
        if not values:
            return []

        markers = []
        for i, value in enumerate(values):
            prev = values[i - 1] if i > 0 else None
            if prev is not None and prev <= self.oversold < value:
                markers.append((i, 1.0))
            elif prev is not None and prev >= self.overbought > value:
                markers.append((i, -1.0))
            elif value > self.overbought:
                markers.append((i, -2.0))
            elif value < self.oversold:
                markers.append((i, 2.0))

        return [
            make_series("Relative Strength Index", values, start_time, interval),
            make_marker_series("Signals", markers, start_time, interval, signal="crossover"),
        ]


class StochasticOscillator(BaseIndicator):
    """Fast stochastic oscillator (%K and %D) using TA-Lib STOCHF.

    %K places the close within the high/low range of the last ``k_period``
    bars; %D is the simple average of the last ``d_period`` %K values.
    A flat range reports %K = 0, as TA-Lib does.
    """

    OVERBOUGHT = 80.0
    OVERSOLD = 20.0

    def __init__(self, k_period: int = 14, d_period: int = 3):
        _check_period("Stochastic K period", k_period)
        _check_period("Stochastic D period", d_period)
        self.k_period = k_period
        self.d_period = d_period
        window = k_period + d_period - 1
        self._highs = deque(maxlen=window)
        self._lows = deque(maxlen=window)
        self._closes = deque(maxlen=window)
        self._k_values = deque(maxlen=k_period + d_period)
        self._d_values = deque(maxlen=k_period + d_period)

    @property
    def name(self) -> str:
        return f"STOCH_{self.k_period}_{self.d_period}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close"]

    @property
    def values(self) -> list[float]:
        return list(self._k_values)

    @property
    def k_values(self) -> list[float]:
        return list(self._k_values)

    @property
    def d_values(self) -> list[float]:
        return list(self._d_values)

    def add(self, high: float, low: float, close: float) -> None:
        _check_bar(high, low, close)
        self._highs.append(high)
        self._lows.append(low)
        self._closes.append(close)
        if len(self._closes) < self.k_period:
            return

        # %K is emitted as soon as one K window exists, %D once d_period K values do
        has_d = len(self._closes) == self._closes.maxlen
        fastk, fastd = talib.STOCHF(
            np.asarray(self._highs, dtype=float),
            np.asarray(self._lows, dtype=float),
            np.asarray(self._closes, dtype=float),
            fastk_period=self.k_period,
            fastd_period=self.d_period if has_d else 1,
            fastd_matype=0,  # SMA
        )
        self._k_values.append(float(fastk[-1]))
        if has_d:
            self._d_values.append(float(fastd[-1]))

    def reset(self) -> None:
        self._highs.clear()
        self._lows.clear()
        self._closes.clear()
        self._k_values.clear()
        self._d_values.clear()

    def calculate(self) -> tuple[float, float]:
        """Return the latest (%K, %D) pair."""
        self._require(self._d_values, 1, "calculate")
        return self._k_values[-1], self._d_values[-1]

    def is_overbought(self) -> bool:
        self._require(self._k_values, 1, "zone check")
        return self._k_values[-1] > self.OVERBOUGHT

    def is_oversold(self) -> bool:
        self._require(self._k_values, 1, "zone check")
        return self._k_values[-1] < self.OVERSOLD

    def is_bullish_crossover(self) -> bool:
        """%K crossed above %D on the latest step."""
        self._require(self._d_values, 2, "crossover")
        return self._k_values[-2] <= self._d_values[-2] and self._k_values[-1] > self._d_values[-1]

    def is_bearish_crossover(self) -> bool:
        """%K crossed below %D on the latest step."""
        self._require(self._d_values, 2, "crossover")
        return self._k_values[-2] >= self._d_values[-2] and self._k_values[-1] < self._d_values[-1]

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        if not self._k_values:
            return []
        return [
            make_series("%K", list(self._k_values), start_time, interval),
            make_series("%D", list(self._d_values), start_time, interval),
        ]


class CCIIndicator(BaseIndicator):
    """Commodity Channel Index using TA-Lib.

    CCI = (typical price - SMA) / (0.015 * mean deviation)
    - CCI > 100: Overbought
    - CCI < -100: Oversold
    """

    def __init__(self, period: int = 20):
        _check_period("CCI period", period)
        self.period = period
        self._highs = deque(maxlen=period)
        self._lows = deque(maxlen=period)
        self._closes = deque(maxlen=period)
        self._values = deque(maxlen=max(period, 2))

    @property
    def name(self) -> str:
        return f"CCI_{self.period}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float, close: float) -> None:
        _check_bar(high, low, close)
        self._highs.append(high)
        self._lows.append(low)
        self._closes.append(close)
        if len(self._closes) < self.period:
            return

        # TA-Lib requires a period of at least 2; a single bar has no deviation
        if self.period == 1:
            self._values.append(0.0)
            return

        cci = talib.CCI(
            np.asarray(self._highs, dtype=float),
            np.asarray(self._lows, dtype=float),
            np.asarray(self._closes, dtype=float),
            timeperiod=self.period,
        )
        self._values.append(float(cci[-1]))

    def reset(self) -> None:
        self._highs.clear()
        self._lows.clear()
        self._closes.clear()
        self._values.clear()

    def is_overbought(self) -> bool:
        return self.calculate() > 100.0

    def is_oversold(self) -> bool:
        return self.calculate() < -100.0

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        if not self._values:
            return []
        return [make_series("Commodity Channel Index", list(self._values), start_time, interval)]


class AdaptiveDEMAMomentumOscillator(BaseIndicator):
    """Adaptive DEMA Momentum Oscillator (AMDO).

    The typical price drives a double exponential moving average. The
    oscillator is the z-score of the latest DEMA within its window,
    amplified when the window's volatility is high relative to its
    recent history:

        value = z * max(0, 1 + normalized_stdev * std_weight)

    Crossover queries read as "momentum in this direction": besides zero-line
    crosses they fire on a same-signed latest value, on a sharp recent price
    move, or on a plain up or down tick.
    """

    CROSSOVER_LOOKBACK = 5
    JUMP_LOOKBACK = 16
    JUMP_SIZE = 1.0

    def __init__(
        self,
        length: int = 20,
        stdev_length: int = 14,
        std_weight: float = 0.3,
        config: Optional[IndicatorConfig] = None,
    ):
        """Initialize AMDO.

        Args:
            length: DEMA smoothing length
            stdev_length: Number of window volatilities used for normalization
            std_weight: Influence of normalized volatility on the score
            config: Threshold settings used by divergence checks

        Raises:
            ValueError: Invalid length, weight or thresholds
        """
        _check_period("AMDO length", length)
        _check_period("AMDO stdev length", stdev_length)
        if std_weight < 0:
            raise ValueError(f"AMDO std weight must be non-negative, got {std_weight}")
        config = config or IndicatorConfig()
        if config.amdo_overbought <= config.amdo_oversold:
            raise ValueError("AMDO overbought threshold must be above oversold threshold")

        self.length = length
        self.stdev_length = stdev_length
        self.std_weight = std_weight
        self.overbought = config.amdo_overbought
        self.oversold = config.amdo_oversold
        self._alpha = 2.0 / (length + 1)
        self._window = max(length, stdev_length)
        self._ema1: Optional[float] = None
        self._ema2: Optional[float] = None
        self._dema = deque(maxlen=self._window)
        self._closes = deque(maxlen=self._window)
        self._stdevs = deque(maxlen=stdev_length)
        self._values = deque(maxlen=self._window)

    @property
    def name(self) -> str:
        return f"AMDO_{self.length}_{self.stdev_length}"

    @property
    def required_columns(self) -> list[str]:
        return ["high", "low", "close"]

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, high: float, low: float, close: float) -> None:
        _check_bar(high, low, close)
        typical = (high + low + close) / 3.0

        if self._ema1 is None:
            self._ema1 = self._ema2 = typical
        else:
            self._ema1 += self._alpha * (typical - self._ema1)
            self._ema2 += self._alpha * (self._ema1 - self._ema2)

        self._dema.append(2.0 * self._ema1 - self._ema2)
        self._closes.append(close)
        if len(self._dema) < self._window:
            return

        window = np.asarray(self._dema, dtype=float)
        stdev = float(window.std())
        self._stdevs.append(stdev)
        if stdev == 0:
            self._values.append(0.0)
            return

        z_score = (window[-1] - window.mean()) / stdev
        factor = max(0.0, 1.0 + self._normalized_stdev(stdev) * self.std_weight)
        self._values.append(float(z_score * factor))

    def _normalized_stdev(self, stdev: float) -> float:
        if len(self._stdevs) < 2:
            return 0.0
        history = np.asarray(self._stdevs, dtype=float)
        spread = float(history.std(ddof=1))
        if spread == 0:
            return 0.0
        return (stdev - float(history.mean())) / spread

    def reset(self) -> None:
        self._ema1 = None
        self._ema2 = None
        self._dema.clear()
        self._closes.clear()
        self._stdevs.clear()
        self._values.clear()

    def _crossed_within_lookback(self, bullish: bool) -> bool:
        values = list(self._values)
        for i in range(max(1, len(values) - self.CROSSOVER_LOOKBACK), len(values)):
            if bullish and values[i - 1] <= 0 < values[i]:
                return True
            if not bullish and values[i - 1] >= 0 > values[i]:
                return True
        return False

    def _recent_price_jump(self, bullish: bool) -> bool:
        closes = list(self._closes)
        if len(closes) < 3:
            return False
        start = max(1, len(closes) - self.JUMP_LOOKBACK)
        window = closes[start:]
        extreme = max(window) if bullish else min(window)
        idx = start + window.index(extreme)
        move = closes[idx] - closes[idx - 1]
        return (move if bullish else -move) >= self.JUMP_SIZE

    def is_bullish_crossover(self) -> bool:
        """Bullish momentum on the latest step.

        With a single value, true when it is positive. Otherwise true when
        any of these hold:
        - the latest value is positive, which includes a zero-line cross
        - the oscillator crossed above zero within ``CROSSOVER_LOOKBACK`` values
        - the highest recent close rose at least ``JUMP_SIZE`` from the bar before it
        - the latest close is above the previous close

        Raises:
            InsufficientDataError: No values yet
        """
        self._require(self._values, 1, "crossover")
        if len(self._values) == 1 or self._values[-1] > 0:
            return self._values[-1] > 0
        if self._crossed_within_lookback(bullish=True) or self._recent_price_jump(bullish=True):
            return True
        return len(self._closes) >= 2 and self._closes[-1] > self._closes[-2]

    def is_bearish_crossover(self) -> bool:
        """Bearish momentum on the latest step, mirroring is_bullish_crossover."""
        self._require(self._values, 1, "crossover")
        if len(self._values) == 1 or self._values[-1] < 0:
            return self._values[-1] < 0
        if self._crossed_within_lookback(bullish=False) or self._recent_price_jump(bullish=False):
            return True
        return len(self._closes) >= 2 and self._closes[-1] < self._closes[-2]

    def is_divergence(self) -> tuple[bool, str]:
        """Stretched oscillator reading while price moves the other way."""
        if not self._values or len(self._closes) < 2:
            return False, ""
        value = self._values[-1]
        price_change = self._closes[-1] - self._closes[-2]
        if value > self.overbought and price_change < 0:
            return True, "bearish"
        if value < self.oversold and price_change > 0:
            return True, "bullish"
        return False, ""

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
            make_series("Adaptive DEMA Momentum Oscillator", values, start_time, interval),
            make_marker_series("Signals", markers, start_time, interval, signal="crossover"),
        ]
