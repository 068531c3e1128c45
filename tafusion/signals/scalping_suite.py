"""Scalping indicator suite fused by a volatility-adaptive score."""

from dataclasses import dataclass, field
from typing import Optional

from ..indicators.base_indicator import IndicatorError, is_non_negative_price
from ..indicators.momentum_indicators import RSIIndicator, StochasticOscillator, CCIIndicator
from ..indicators.trend_indicators import MACDIndicator, HullMovingAverage, ParabolicSAR
from ..indicators.volume_indicators import (
    MoneyFlowIndex,
    ATRIndicator,
    BollingerBands,
    VWAPIndicator,
)
from ..utils.config import IndicatorConfig
from ..utils.logger import get_logger
from .base_signal import SignalLabel, SignalThresholds, score_to_label
from .base_suite import BaseSuite
from .errors import InvalidSampleError

logger = get_logger(__name__)

BASE_THRESHOLDS = SignalThresholds(strong=2.4, normal=1.4, weak=0.6)
THRESHOLD_SHIFT = SignalThresholds(strong=0.2, normal=0.15, weak=0.1)
HIGH_VOLATILITY_RATIO = 0.004
LOW_VOLATILITY_RATIO = 0.0015

CROSSOVER_BONUS = 1.0
MACD_CROSSOVER_BONUS = 1.1
RSI_ZONE_BONUS = 0.5
MFI_ZONE_BONUS = 0.4
STOCH_EXTREME_BONUS = 0.4
STOCH_LOW = 25.0
STOCH_HIGH = 75.0
CCI_EXTREME = 90.0
CCI_EXTREME_BONUS = 0.45
HISTOGRAM_BONUS = 0.3
TREND_DIRECTION_BONUS = 0.35
SAR_BONUS = 0.4
BAND_TOUCH_BONUS = 0.6
VOLATILITY_TREND_BONUS = 0.3
VOLATILITY_ACCEL_BONUS = 0.5
VOLATILITY_ACCEL_THRESHOLD = 0.05
VWAP_BONUS = 0.3
VWAP_DISTANCE_BONUS = 0.2
VWAP_DISTANCE = 0.002
MOMENTUM_BONUS = 0.25


def volatility_adjusted_thresholds(volatility_ratio: Optional[float]) -> SignalThresholds:
    """Shift the label bands by current volatility.

    Above ``HIGH_VOLATILITY_RATIO`` the bands tighten (easier to trigger),
    below ``LOW_VOLATILITY_RATIO`` they widen. Ratios on or between the
    two limits, or no ratio at all, keep the base bands.

    Args:
        volatility_ratio: Latest ATR divided by last close

    Returns:
        Thresholds in effect
    """
    if volatility_ratio is None:
        return BASE_THRESHOLDS
    if volatility_ratio > HIGH_VOLATILITY_RATIO:
        return SignalThresholds(
            strong=BASE_THRESHOLDS.strong - THRESHOLD_SHIFT.strong,
            normal=BASE_THRESHOLDS.normal - THRESHOLD_SHIFT.normal,
            weak=BASE_THRESHOLDS.weak - THRESHOLD_SHIFT.weak,
        )
    if volatility_ratio < LOW_VOLATILITY_RATIO:
        return SignalThresholds(
            strong=BASE_THRESHOLDS.strong + THRESHOLD_SHIFT.strong,
            normal=BASE_THRESHOLDS.normal + THRESHOLD_SHIFT.normal,
            weak=BASE_THRESHOLDS.weak + THRESHOLD_SHIFT.weak,
        )
    return BASE_THRESHOLDS


@dataclass
class ScalpingScore:
    """Bull and bear evidence gathered for one evaluation.

    Attributes:
        bull: Sum of bullish contributions
        bear: Sum of bearish contributions
        thresholds: Label bands in effect
        volatility_ratio: ATR / last close, None when unavailable
        reasons: Human readable contribution log
    """
    bull: float = 0.0
    bear: float = 0.0
    thresholds: SignalThresholds = BASE_THRESHOLDS
    volatility_ratio: Optional[float] = None
    reasons: list[str] = field(default_factory=list)

    @property
    def net(self) -> float:
        return self.bull - self.bear

    @property
    def label(self) -> SignalLabel:
        return score_to_label(self.net, self.thresholds)

    def add_bullish(self, points: float, reason: str) -> None:
        self.bull += points
        self.reasons.append(f"+{points:.2f} bullish: {reason}")

    def add_bearish(self, points: float, reason: str) -> None:
        self.bear += points
        self.reasons.append(f"+{points:.2f} bearish: {reason}")


class ScalpingIndicatorSuite(BaseSuite):
    """Ten-indicator suite tuned for short timeframes.

    Indicators (ingestion and plot order):
    - RSI(7), Stochastic(5, 3), MACD(5, 13, 4), CCI(10), HMA(5),
      SAR(0.02, 0.2), Bollinger(10), ATR(5), VWAP, MFI(7)

    Every indicator adds to a bull score and a bear score; the net score
    is banded by thresholds that move with volatility. Indicators without
    enough history simply contribute nothing.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        return IndicatorConfig(rsi_overbought=75.0, rsi_oversold=25.0)

    def _collaborator_factories(self, config: IndicatorConfig):
        return [
            ("RSI", lambda: RSIIndicator(7, config)),
            ("Stochastic", lambda: StochasticOscillator(5, 3)),
            ("MACD", lambda: MACDIndicator(5, 13, 4)),
            ("CCI", lambda: CCIIndicator(10)),
            ("HMA", lambda: HullMovingAverage(5)),
            ("SAR", lambda: ParabolicSAR(0.02, 0.2)),
            ("Bollinger", lambda: BollingerBands(10, config.bollinger_multiplier)),
            ("ATR", lambda: ATRIndicator(5, validate_close=False)),
            ("VWAP", lambda: VWAPIndicator()),
            ("MFI", lambda: MoneyFlowIndex(7, config)),
        ]

    @property
    def rsi(self) -> RSIIndicator:
        return self._indicators["RSI"]

    @property
    def stochastic(self) -> StochasticOscillator:
        return self._indicators["Stochastic"]

    @property
    def macd(self) -> MACDIndicator:
        return self._indicators["MACD"]

    @property
    def cci(self) -> CCIIndicator:
        return self._indicators["CCI"]

    @property
    def hma(self) -> HullMovingAverage:
        return self._indicators["HMA"]

    @property
    def sar(self) -> ParabolicSAR:
        return self._indicators["SAR"]

    @property
    def bollinger(self) -> BollingerBands:
        return self._indicators["Bollinger"]

    @property
    def atr(self) -> ATRIndicator:
        return self._indicators["ATR"]

    @property
    def vwap(self) -> VWAPIndicator:
        return self._indicators["VWAP"]

    @property
    def mfi(self) -> MoneyFlowIndex:
        return self._indicators["MFI"]

    def _validate_sample(self, high: float, low: float, close: float, volume: float) -> None:
        super()._validate_sample(high, low, close, volume)
        if not is_non_negative_price(high) or not is_non_negative_price(low):
            logger.warning(f"Rejected sample: high={high}, low={low}")
            raise InvalidSampleError()

    def volatility_ratio(self) -> Optional[float]:
        """Latest ATR divided by last close, None before both exist."""
        atr_values = self.atr.values
        if not atr_values or not self._has_close or self._last_close <= 0:
            return None
        return atr_values[-1] / self._last_close

    def evaluate(self) -> ScalpingScore:
        """Score the current state of every indicator.

        Raises:
            CollaboratorQueryError: An indicator failed a query it had
                enough history to answer
        """
        ratio = self.volatility_ratio()
        score = ScalpingScore(
            thresholds=volatility_adjusted_thresholds(ratio),
            volatility_ratio=ratio,
        )

        self._score_rsi(score)
        self._score_stochastic(score)
        self._score_macd(score)
        self._score_cci(score)
        self._score_hma(score)
        self._score_sar(score)
        self._score_bollinger(score)
        self._score_volatility_trend(score)
        self._score_vwap(score)
        self._score_mfi(score)
        self._score_momentum(score)
        return score

    def get_combined_signal(self) -> SignalLabel:
        return self.evaluate().label

    def get_combined_bearish_signal(self) -> SignalLabel:
        """Same label as get_combined_signal; the net score covers both sides."""
        return self.get_combined_signal()

    def _score_crossovers(self, score: ScalpingScore, name: str, indicator, bonus: float) -> None:
        if self._query(name, "bullish crossover check", indicator.is_bullish_crossover):
            score.add_bullish(bonus, f"{name} bullish crossover")
        if self._query(name, "bearish crossover check", indicator.is_bearish_crossover):
            score.add_bearish(bonus, f"{name} bearish crossover")

    def _score_zone(self, score: ScalpingScore, name: str, indicator, bonus: float) -> None:
        zone = self._query(name, "zone check", indicator.get_zone)
        if zone == "Oversold":
            score.add_bullish(bonus, f"{name} oversold")
        elif zone == "Overbought":
            score.add_bearish(bonus, f"{name} overbought")

    def _score_rsi(self, score: ScalpingScore) -> None:
        values = self.rsi.values
        if len(values) >= 2:
            self._score_crossovers(score, "RSI", self.rsi, CROSSOVER_BONUS)
        if values:
            self._score_zone(score, "RSI", self.rsi, RSI_ZONE_BONUS)

    def _score_stochastic(self, score: ScalpingScore) -> None:
        if len(self.stochastic.d_values) >= 2:
            self._score_crossovers(score, "Stochastic", self.stochastic, CROSSOVER_BONUS)

        k_values = self.stochastic.k_values
        if k_values:
            if k_values[-1] < STOCH_LOW:
                score.add_bullish(STOCH_EXTREME_BONUS, f"%K {k_values[-1]:.1f} below {STOCH_LOW}")
            elif k_values[-1] > STOCH_HIGH:
                score.add_bearish(STOCH_EXTREME_BONUS, f"%K {k_values[-1]:.1f} above {STOCH_HIGH}")

    def _score_macd(self, score: ScalpingScore) -> None:
        if len(self.macd.signal_values) >= 2:
            self._score_crossovers(score, "MACD", self.macd, MACD_CROSSOVER_BONUS)

        histogram = self.macd.histogram_values
        if histogram:
            if histogram[-1] > 0:
                score.add_bullish(HISTOGRAM_BONUS, "MACD histogram positive")
            elif histogram[-1] < 0:
                score.add_bearish(HISTOGRAM_BONUS, "MACD histogram negative")

    def _score_cci(self, score: ScalpingScore) -> None:
        values = self.cci.values
        if not values:
            return
        if values[-1] < -CCI_EXTREME:
            score.add_bullish(CCI_EXTREME_BONUS, f"CCI {values[-1]:.1f} below -{CCI_EXTREME}")
        elif values[-1] > CCI_EXTREME:
            score.add_bearish(CCI_EXTREME_BONUS, f"CCI {values[-1]:.1f} above {CCI_EXTREME}")

    def _score_hma(self, score: ScalpingScore) -> None:
        if len(self.hma.values) < 2:
            return
        self._score_crossovers(score, "HMA", self.hma, CROSSOVER_BONUS)

        direction = self._query("HMA", "trend direction check", self.hma.get_trend_direction)
        if direction == "Bullish":
            score.add_bullish(TREND_DIRECTION_BONUS, "HMA rising")
        elif direction == "Bearish":
            score.add_bearish(TREND_DIRECTION_BONUS, "HMA falling")

    def _score_sar(self, score: ScalpingScore) -> None:
        if not self.sar.values:
            return
        if self.sar.is_uptrend():
            score.add_bullish(SAR_BONUS, "SAR below price")
        else:
            score.add_bearish(SAR_BONUS, "SAR above price")

    def _score_bollinger(self, score: ScalpingScore) -> None:
        upper, lower = self.bollinger.upper, self.bollinger.lower
        if not self._has_close or not upper or not lower:
            return
        if self._last_close <= lower[-1]:
            score.add_bullish(BAND_TOUCH_BONUS, "close at or below lower band")
        if self._last_close >= upper[-1]:
            score.add_bearish(BAND_TOUCH_BONUS, "close at or above upper band")

    def _score_volatility_trend(self, score: ScalpingScore) -> None:
        atr_values = self.atr.values
        if len(atr_values) < 2 or not self._has_close or self._prev_close <= 0:
            return

        prev_atr, curr_atr = atr_values[-2], atr_values[-1]
        atr_change = curr_atr - prev_atr
        price_change = self._last_close - self._prev_close
        acceleration = abs(atr_change) / prev_atr if prev_atr > 0 else 0.0
        if acceleration > VOLATILITY_ACCEL_THRESHOLD:
            bonus = VOLATILITY_ACCEL_BONUS
        else:
            bonus = VOLATILITY_TREND_BONUS

        if atr_change > 0 and price_change > 0:
            score.add_bullish(bonus, "ATR and price rising")
        elif atr_change < 0 and price_change < 0:
            score.add_bearish(bonus, "ATR and price falling")

    def _score_vwap(self, score: ScalpingScore) -> None:
        values = self.vwap.values
        if not values or not self._has_close or values[-1] <= 0:
            return

        distance = (self._last_close - values[-1]) / values[-1]
        bonus = VWAP_BONUS + (VWAP_DISTANCE_BONUS if abs(distance) > VWAP_DISTANCE else 0.0)
        if distance > 0:
            score.add_bullish(bonus, "close above VWAP")
        elif distance < 0:
            score.add_bearish(bonus, "close below VWAP")

    def _score_mfi(self, score: ScalpingScore) -> None:
        values = self.mfi.values
        # a single MFI value compares against an assumed previous reading
        if len(values) >= 2:
            self._score_crossovers(score, "MFI", self.mfi, CROSSOVER_BONUS)
        if values:
            self._score_zone(score, "MFI", self.mfi, MFI_ZONE_BONUS)

    def _score_momentum(self, score: ScalpingScore) -> None:
        if not self._has_close or self._prev_close <= 0:
            return
        if self._last_close > self._prev_close:
            score.add_bullish(MOMENTUM_BONUS, "close up tick over tick")
        elif self._last_close < self._prev_close:
            score.add_bearish(MOMENTUM_BONUS, "close down tick over tick")

    def get_divergence_signals(self) -> dict[str, str]:
        """Collect divergences from RSI and MFI.

        Indicators that cannot answer are skipped, so this never raises.

        Returns:
            Mapping of indicator name to "bullish" or "bearish"
        """
        signals: dict[str, str] = {}

        try:
            found, label = self.rsi.is_divergence()
            if found:
                signals["RSI"] = label
        except (ValueError, IndicatorError) as err:
            logger.debug(f"RSI divergence skipped: {err}")

        try:
            label = self.mfi.is_divergence()
            if label != "none":
                signals["MFI"] = label
        except (ValueError, IndicatorError) as err:
            logger.debug(f"MFI divergence skipped: {err}")

        return signals
