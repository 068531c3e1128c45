"""Standard indicator suite fused by crossover vote."""

from ..indicators.momentum_indicators import RSIIndicator, AdaptiveDEMAMomentumOscillator
from ..indicators.trend_indicators import (
    HullMovingAverage,
    VolumeWeightedAroonOscillator,
    AdaptiveTrendStrengthOscillator,
)
from ..indicators.volume_indicators import MoneyFlowIndex
from ..utils.config import IndicatorConfig
from .base_signal import SignalLabel
from .base_suite import BaseSuite

# Vote weight of each indicator when it reports a crossover
CROSSOVER_WEIGHTS = {
    "RSI": 1.0,
    "MFI": 1.2,
    "VWAO": 1.0,
    "HMA": 1.5,
    "AMDO": 0.8,
    "ATSO": 0.5,
}

MIN_CONTRIBUTORS = 2
STRONG_VOTE = 1.5
NORMAL_VOTE = 1.0


def crossover_vote_label(weight_sum: float, contributors: int, bullish: bool) -> SignalLabel:
    """Map a crossover vote to a label.

    Fewer than ``MIN_CONTRIBUTORS`` triggered indicators always yields
    Neutral, whatever their weight.

    Args:
        weight_sum: Sum of weights of triggered indicators
        contributors: Number of triggered indicators
        bullish: Direction being voted on

    Returns:
        Strong/plain/Weak label in the voted direction, or Neutral
    """
    if contributors < MIN_CONTRIBUTORS:
        return SignalLabel.NEUTRAL

    if weight_sum >= STRONG_VOTE:
        return SignalLabel.STRONG_BULLISH if bullish else SignalLabel.STRONG_BEARISH
    elif weight_sum >= NORMAL_VOTE:
        return SignalLabel.BULLISH if bullish else SignalLabel.BEARISH
    elif weight_sum > 0:
        return SignalLabel.WEAK_BULLISH if bullish else SignalLabel.WEAK_BEARISH
    return SignalLabel.NEUTRAL


class IndicatorSuite(BaseSuite):
    """Six-indicator suite for swing timeframes.

    Indicators (ingestion and plot order):
    - RSI(5), MFI(5), VWAO(14), HMA(9), AMDO(20, 14, 0.3), ATSO(2, 14, 14)

    Queries are strict: an indicator without enough history makes the
    whole query fail with CollaboratorQueryError.
    """

    def _collaborator_factories(self, config: IndicatorConfig):
        return [
            ("RSI", lambda: RSIIndicator(5, config)),
            ("MFI", lambda: MoneyFlowIndex(5, config)),
            ("VWAO", lambda: VolumeWeightedAroonOscillator(14, config)),
            ("HMA", lambda: HullMovingAverage(9)),
            ("AMDO", lambda: AdaptiveDEMAMomentumOscillator(20, 14, 0.3, config)),
            ("ATSO", lambda: AdaptiveTrendStrengthOscillator(2, 14, 14, config)),
        ]

    @property
    def rsi(self) -> RSIIndicator:
        return self._indicators["RSI"]

    @property
    def mfi(self) -> MoneyFlowIndex:
        return self._indicators["MFI"]

    @property
    def vwao(self) -> VolumeWeightedAroonOscillator:
        return self._indicators["VWAO"]

    @property
    def hma(self) -> HullMovingAverage:
        return self._indicators["HMA"]

    @property
    def amdo(self) -> AdaptiveDEMAMomentumOscillator:
        return self._indicators["AMDO"]

    @property
    def atso(self) -> AdaptiveTrendStrengthOscillator:
        return self._indicators["ATSO"]

    def _crossover_vote(self, bullish: bool) -> SignalLabel:
        direction = "bullish" if bullish else "bearish"
        triggered = []
        for name in CROSSOVER_WEIGHTS:
            indicator = self._indicators[name]
            query = indicator.is_bullish_crossover if bullish else indicator.is_bearish_crossover
            if self._query(name, f"{direction} crossover check", query):
                triggered.append(name)

        weight_sum = sum(CROSSOVER_WEIGHTS[name] for name in triggered)
        return crossover_vote_label(weight_sum, len(triggered), bullish)

    def get_combined_signal(self) -> SignalLabel:
        """Vote on bullish crossovers across all six indicators.

        Raises:
            CollaboratorQueryError: An indicator could not answer
        """
        return self._crossover_vote(bullish=True)

    def get_combined_bearish_signal(self) -> SignalLabel:
        """Vote on bearish crossovers across all six indicators.

        Raises:
            CollaboratorQueryError: An indicator could not answer
        """
        return self._crossover_vote(bullish=False)

    def get_divergence_signals(self) -> dict[str, str]:
        """Collect price/oscillator divergences from RSI, MFI and AMDO.

        Returns:
            Mapping of indicator name to "bullish" or "bearish"; indicators
            without divergence are absent

        Raises:
            CollaboratorQueryError: RSI or MFI could not answer
        """
        signals: dict[str, str] = {}

        found, label = self._query("RSI", "divergence check", self.rsi.is_divergence)
        if found:
            signals["RSI"] = label

        label = self._query("MFI", "divergence check", self.mfi.is_divergence)
        if label != "none":
            signals["MFI"] = label

        found, label = self.amdo.is_divergence()
        if found:
            signals["AMDO"] = label

        return signals
