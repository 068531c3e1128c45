"""Composite signal labels and threshold banding."""

from dataclasses import dataclass
from enum import Enum


class SignalLabel(str, Enum):
    """Composite trading bias produced by an indicator suite.

    Ordered from most bullish to most bearish. Members compare equal to
    their display strings, e.g. ``SignalLabel.BULLISH == "Bullish"``.
    """
    STRONG_BULLISH = "Strong Bullish"
    BULLISH = "Bullish"
    WEAK_BULLISH = "Weak Bullish"
    NEUTRAL = "Neutral"
    WEAK_BEARISH = "Weak Bearish"
    BEARISH = "Bearish"
    STRONG_BEARISH = "Strong Bearish"

    def __str__(self) -> str:
        return self.value

    def is_bullish(self) -> bool:
        """Check if signal indicates bullish sentiment."""
        return self in (SignalLabel.STRONG_BULLISH, SignalLabel.BULLISH, SignalLabel.WEAK_BULLISH)

    def is_bearish(self) -> bool:
        """Check if signal indicates bearish sentiment."""
        return self in (SignalLabel.STRONG_BEARISH, SignalLabel.BEARISH, SignalLabel.WEAK_BEARISH)


@dataclass(frozen=True)
class SignalThresholds:
    """Net score levels for the strong, normal and weak bands.

    The same magnitudes apply on the bearish side with negative sign.
    """
    strong: float
    normal: float
    weak: float


def score_to_label(score: float, thresholds: SignalThresholds) -> SignalLabel:
    """Convert a net bull-minus-bear score to a SignalLabel.

    Bullish bands are checked first (>= strong, >= normal, >= weak),
    then bearish bands (<= -strong, <= -normal, <= -weak).

    Args:
        score: Net score, positive for bullish bias
        thresholds: Band levels in effect

    Returns:
        Corresponding SignalLabel
    """
    if score >= thresholds.strong:
        return SignalLabel.STRONG_BULLISH
    elif score >= thresholds.normal:
        return SignalLabel.BULLISH
    elif score >= thresholds.weak:
        return SignalLabel.WEAK_BULLISH
    elif score <= -thresholds.strong:
        return SignalLabel.STRONG_BEARISH
    elif score <= -thresholds.normal:
        return SignalLabel.BEARISH
    elif score <= -thresholds.weak:
        return SignalLabel.WEAK_BEARISH
    return SignalLabel.NEUTRAL
