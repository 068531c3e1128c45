"""Streaming technical indicator module.

Indicators consume one bar at a time and keep bounded rolling state:
- Momentum indicators: RSI, Stochastic, CCI, AMDO
- Trend indicators: EMA, MACD, HMA, Parabolic SAR, VWAO, ATSO
- Volume/volatility indicators: MFI, ATR, Bollinger Bands, VWAP
- Plot series export helpers
"""

from .base_indicator import (
    BaseIndicator,
    IndicatorError,
    InsufficientDataError,
    Sample,
    SupportsCrossover,
    SupportsDivergence,
    SupportsPlot,
    SupportsTrendDirection,
    SupportsZone,
    clamp,
    is_non_negative_price,
    is_valid_price,
    is_valid_volume,
)
from .momentum_indicators import (
    RSIIndicator,
    StochasticOscillator,
    CCIIndicator,
    AdaptiveDEMAMomentumOscillator,
)
from .trend_indicators import (
    EMAIndicator,
    MACDIndicator,
    HullMovingAverage,
    ParabolicSAR,
    VolumeWeightedAroonOscillator,
    AdaptiveTrendStrengthOscillator,
)
from .volume_indicators import MoneyFlowIndex, ATRIndicator, BollingerBands, VWAPIndicator
from .plotting import (
    PlotData,
    generate_timestamps,
    format_plot_data_json,
    format_plot_data_csv,
    plot_data_to_frame,
)

__all__ = [
    # Base
    "BaseIndicator",
    "IndicatorError",
    "InsufficientDataError",
    "Sample",
    "SupportsCrossover",
    "SupportsDivergence",
    "SupportsPlot",
    "SupportsTrendDirection",
    "SupportsZone",
    "clamp",
    "is_non_negative_price",
    "is_valid_price",
    "is_valid_volume",
    # Momentum
    "RSIIndicator",
    "StochasticOscillator",
    "CCIIndicator",
    "AdaptiveDEMAMomentumOscillator",
    # Trend
    "EMAIndicator",
    "MACDIndicator",
    "HullMovingAverage",
    "ParabolicSAR",
    "VolumeWeightedAroonOscillator",
    "AdaptiveTrendStrengthOscillator",
    # Volume/Volatility
    "MoneyFlowIndex",
    "ATRIndicator",
    "BollingerBands",
    "VWAPIndicator",
    # Plotting
    "PlotData",
    "generate_timestamps",
    "format_plot_data_json",
    "format_plot_data_csv",
    "plot_data_to_frame",
]
