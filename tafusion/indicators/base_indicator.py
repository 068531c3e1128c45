"""Base class and capability protocols for streaming indicators."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import pandas as pd

from .plotting import PlotData


class IndicatorError(Exception):
    """Indicator could not produce a derived value."""
    pass


class InsufficientDataError(IndicatorError):
    """Not enough history has been ingested for the requested query."""
    pass


@dataclass(frozen=True)
class Sample:
    """One OHLCV observation fed to indicators.

    Attributes:
        high: Highest traded price of the bar
        low: Lowest traded price of the bar
        close: Last traded price of the bar
        volume: Traded volume of the bar
    """
    high: float
    low: float
    close: float
    volume: float


def is_valid_price(price: float) -> bool:
    """Price is finite and strictly positive."""
    return math.isfinite(price) and price > 0


def is_non_negative_price(price: float) -> bool:
    """Price is finite and not negative."""
    return math.isfinite(price) and price >= 0


def is_valid_volume(volume: float) -> bool:
    """Volume is finite and not negative."""
    return math.isfinite(volume) and volume >= 0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class BaseIndicator(ABC):
    """Abstract base class for streaming technical indicators.

    Subclasses must implement:
        - name: Property returning indicator name
        - required_columns: Property listing the Sample fields consumed by add
        - add: Ingest one observation
        - reset: Drop all ingested history
        - values: Bounded copy of the derived series

    Usage:
        indicator = ConcreteIndicator()
        indicator.add_sample(Sample(high=10.5, low=9.8, close=10.2, volume=1200))
        latest = indicator.calculate()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return indicator name."""
        pass

    @property
    @abstractmethod
    def required_columns(self) -> list[str]:
        """Return the Sample fields passed positionally to add."""
        pass

    @abstractmethod
    def add(self, *values: float) -> None:
        """Ingest one observation.

        Raises:
            ValueError: Observation rejected, state unchanged
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Clear all history."""
        pass

    @property
    @abstractmethod
    def values(self) -> list[float]:
        """Return a copy of the retained derived values, oldest first."""
        pass

    def calculate(self) -> float:
        """Return the latest derived value.

        Raises:
            InsufficientDataError: No value has been produced yet
        """
        values = self.values
        if not values:
            raise InsufficientDataError(f"{self.name}: no values calculated yet")
        return values[-1]

    def _require(self, series, count: int, query: str) -> None:
        if len(series) < count:
            raise InsufficientDataError(
                f"{self.name}: {query} needs at least {count} values, have {len(series)}"
            )

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        """Export plot series; empty when there is no history."""
        return []

    def add_sample(self, sample: Sample) -> None:
        """Forward the fields this indicator needs from a Sample to add."""
        self.add(*(getattr(sample, column) for column in self.required_columns))

    def validate_data(self, df: pd.DataFrame) -> None:
        """Validate input DataFrame has required columns and is not empty.

        Args:
            df: Input DataFrame to validate

        Raises:
            ValueError: If DataFrame is empty or missing required columns
        """
        if df.empty:
            raise ValueError("DataFrame is empty")

        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    def add_frame(self, df: pd.DataFrame) -> None:
        """Validate a DataFrame and ingest its rows in index order."""
        self.validate_data(df)
        for row in df[self.required_columns].itertuples(index=False):
            self.add(*row)


@runtime_checkable
class SupportsCrossover(Protocol):
    """Reports bullish and bearish crossover events for the latest step."""

    def is_bullish_crossover(self) -> bool: ...

    def is_bearish_crossover(self) -> bool: ...


@runtime_checkable
class SupportsZone(Protocol):
    """Classifies the latest value as "Overbought", "Oversold" or "Neutral"."""

    def get_zone(self) -> str: ...


@runtime_checkable
class SupportsTrendDirection(Protocol):
    """Classifies the latest move as "Bullish", "Bearish" or "Neutral"."""

    def get_trend_direction(self) -> str: ...


@runtime_checkable
class SupportsDivergence(Protocol):
    """Compares oscillator direction with price direction."""

    def is_divergence(self): ...


@runtime_checkable
class SupportsPlot(Protocol):
    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]: ...
