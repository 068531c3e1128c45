"""Shared plumbing for indicator suites."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import pandas as pd

from ..indicators.base_indicator import (
    BaseIndicator,
    IndicatorError,
    Sample,
    is_non_negative_price,
    is_valid_volume,
)
from ..indicators.plotting import PlotData
from ..utils.config import IndicatorConfig
from ..utils.logger import get_logger
from .base_signal import SignalLabel
from .errors import (
    CollaboratorConstructionError,
    CollaboratorIngestionError,
    CollaboratorQueryError,
    InvalidSampleError,
)

logger = get_logger(__name__)

SAMPLE_COLUMNS = ["high", "low", "close", "volume"]

CollaboratorFactory = Callable[[], BaseIndicator]


class BaseSuite(ABC):
    """Owns a fixed, ordered set of indicators fed from one sample stream.

    Subclasses declare their indicators through ``_collaborator_factories``
    and implement the fusion queries. The declaration order is both the
    ingestion order and the plot export order.

    A suite is not thread safe and its indicators are never shared with
    another suite.
    """

    def __init__(self, config: Optional[IndicatorConfig] = None):
        """Validate configuration, then build every indicator.

        Args:
            config: Thresholds and periods, defaults to ``default_config()``

        Raises:
            ConfigValidationError: Configuration is inconsistent
            CollaboratorConstructionError: An indicator rejected its parameters
        """
        config = config if config is not None else self.default_config()
        config.validate()
        self.config = config

        self._indicators: dict[str, BaseIndicator] = {}
        for name, factory in self._collaborator_factories(config):
            try:
                self._indicators[name] = factory()
            except (ValueError, IndicatorError) as err:
                raise CollaboratorConstructionError(name, f"failed to create {name}: {err}") from err

        self._clear_cache()
        logger.debug(f"{type(self).__name__} created with {', '.join(self._indicators)}")

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        return IndicatorConfig()

    @abstractmethod
    def _collaborator_factories(
        self, config: IndicatorConfig
    ) -> list[tuple[str, CollaboratorFactory]]:
        """Return (name, factory) pairs in ingestion order."""
        pass

    @abstractmethod
    def get_combined_signal(self) -> SignalLabel:
        pass

    @abstractmethod
    def get_combined_bearish_signal(self) -> SignalLabel:
        pass

    @abstractmethod
    def get_divergence_signals(self) -> dict[str, str]:
        pass

    def _clear_cache(self) -> None:
        self._last_close = 0.0
        self._prev_close = 0.0
        self._last_high = 0.0
        self._last_low = 0.0
        self._has_close = False

    @property
    def last_close(self) -> float:
        return self._last_close

    @property
    def prev_close(self) -> float:
        return self._prev_close

    @property
    def last_high(self) -> float:
        return self._last_high

    @property
    def last_low(self) -> float:
        return self._last_low

    @property
    def has_close(self) -> bool:
        return self._has_close

    @property
    def indicator_names(self) -> list[str]:
        return list(self._indicators)

    def get_indicator(self, name: str) -> BaseIndicator:
        """Return the indicator registered under ``name``.

        Raises:
            KeyError: No such indicator in this suite
        """
        return self._indicators[name]

    def _validate_sample(self, high: float, low: float, close: float, volume: float) -> None:
        if not high >= low:
            logger.warning(f"Rejected sample: high {high} below low {low}")
            raise InvalidSampleError()
        if not is_non_negative_price(close) or not is_valid_volume(volume):
            logger.warning(f"Rejected sample: close={close}, volume={volume}")
            raise InvalidSampleError()

    def add(self, high: float, low: float, close: float, volume: float) -> None:
        """Validate a sample and forward it to every indicator in order.

        A sample failing validation touches nothing. If an indicator rejects
        a validated sample, indicators earlier in the order keep the sample
        and the cached prices are left unchanged.

        Raises:
            InvalidSampleError: Sample shape or values invalid
            CollaboratorIngestionError: An indicator rejected the sample
        """
        self._validate_sample(high, low, close, volume)

        sample = Sample(high=high, low=low, close=close, volume=volume)
        for name, indicator in self._indicators.items():
            try:
                indicator.add_sample(sample)
            except (ValueError, IndicatorError) as err:
                logger.error(f"{name} rejected {sample}: {err}")
                raise CollaboratorIngestionError(name, f"{name} add failed: {err}") from err

        self._prev_close = self._last_close
        self._last_close = close
        self._last_high = high
        self._last_low = low
        self._has_close = True

    def add_sample(self, sample: Sample) -> None:
        self.add(sample.high, sample.low, sample.close, sample.volume)

    def add_frame(self, df: pd.DataFrame) -> int:
        """Ingest every row of an OHLCV DataFrame in index order.

        Args:
            df: DataFrame with high, low, close and volume columns

        Returns:
            Number of rows ingested

        Raises:
            ValueError: DataFrame empty or missing columns
            InvalidSampleError: A row failed validation, earlier rows stay ingested
            CollaboratorIngestionError: An indicator rejected a row
        """
        if df.empty:
            raise ValueError("DataFrame is empty")

        missing = set(SAMPLE_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        for row in df[SAMPLE_COLUMNS].itertuples(index=False):
            self.add(float(row.high), float(row.low), float(row.close), float(row.volume))
        return len(df)

    def reset(self) -> None:
        """Clear every indicator and the cached prices."""
        for indicator in self._indicators.values():
            indicator.reset()
        self._clear_cache()
        logger.debug(f"{type(self).__name__} reset")

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> list[PlotData]:
        """Concatenate every indicator's plot series in suite order."""
        series: list[PlotData] = []
        for indicator in self._indicators.values():
            series.extend(indicator.get_plot_data(start_time, interval))
        return series

    def _query(self, name: str, description: str, query: Callable[[], Any]) -> Any:
        try:
            return query()
        except (ValueError, IndicatorError) as err:
            raise CollaboratorQueryError(name, f"{name} {description} failed: {err}") from err
