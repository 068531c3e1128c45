"""Streaming technical indicators fused into discrete trading signals."""

from .signals import IndicatorSuite, ScalpingIndicatorSuite, SignalLabel
from .utils.config import IndicatorConfig

__version__ = "0.1.0"

__all__ = ["IndicatorSuite", "ScalpingIndicatorSuite", "SignalLabel", "IndicatorConfig"]
