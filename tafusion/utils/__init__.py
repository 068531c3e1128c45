"""Configuration and logging helpers."""

from .config import (
    Config,
    ConfigError,
    ConfigValidationError,
    IndicatorConfig,
    load_indicator_config,
)
from .logger import setup_logger, get_logger

__all__ = [
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "IndicatorConfig",
    "load_indicator_config",
    "setup_logger",
    "get_logger",
]
