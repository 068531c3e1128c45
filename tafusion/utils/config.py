"""Configuration loading and indicator threshold settings."""
import os
from dataclasses import dataclass, fields, asdict
from typing import Any, Optional
import yaml


class ConfigError(Exception):
    """Configuration related error"""
    pass


class ConfigValidationError(ConfigError, ValueError):
    """Indicator thresholds or periods are inconsistent"""
    pass


class Config:
    """YAML configuration file reader.

    Provides dotted access to nested keys.

    Example:
        config = Config("config/indicators.yaml")
        overbought = config.get("indicators.rsi_overbought", 70)
    """

    def __init__(self, config_path: str):
        """Load a configuration file.

        Args:
            config_path: Path to a YAML file

        Raises:
            ConfigError: File missing or not valid YAML
        """
        self._config_path = config_path

        if not os.path.exists(config_path):
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file format: {e}")

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Get a configuration value.

        Nested keys are separated by dots, e.g. "indicators.rsi_overbought".

        Args:
            key: Dotted key
            default: Returned when the key is absent

        Returns:
            Configured value or default
        """
        keys = key.split(".")
        value = self._data

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def __getitem__(self, key: str) -> Any:
        """Dictionary style access"""
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value


@dataclass
class IndicatorConfig:
    """Thresholds and smoothing settings shared by indicator suites.

    Attributes:
        rsi_overbought: RSI level above which the market is overbought
        rsi_oversold: RSI level below which the market is oversold
        mfi_overbought: Money Flow Index overbought level
        mfi_oversold: Money Flow Index oversold level
        mfi_volume_scale: Divisor applied to raw money flow
        amdo_overbought: Adaptive DEMA momentum level treated as stretched up
        amdo_oversold: Adaptive DEMA momentum level treated as stretched down
        vwao_strong_trend: Aroon oscillator level marking a strong trend
        atso_ema_period: EMA period smoothing the trend strength oscillator
        bollinger_multiplier: Standard deviation multiplier for the bands
    """
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    mfi_overbought: float = 80.0
    mfi_oversold: float = 20.0
    mfi_volume_scale: float = 300000.0
    amdo_overbought: float = 1.0
    amdo_oversold: float = -1.0
    vwao_strong_trend: float = 70.0
    atso_ema_period: int = 5
    bollinger_multiplier: float = 2.0

    def validate(self) -> None:
        """Check the settings are mutually consistent.

        Raises:
            ConfigValidationError: First inconsistency found
        """
        self._check_band("RSI", self.rsi_oversold, self.rsi_overbought, bounded=True)
        self._check_band("MFI", self.mfi_oversold, self.mfi_overbought, bounded=True)
        self._check_band("AMDO", self.amdo_oversold, self.amdo_overbought, bounded=False)

        if self.mfi_volume_scale <= 0:
            raise ConfigValidationError(
                f"MFI volume scale must be positive, got {self.mfi_volume_scale}"
            )
        if not 0 < self.vwao_strong_trend <= 100:
            raise ConfigValidationError(
                f"VWAO strong trend must be in (0, 100], got {self.vwao_strong_trend}"
            )
        if self.atso_ema_period < 1:
            raise ConfigValidationError(
                f"ATSO EMA period must be at least 1, got {self.atso_ema_period}"
            )
        if self.bollinger_multiplier <= 0:
            raise ConfigValidationError(
                f"Bollinger multiplier must be positive, got {self.bollinger_multiplier}"
            )

    @staticmethod
    def _check_band(label: str, oversold: float, overbought: float, bounded: bool) -> None:
        if bounded:
            for value in (oversold, overbought):
                if not 0 <= value <= 100:
                    raise ConfigValidationError(
                        f"{label} thresholds must be within [0, 100], got {value}"
                    )
        if oversold >= overbought:
            raise ConfigValidationError(
                f"{label} oversold threshold ({oversold}) must be below "
                f"overbought threshold ({overbought})"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "IndicatorConfig":
        """Build a config from a mapping, keeping defaults for absent keys.

        Raises:
            ConfigError: Mapping holds keys that are not config fields
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown indicator config keys: {sorted(unknown)}")
        return cls(**data)


def load_indicator_config(config_path: str, section: str = "indicators") -> IndicatorConfig:
    """Read and validate indicator settings from a YAML file.

    Args:
        config_path: YAML file path
        section: Dotted key of the mapping holding indicator settings

    Returns:
        Validated IndicatorConfig

    Raises:
        ConfigError: File missing, malformed, or section not a mapping
        ConfigValidationError: Settings are inconsistent
    """
    data = Config(config_path).get(section, {})
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")

    config = IndicatorConfig.from_dict(data)
    config.validate()
    return config
