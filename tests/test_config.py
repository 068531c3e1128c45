import pytest
import yaml
from tafusion.utils.config import (
    Config,
    ConfigError,
    ConfigValidationError,
    IndicatorConfig,
    load_indicator_config,
)


class TestConfig:
    def test_load_valid_config(self, tmp_path):
        """Test loading a valid config file"""
        config_content = {
            "indicators": {"rsi_overbought": 75},
            "logging": {"level": "DEBUG"},
        }
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(config_content))

        config = Config(str(config_file))

        assert config.get("indicators.rsi_overbought") == 75
        assert config.get("logging.level") == "DEBUG"

    def test_get_with_default(self, tmp_path):
        """Test missing keys fall back to default"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"indicators": {"rsi_oversold": 25}}))

        config = Config(str(config_file))

        assert config.get("nonexistent.key", "default") == "default"
        assert config.get("nonexistent.key") is None

    def test_getitem_missing_key_raises(self, tmp_path):
        """Test dictionary access raises KeyError for missing key"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"indicators": {}}))

        with pytest.raises(KeyError):
            Config(str(config_file))["indicators.rsi_overbought"]

    def test_missing_file_raises_error(self):
        """Test missing file raises ConfigError"""
        with pytest.raises(ConfigError):
            Config("/nonexistent/path/config.yaml")

    def test_invalid_yaml_raises_error(self, tmp_path):
        """Test malformed YAML raises ConfigError"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigError):
            Config(str(config_file))


class TestIndicatorConfig:
    def test_defaults_are_valid(self):
        """Test default thresholds pass validation"""
        config = IndicatorConfig()
        config.validate()

        assert config.rsi_overbought == 70.0
        assert config.rsi_oversold == 30.0
        assert config.mfi_overbought == 80.0
        assert config.mfi_oversold == 20.0
        assert config.atso_ema_period == 5

    @pytest.mark.parametrize("overrides, message", [
        ({"rsi_oversold": 70.0}, "RSI oversold"),
        ({"mfi_oversold": 90.0}, "MFI oversold"),
        ({"amdo_oversold": 2.0}, "AMDO oversold"),
        ({"rsi_overbought": 120.0}, "RSI thresholds"),
        ({"mfi_volume_scale": 0.0}, "volume scale"),
        ({"vwao_strong_trend": 0.0}, "VWAO"),
        ({"atso_ema_period": 0}, "ATSO EMA period"),
        ({"bollinger_multiplier": -1.0}, "Bollinger"),
    ])
    def test_invalid_settings_rejected(self, overrides, message):
        """Test inconsistent settings raise ConfigValidationError"""
        config = IndicatorConfig(**overrides)

        with pytest.raises(ConfigValidationError, match=message):
            config.validate()

    def test_validation_error_is_config_and_value_error(self):
        """Test ConfigValidationError fits both error families"""
        with pytest.raises(ConfigError):
            IndicatorConfig(rsi_oversold=80.0).validate()
        with pytest.raises(ValueError):
            IndicatorConfig(rsi_oversold=80.0).validate()

    def test_from_dict_rejects_unknown_keys(self):
        """Test unknown keys raise ConfigError"""
        with pytest.raises(ConfigError, match="rsi_period"):
            IndicatorConfig.from_dict({"rsi_period": 14})

    def test_to_dict_round_trip(self):
        """Test to_dict output rebuilds an equal config"""
        config = IndicatorConfig(rsi_overbought=80.0)
        assert IndicatorConfig.from_dict(config.to_dict()) == config


class TestLoadIndicatorConfig:
    def test_load_section(self, tmp_path):
        """Test settings load from the indicators section"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({
            "indicators": {"rsi_overbought": 80, "rsi_oversold": 20},
        }))

        config = load_indicator_config(str(config_file))

        assert config.rsi_overbought == 80
        assert config.rsi_oversold == 20
        assert config.mfi_overbought == 80.0

    def test_missing_section_gives_defaults(self, tmp_path):
        """Test a file without the section yields defaults"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"other": {}}))

        assert load_indicator_config(str(config_file)) == IndicatorConfig()

    def test_non_mapping_section_raises(self, tmp_path):
        """Test a scalar section raises ConfigError"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"indicators": 5}))

        with pytest.raises(ConfigError, match="mapping"):
            load_indicator_config(str(config_file))

    def test_inconsistent_file_raises_validation_error(self, tmp_path):
        """Test loaded settings are validated"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({
            "indicators": {"rsi_overbought": 30, "rsi_oversold": 70},
        }))

        with pytest.raises(ConfigValidationError):
            load_indicator_config(str(config_file))

    def test_bundled_config_file_is_valid(self):
        """Test the shipped config/indicators.yaml loads"""
        from pathlib import Path

        path = Path(__file__).resolve().parents[1] / "config" / "indicators.yaml"
        assert load_indicator_config(str(path)) == IndicatorConfig()
