"""Tests for base indicator helpers and plot export."""

import json
import math

import pytest
import pandas as pd
from tafusion.indicators.base_indicator import (
    BaseIndicator,
    InsufficientDataError,
    Sample,
    SupportsCrossover,
    SupportsDivergence,
    SupportsTrendDirection,
    SupportsZone,
    clamp,
    is_non_negative_price,
    is_valid_price,
    is_valid_volume,
)
from tafusion.indicators.momentum_indicators import RSIIndicator
from tafusion.indicators.trend_indicators import AdaptiveTrendStrengthOscillator, HullMovingAverage
from tafusion.indicators.volume_indicators import MoneyFlowIndex, VWAPIndicator
from tafusion.indicators.plotting import (
    PlotData,
    format_plot_data_csv,
    format_plot_data_json,
    generate_timestamps,
    plot_data_to_frame,
)


class TestPricePredicates:
    """Tests for price and volume validity helpers."""

    def test_valid_price_requires_positive(self):
        assert is_valid_price(1.5)
        assert not is_valid_price(0.0)
        assert not is_valid_price(-1.0)

    def test_non_negative_price_accepts_zero(self):
        assert is_non_negative_price(0.0)
        assert not is_non_negative_price(-0.01)

    def test_non_finite_values_rejected(self):
        for value in (math.nan, math.inf, -math.inf):
            assert not is_valid_price(value)
            assert not is_non_negative_price(value)
            assert not is_valid_volume(value)

    def test_clamp(self):
        assert clamp(150.0, -100.0, 100.0) == 100.0
        assert clamp(-150.0, -100.0, 100.0) == -100.0
        assert clamp(5.0, -100.0, 100.0) == 5.0


class TestBaseIndicator:
    """Tests for BaseIndicator abstract class."""

    def test_cannot_instantiate_abstract_class(self):
        """Test that BaseIndicator cannot be instantiated directly."""
        with pytest.raises(TypeError):
            BaseIndicator()

    def test_add_sample_forwards_required_columns(self):
        """Test add_sample passes only the declared fields."""
        vwap = VWAPIndicator()
        vwap.add_sample(Sample(high=12.0, low=9.0, close=9.0, volume=10.0))

        assert vwap.calculate() == pytest.approx(10.0)

    def test_calculate_without_values_raises(self):
        """Test calculate on an empty indicator raises."""
        with pytest.raises(InsufficientDataError, match="no values"):
            RSIIndicator().calculate()

    def test_validate_data_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            RSIIndicator().validate_data(pd.DataFrame())

    def test_validate_data_missing_columns_raises(self):
        df = pd.DataFrame({"close": [1.0, 2.0]})
        with pytest.raises(ValueError, match="Missing required columns"):
            MoneyFlowIndex().validate_data(df)

    def test_add_frame_ingests_rows_in_order(self):
        """Test add_frame feeds each row through add."""
        df = pd.DataFrame({"close": [float(10 + i) for i in range(7)]})
        rsi = RSIIndicator(period=5)
        rsi.add_frame(df)

        assert rsi.closes == [11.0, 12.0, 13.0, 14.0, 15.0, 16.0]
        assert rsi.values == [100.0, 100.0]


class TestCapabilities:
    """Tests for capability protocol membership."""

    def test_rsi_capabilities(self):
        rsi = RSIIndicator()
        assert isinstance(rsi, SupportsCrossover)
        assert isinstance(rsi, SupportsZone)
        assert isinstance(rsi, SupportsDivergence)

    def test_hma_has_direction_but_no_zone(self):
        hma = HullMovingAverage()
        assert isinstance(hma, SupportsTrendDirection)
        assert not isinstance(hma, SupportsZone)

    def test_atso_has_crossover_but_no_divergence(self):
        atso = AdaptiveTrendStrengthOscillator()
        assert isinstance(atso, SupportsCrossover)
        assert not isinstance(atso, SupportsDivergence)


class TestPlotting:
    """Tests for plot series helpers."""

    def test_generate_timestamps(self):
        assert generate_timestamps(1000, 3, 60) == [1000, 1060, 1120]
        assert generate_timestamps(0, 0, 60) == []

    def test_json_format(self):
        series = [PlotData(name="RSI", x=[0.0, 1.0], y=[40.0, 55.0], timestamp=[10, 20])]

        decoded = json.loads(format_plot_data_json(series))

        assert decoded[0]["name"] == "RSI"
        assert decoded[0]["y"] == [40.0, 55.0]
        assert decoded[0]["type"] == "line"
        assert decoded[0]["timestamp"] == [10, 20]

    def test_csv_format_has_header_and_rows(self):
        series = [
            PlotData(name="RSI", x=[0.0, 1.0], y=[40.0, 55.0], timestamp=[10, 20]),
            PlotData(name="Signals", x=[1.0], y=[1.0], type="scatter", signal="crossover"),
        ]

        lines = format_plot_data_csv(series).strip().splitlines()

        assert lines[0] == "Name,X,Y,Type,Signal,Timestamp"
        assert lines[1] == "RSI,0.0,40.0,line,,10"
        assert lines[3] == "Signals,1.0,1.0,scatter,crossover,"

    def test_mismatched_lengths_raise(self):
        series = [PlotData(name="bad", x=[0.0, 1.0], y=[1.0])]

        with pytest.raises(ValueError, match="bad"):
            format_plot_data_json(series)
        with pytest.raises(ValueError, match="bad"):
            format_plot_data_csv(series)

    def test_frame_has_one_row_per_point(self):
        series = [PlotData(name="A", x=[0.0, 1.0, 2.0], y=[1.0, 2.0, 3.0])]

        df = plot_data_to_frame(series)

        assert list(df.columns) == ["Name", "X", "Y", "Type", "Signal", "Timestamp"]
        assert len(df) == 3
        assert df["Timestamp"].isna().all()
