"""Plot series container and export helpers."""

import json
from dataclasses import dataclass, field, asdict
from typing import Optional

import pandas as pd

CSV_COLUMNS = ["Name", "X", "Y", "Type", "Signal", "Timestamp"]


@dataclass
class PlotData:
    """One exported chart series.

    Attributes:
        name: Series label, e.g. 'Relative Strength Index'
        x: Sample positions
        y: Series values aligned with x
        type: Rendering hint ('line' or 'scatter')
        signal: Optional signal category for marker series
        timestamp: Optional unix timestamps aligned with x
    """
    name: str
    x: list[float] = field(default_factory=list)
    y: list[float] = field(default_factory=list)
    type: str = "line"
    signal: str = ""
    timestamp: Optional[list[int]] = None


def generate_timestamps(start_time: int, count: int, interval: int) -> list[int]:
    """Return ``count`` timestamps starting at ``start_time`` spaced by ``interval``."""
    return [start_time + i * interval for i in range(count)]


def _check_lengths(series: list[PlotData]) -> None:
    for item in series:
        if len(item.x) != len(item.y):
            raise ValueError(
                f"Series '{item.name}' has {len(item.x)} x values and {len(item.y)} y values"
            )


def format_plot_data_json(series: list[PlotData]) -> str:
    """Serialize plot series to a JSON array.

    Raises:
        ValueError: A series has mismatched x/y lengths
    """
    _check_lengths(series)
    return json.dumps([asdict(item) for item in series])


def plot_data_to_frame(series: list[PlotData]) -> pd.DataFrame:
    """Flatten plot series into one row per point.

    Raises:
        ValueError: A series has mismatched x/y lengths
    """
    _check_lengths(series)
    rows = []
    for item in series:
        for i, (x, y) in enumerate(zip(item.x, item.y)):
            timestamp = item.timestamp[i] if item.timestamp and i < len(item.timestamp) else None
            rows.append([item.name, x, y, item.type, item.signal, timestamp])
    return pd.DataFrame(rows, columns=CSV_COLUMNS).astype({"Timestamp": "Int64"})


def format_plot_data_csv(series: list[PlotData]) -> str:
    """Serialize plot series to CSV with a Name,X,Y,Type,Signal,Timestamp header."""
    return plot_data_to_frame(series).to_csv(index=False)


def make_series(
    name: str,
    values: list[float],
    start_time: int,
    interval: int,
    type: str = "line",
    signal: str = "",
    offset: int = 0,
) -> PlotData:
    """Build a series whose x axis is the position of each value.

    ``offset`` shifts the first point, aligning a series that starts later
    than its siblings.
    """
    return PlotData(
        name=name,
        x=[float(offset + i) for i in range(len(values))],
        y=list(values),
        type=type,
        signal=signal,
        timestamp=generate_timestamps(start_time + offset * interval, len(values), interval),
    )


def make_marker_series(
    name: str,
    markers: list[tuple[int, float]],
    start_time: int,
    interval: int,
    signal: str = "",
) -> PlotData:
    """Build a scatter series from (position, value) markers."""
    return PlotData(
        name=name,
        x=[float(i) for i, _ in markers],
        y=[value for _, value in markers],
        type="scatter",
        signal=signal,
        timestamp=[start_time + i * interval for i, _ in markers],
    )
