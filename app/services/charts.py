"""
Charts Service - chart geometry for the dashboard and PNG charts
Geometry is plain min/max scaling into a fixed plot box (SVG);
PNG rendering uses matplotlib + seaborn
"""

import matplotlib
matplotlib.use('Agg')  # Headless mode - must be before pyplot import

import matplotlib.pyplot as plt
import matplotlib.dates as mdates
import seaborn as sns
from dataclasses import dataclass, field
from io import BytesIO
from typing import Sequence

from app.core.timeframes import ensure_utc

# Set seaborn style
sns.set_theme(style="whitegrid", palette="husl")

# Metric key -> display settings
METRICS = {
    'temperature': {'label': 'Temperature', 'unit': '°F', 'color': '#dc2626'},
    'humidity': {'label': 'Humidity', 'unit': '%', 'color': '#2563eb'},
    'pressure': {'label': 'Pressure', 'unit': 'hPa', 'color': '#9333ea'},
    'gasResistance': {'label': 'Gas Resistance', 'unit': 'KΩ', 'color': '#16a34a'},
}

DEFAULT_METRIC = 'temperature'
NO_DATA_MESSAGE = "No data for selected time frame"


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def resolve_metric(metric: str | None) -> str:
    """Unknown metric names fall back to temperature."""
    return metric if metric in METRICS else DEFAULT_METRIC


def metric_value(reading, metric: str) -> float:
    """
    Scalar plotted for a reading.

    Temperature is shown in Fahrenheit to match the current-reading tiles;
    the other metrics pass through unchanged.
    """
    if metric == 'temperature':
        return celsius_to_fahrenheit(reading.temperature)
    if metric == 'humidity':
        return reading.humidity
    if metric == 'pressure':
        return reading.pressure
    if metric == 'gasResistance':
        return reading.gas_resistance
    raise ValueError(f"Unknown metric: {metric}")


def chronological(readings: Sequence) -> list:
    """Oldest first, whatever order the readings arrived in."""
    return sorted(readings, key=lambda r: (ensure_utc(r.timestamp), r.id))


@dataclass
class ChartPoint:
    x: float
    y: float
    value: float
    reading_id: int


@dataclass
class ChartGeometry:
    """Screen-space chart for one metric over one window."""

    metric: str
    width: float
    height: float
    points: list[ChartPoint] = field(default_factory=list)
    min_value: float | None = None
    max_value: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def mid_value(self) -> float | None:
        if self.is_empty:
            return None
        return (self.max_value + self.min_value) / 2

    @property
    def polyline(self) -> str | None:
        """SVG points attribute; only drawn when there are 2+ points."""
        if len(self.points) < 2:
            return None
        return " ".join(f"{p.x},{p.y}" for p in self.points)

    @property
    def y_labels(self) -> list[str]:
        """Axis labels top to bottom: max, mid, min."""
        if self.is_empty:
            return []
        return [f"{v:.1f}" for v in (self.max_value, self.mid_value, self.min_value)]


def normalize_chart(
    readings: Sequence,
    metric: str,
    width: float = 300,
    height: float = 100,
) -> ChartGeometry:
    """
    Map a metric across readings into a width x height plot box.

    x = i / (n - 1) * width (n == 1 -> x = 0)
    y = height - (v - min) / range * height, higher values nearer the top.
    A flat series (max == min) sits on the vertical midpoint.
    """
    geometry = ChartGeometry(metric=metric, width=width, height=height)
    if not readings:
        return geometry

    ordered = chronological(readings)
    values = [metric_value(r, metric) for r in ordered]

    min_value = min(values)
    max_value = max(values)
    flat = max_value == min_value
    value_range = (max_value - min_value) or 1
    denominator = max(len(ordered) - 1, 1)

    for i, (reading, value) in enumerate(zip(ordered, values)):
        x = i / denominator * width
        if flat:
            y = height / 2
        else:
            y = height - ((value - min_value) / value_range) * height
        geometry.points.append(ChartPoint(x=x, y=y, value=value, reading_id=reading.id))

    geometry.min_value = min_value
    geometry.max_value = max_value
    return geometry


def generate_metric_chart(
    readings: Sequence,
    metric: str,
    time_frame: str,
) -> BytesIO:
    """
    Generate a PNG line chart of one metric over a window.

    Args:
        readings: Readings in any order
        metric: One of METRICS
        time_frame: Window token for the title

    Returns:
        BytesIO buffer with PNG image
    """
    if not readings:
        return _generate_empty_chart(NO_DATA_MESSAGE)

    info = METRICS[metric]
    ordered = chronological(readings)
    times = [ensure_utc(r.timestamp) for r in ordered]
    values = [metric_value(r, metric) for r in ordered]

    fig, ax = plt.subplots(figsize=(10, 5))

    if len(values) > 1:
        ax.plot(times, values, color=info['color'], linewidth=2)
        ax.fill_between(times, values, min(values), alpha=0.15, color=info['color'])
    ax.scatter(times, values, color=info['color'], s=12, zorder=3)

    ax.set_ylabel(f"{info['label']} ({info['unit']})", fontsize=11)
    ax.set_title(f"{info['label']} ({time_frame})", fontsize=14, fontweight='bold')

    # Hours for short windows, dates for long ones
    if time_frame in ('7d', '30d'):
        ax.xaxis.set_major_formatter(mdates.DateFormatter('%d.%m'))
    else:
        ax.xaxis.set_major_formatter(mdates.DateFormatter('%H:%M'))
    plt.setp(ax.xaxis.get_majorticklabels(), rotation=45, ha='right')

    avg = sum(values) / len(values)
    stats_text = (
        f"Avg: {avg:.1f} | Max: {max(values):.1f} | Min: {min(values):.1f} {info['unit']}"
        f" | {len(values)} readings"
    )
    fig.text(0.5, 0.01, stats_text, ha='center', fontsize=10,
             bbox=dict(boxstyle='round', facecolor='white', alpha=0.8))

    plt.tight_layout(rect=[0, 0.04, 1, 1])

    buf = BytesIO()
    fig.savefig(buf, format='png', dpi=120, bbox_inches='tight',
                facecolor='white', edgecolor='none')
    buf.seek(0)
    plt.close(fig)

    return buf


def _generate_empty_chart(message: str) -> BytesIO:
    """Generate a simple chart with 'no data' message."""
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.text(0.5, 0.5, message, ha='center', va='center', fontsize=14, color='gray')
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.axis('off')

    buf = BytesIO()
    fig.savefig(buf, format='png', dpi=100, bbox_inches='tight',
                facecolor='white', edgecolor='none')
    buf.seek(0)
    plt.close(fig)

    return buf
