"""
Tests for chart normalisation and PNG rendering.
"""

import random
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.services.charts import (
    celsius_to_fahrenheit,
    generate_metric_chart,
    metric_value,
    normalize_chart,
    resolve_metric,
)

START = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)


def make_reading(i: int, temperature=20.0, humidity=50.0, pressure=1013.0, gas_resistance=100.0):
    return SimpleNamespace(
        id=i,
        timestamp=START + timedelta(minutes=i),
        temperature=temperature,
        humidity=humidity,
        pressure=pressure,
        gas_resistance=gas_resistance,
    )


class TestMetricValue:
    """Tests for per-reading metric values."""

    def test_twenty_celsius_is_68_fahrenheit(self):
        """Test the Fahrenheit conversion shown on the tiles."""
        assert celsius_to_fahrenheit(20) == 68.0
        assert f"{metric_value(make_reading(1, temperature=20), 'temperature'):.1f}" == "68.0"

    def test_other_metrics_pass_through(self):
        reading = make_reading(1, humidity=41.5, pressure=1001.0, gas_resistance=87.2)

        assert metric_value(reading, "humidity") == 41.5
        assert metric_value(reading, "pressure") == 1001.0
        assert metric_value(reading, "gasResistance") == 87.2

    def test_unknown_metric(self):
        with pytest.raises(ValueError):
            metric_value(make_reading(1), "co2")

    def test_resolve_metric_fallback(self):
        assert resolve_metric("pressure") == "pressure"
        assert resolve_metric("co2") == "temperature"
        assert resolve_metric(None) == "temperature"


class TestNormalizeChart:
    """Tests for normalize_chart."""

    def test_empty_input(self):
        """Test that no readings means nothing to draw."""
        chart = normalize_chart([], "temperature")

        assert chart.is_empty
        assert chart.points == []
        assert chart.polyline is None
        assert chart.y_labels == []

    def test_single_point(self):
        """Test that one reading sits at x=0, midpoint, with no polyline."""
        chart = normalize_chart([make_reading(1)], "humidity")

        assert len(chart.points) == 1
        assert chart.points[0].x == 0
        assert chart.points[0].y == 50
        assert chart.polyline is None

    def test_flat_series_on_midpoint(self):
        """Test that equal values don't divide by zero."""
        readings = [make_reading(i, pressure=1000.0) for i in range(5)]

        chart = normalize_chart(readings, "pressure")

        assert all(p.y == 50 for p in chart.points)
        assert chart.min_value == chart.max_value == 1000.0

    def test_min_max_scaling(self):
        """Test that min maps to the bottom and max to the top."""
        readings = [
            make_reading(0, humidity=40.0),
            make_reading(1, humidity=50.0),
            make_reading(2, humidity=60.0),
        ]

        chart = normalize_chart(readings, "humidity", width=300, height=100)

        assert [(p.x, p.y) for p in chart.points] == [(0, 100), (150, 50), (300, 0)]
        assert chart.polyline == "0.0,100.0 150.0,50.0 300.0,0.0"
        assert chart.y_labels == ["60.0", "50.0", "40.0"]

    def test_oldest_first_regardless_of_input_order(self):
        """Test that shuffled, newest-first and oldest-first inputs give the same chart."""
        readings = [make_reading(i, temperature=15 + i * 0.7) for i in range(8)]
        shuffled = readings[:]
        random.Random(7).shuffle(shuffled)

        expected = normalize_chart(readings, "temperature")

        assert normalize_chart(list(reversed(readings)), "temperature").points == expected.points
        assert normalize_chart(shuffled, "temperature").points == expected.points
        assert [p.reading_id for p in expected.points] == list(range(8))

    def test_temperature_plotted_in_fahrenheit(self):
        readings = [make_reading(0, temperature=0.0), make_reading(1, temperature=100.0)]

        chart = normalize_chart(readings, "temperature")

        assert chart.min_value == 32.0
        assert chart.max_value == 212.0

    def test_custom_plot_size(self):
        readings = [make_reading(0, gas_resistance=10.0), make_reading(1, gas_resistance=20.0)]

        chart = normalize_chart(readings, "gasResistance", width=600, height=200)

        assert chart.points[-1].x == 600
        assert chart.points[0].y == 200


class TestMetricChartPng:
    """Tests for the matplotlib chart."""

    def test_png_with_data(self):
        readings = [make_reading(i, humidity=40 + i) for i in range(4)]

        buf = generate_metric_chart(readings, "humidity", "1h")

        assert buf.getvalue().startswith(b"\x89PNG")

    def test_png_without_data(self):
        buf = generate_metric_chart([], "temperature", "24h")

        assert buf.getvalue().startswith(b"\x89PNG")
