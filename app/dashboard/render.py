"""
Dashboard rendering - view model and HTML for the weather station page
"""

from dataclasses import dataclass
from datetime import datetime

from jinja2 import DictLoader, Environment

from app.core.timeframes import TimeFrame, ensure_utc, filter_by_time_frame, resolve_time_frame
from app.dashboard.state import DashboardState
from app.schemas.reading import ReadingOut
from app.services.charts import (
    METRICS,
    NO_DATA_MESSAGE,
    ChartGeometry,
    celsius_to_fahrenheit,
    normalize_chart,
    resolve_metric,
)

RECENT_ROWS = 10
GRID_LINES = [0, 25, 50, 75, 100]  # % of plot height


@dataclass
class DashboardView:
    """Everything the page needs for one time frame / metric selection."""

    time_frame: TimeFrame
    metric: str
    latest: ReadingOut | None
    readings: list[ReadingOut]  # filtered, newest first
    chart: ChartGeometry

    @property
    def count(self) -> int:
        return len(self.readings)

    @property
    def recent(self) -> list[ReadingOut]:
        return self.readings[:RECENT_ROWS]


def build_view(
    state: DashboardState,
    time_frame: str | None,
    metric: str | None,
    now: datetime | None = None,
    width: float = 300,
    height: float = 100,
) -> DashboardView:
    """Narrow the polled readings to the display window and lay out the chart."""
    resolved_tf = resolve_time_frame(time_frame)
    resolved_metric = resolve_metric(metric)
    filtered = filter_by_time_frame(state.readings, resolved_tf, now)

    return DashboardView(
        time_frame=resolved_tf,
        metric=resolved_metric,
        latest=state.latest,
        readings=filtered,
        chart=normalize_chart(filtered, resolved_metric, width, height),
    )


def latest_tiles(reading: ReadingOut) -> list[dict]:
    """Current-reading tiles; temperature in Fahrenheit."""
    return [
        {"label": "Temperature", "value": f"{celsius_to_fahrenheit(reading.temperature):.1f}°F",
         "color": METRICS["temperature"]["color"]},
        {"label": "Humidity", "value": f"{reading.humidity:.1f}%",
         "color": METRICS["humidity"]["color"]},
        {"label": "Pressure", "value": f"{reading.pressure:.1f} hPa",
         "color": METRICS["pressure"]["color"]},
        {"label": "Gas Resistance", "value": f"{reading.gas_resistance:.1f} KΩ",
         "color": METRICS["gasResistance"]["color"]},
    ]


def view_to_dict(view: DashboardView, state: DashboardState) -> dict:
    """JSON form of the view (GET /api/view)."""
    chart = view.chart
    return {
        "loading": state.loading,
        "error": state.error,
        "lastPolledAt": state.last_polled_at.isoformat() if state.last_polled_at else None,
        "timeFrame": view.time_frame.value,
        "metric": view.metric,
        "count": view.count,
        "latest": latest_tiles(view.latest) if view.latest else None,
        "chart": {
            "empty": chart.is_empty,
            "width": chart.width,
            "height": chart.height,
            "polyline": chart.polyline,
            "points": [{"x": p.x, "y": p.y, "value": p.value, "id": p.reading_id} for p in chart.points],
            "yLabels": chart.y_labels,
        },
        "recent": [r.model_dump(by_alias=True, mode="json") for r in view.recent],
    }


# ==================== HTML ====================

BASE_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta http-equiv="refresh" content="10">
  <title>Attic Weather Station</title>
  <style>
    body { font-family: sans-serif; background: #f9fafb; margin: 0; }
    .card { background: white; border-radius: 12px; border: 1px solid #f3f4f6; padding: 16px; margin: 16px; }
    .tiles { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; margin: 16px; }
    .tile .value { font-size: 1.5em; font-weight: bold; }
    .muted { color: #6b7280; font-size: 0.85em; }
    a.opt { padding: 6px 10px; border-radius: 8px; background: #f3f4f6; color: #4b5563; text-decoration: none; }
    a.opt.active { background: #2563eb; color: white; }
    .center { text-align: center; }
  </style>
</head>
<body>
{% block body %}{% endblock %}
</body>
</html>"""

LOADING_PAGE = """{% extends "base.html" %}
{% block body %}<div class="card center">Loading sensor data...</div>{% endblock %}"""

ERROR_PAGE = """{% extends "base.html" %}
{% block body %}
<div class="card center">
  <div style="color: #ef4444">⚠️ Error</div>
  <div class="muted">{{ message }}</div>
  <form method="post" action="/retry"><button type="submit">Retry</button></form>
</div>
{% endblock %}"""

DASHBOARD_PAGE = """{% extends "base.html" %}
{% block body %}
<div class="card center">
  <h1>🌡️ Attic Weather Station</h1>
  <div class="muted">{% if latest %}Last updated: {{ latest.timestamp | clock }}{% else %}No data{% endif %}</div>
</div>

{% if tiles %}
<div class="tiles">
  {% for t in tiles %}
  <div class="card tile" style="margin: 0">
    <div class="muted">{{ t.label }}</div>
    <div class="value" style="color: {{ t.color }}">{{ t.value }}</div>
  </div>
  {% endfor %}
</div>
{% endif %}

<div class="card">
  <div>Time Frame</div>
  <p>
  {% for tf in time_frames %}
    <a class="opt{% if tf == view.time_frame %} active{% endif %}" href="/?timeFrame={{ tf.value }}&metric={{ view.metric }}">{{ tf.value }}</a>
  {% endfor %}
  </p>
</div>
<div class="card">
  <div>Chart Metric</div>
  <p>
  {% for key, info in metrics.items() %}
    <a class="opt{% if key == view.metric %} active{% endif %}" href="/?timeFrame={{ view.time_frame.value }}&metric={{ key }}">{{ info.label }}</a>
  {% endfor %}
  </p>
</div>

<div class="card">
  <div>{{ metrics[view.metric].label }} Chart ({{ view.time_frame.value }})</div>
  {% if chart.is_empty %}
  <div class="center muted" style="padding: 40px">📊<br>{{ no_data }}</div>
  {% else %}
  <svg viewBox="0 0 {{ chart.width }} {{ chart.height }}" width="100%" height="160" preserveAspectRatio="none">
    {% for pct in grid_lines %}
    <line x1="0" y1="{{ chart.height * pct / 100 }}" x2="{{ chart.width }}" y2="{{ chart.height * pct / 100 }}" stroke="#e5e7eb" stroke-width="0.5"/>
    {% endfor %}
    {% if chart.polyline %}
    <polyline fill="none" stroke="{{ color }}" stroke-width="2" points="{{ chart.polyline }}"/>
    {% endif %}
    {% for p in chart.points %}
    <circle cx="{{ p.x }}" cy="{{ p.y }}" r="2" fill="{{ color }}"/>
    {% endfor %}
  </svg>
  <div class="muted">max / mid / min: {{ chart.y_labels | join(" / ") }}</div>
  {% endif %}
  <div class="muted center">{{ view.count }} readings in {{ view.time_frame.value }}</div>
</div>

<div class="card">
  <div>Recent Readings</div>
  {% if view.recent %}
  <table>
    {% for r in view.recent %}
    <tr>
      <td class="muted">{{ r.timestamp | datetime }}</td>
      <td>T: {{ "%.1f" | format(r.temperature) }}°C</td>
      <td>H: {{ "%.1f" | format(r.humidity) }}%</td>
      <td>P: {{ "%.1f" | format(r.pressure) }} hPa</td>
      <td>G: {{ "%.1f" | format(r.gas_resistance) }} KΩ</td>
    </tr>
    {% endfor %}
  </table>
  {% else %}
  <div class="center muted" style="padding: 32px">📱<br>No sensor data available<br>
  Make sure your station is connected</div>
  {% endif %}
</div>
{% endblock %}"""


def _format_time(dt: datetime, with_date: bool = True) -> str:
    fmt = "%Y-%m-%d %H:%M:%S UTC" if with_date else "%H:%M:%S UTC"
    return ensure_utc(dt).strftime(fmt)


templates = Environment(
    loader=DictLoader({
        "base.html": BASE_PAGE,
        "loading.html": LOADING_PAGE,
        "error.html": ERROR_PAGE,
        "dashboard.html": DASHBOARD_PAGE,
    }),
    autoescape=True,
)
templates.filters["datetime"] = _format_time
templates.filters["clock"] = lambda dt: _format_time(dt, with_date=False)


def render_loading() -> str:
    return templates.get_template("loading.html").render()


def render_error(message: str) -> str:
    return templates.get_template("error.html").render(message=message)


def render_dashboard(view: DashboardView) -> str:
    """Full dashboard page."""
    return templates.get_template("dashboard.html").render(
        view=view,
        latest=view.latest,
        tiles=latest_tiles(view.latest) if view.latest else [],
        chart=view.chart,
        color=METRICS[view.metric]["color"],
        metrics=METRICS,
        time_frames=list(TimeFrame),
        grid_lines=GRID_LINES,
        no_data=NO_DATA_MESSAGE,
    )
