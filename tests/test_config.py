import json

import pytest
from pydantic import ValidationError

from sensorgraph.config import Settings, load_settings
from sensorgraph.types import Column, PlotArea


def test_defaults():
    s = Settings()
    assert s.source.base_url == "http://localhost:5000"
    assert s.chart.interval == "day"
    assert s.chart.column is Column.TEMPERATURE
    assert s.chart.delay == 8.0
    assert s.chart.plot_area() == PlotArea(40, 30, 760, 270)


def test_from_env(monkeypatch):
    monkeypatch.setenv("SENSORGRAPH_CHART__INTERVAL", "week")
    monkeypatch.setenv("SENSORGRAPH_SOURCE__PORT", "8080")
    s = Settings()
    assert s.chart.interval == "week"
    assert s.source.port == 8080


def test_from_env_columns(monkeypatch):
    monkeypatch.setenv("SENSORGRAPH_CHART__COLUMNS", "humidity,pressure")
    s = Settings()
    assert s.chart.columns == [Column.HUMIDITY, Column.PRESSURE]


def test_load_settings_json(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps({"source": {"host": "10.0.0.2"}, "chart": {"delay": 2, "column": "voltage"}}))
    s = load_settings(p)
    assert s.source.base_url == "http://10.0.0.2:5000"
    assert s.chart.delay == 2.0
    assert s.chart.column is Column.VOLTAGE


try:
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None


@pytest.mark.skipif(yaml is None, reason="PyYAML not installed")
def test_load_settings_yaml(tmp_path):
    p = tmp_path / "cfg.yaml"
    p.write_text("labels:\n  timezone: UTC\n  time_format: '%H'\nviz:\n  line_width: 1.5\n")
    s = load_settings(p)
    assert s.labels.timezone == "UTC"
    assert s.labels.time_format == "%H"
    assert s.viz.line_width == 1.5


def test_load_settings_requires_mapping(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text("[1, 2]")
    with pytest.raises(TypeError):
        load_settings(p)


@pytest.mark.parametrize(
    "chart",
    [{"column": "altitude"}, {"delay": 0}, {"width": 60, "margin_x": 40}],
)
def test_invalid_chart_settings(chart):
    with pytest.raises((ValidationError, ValueError)):
        Settings.model_validate({"chart": chart}).chart.plot_area()
