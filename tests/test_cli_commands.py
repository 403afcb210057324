import json

from typer.testing import CliRunner

from sensorgraph.cli import app

NOW = "2024-05-01T13:47:12Z"


def make_payload(tmp_path):
    p = tmp_path / "kitchen.json"
    p.write_text(
        json.dumps(
            {
                "address": "C4:7C:8D:6A:3E:21",
                "sensorData": [
                    {"time": "2024-05-01T10:00:00Z", "temperature": 20, "humidity": 41},
                    {"time": "2024-05-01T11:00:00Z", "temperature": 21, "humidity": 44},
                    {"time": "2024-05-01T12:00:00Z", "temperature": 22, "humidity": 42},
                ],
            }
        )
    )
    return p


def test_window():
    runner = CliRunner()
    result = runner.invoke(app, ["window", "--now", NOW])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == (
        "interval=day min_t=2024-04-30T13:00:00+00:00 max_t=2024-05-01T13:47:12+00:00"
    )
    assert lines[1] == "step_t=7200s ticks=13"
    assert lines[2].split()[0] == "2024-04-30T13:00:00+00:00"


def test_window_override_and_bad_interval():
    runner = CliRunner()
    result = runner.invoke(app, ["--set", "chart.interval=week", "window", "--now", NOW])
    assert result.exit_code == 0
    assert "interval=week min_t=2024-04-24T00:00:00+00:00" in result.stdout

    result = runner.invoke(app, ["window", "--interval", "decade", "--now", NOW])
    assert result.exit_code == 1

    result = runner.invoke(app, ["window", "--now", "yesterday"])
    assert result.exit_code == 2


def test_unknown_override_key():
    runner = CliRunner()
    result = runner.invoke(app, ["--set", "chart.colour=red", "window", "--now", NOW])
    assert result.exit_code != 0


def test_override_rejects_non_field_attributes():
    runner = CliRunner()
    for override in ("chart.plot_area=1", "source.base_url=x", "chart.interval.real=1"):
        result = runner.invoke(app, ["--set", override, "window", "--now", NOW])
        assert result.exit_code == 2, override


def test_scale(tmp_path):
    payload = make_payload(tmp_path)
    runner = CliRunner()
    result = runner.invoke(app, ["scale", str(payload)])
    assert result.exit_code == 0
    assert "column=temperature min_v=20 max_v=22 step=0.4" in result.stdout
    assert "ticks=20,20.4,20.8,21.2,21.6,22" in result.stdout

    result = runner.invoke(app, ["scale", str(payload), "--column", "altitude"])
    assert result.exit_code == 2

    result = runner.invoke(app, ["scale", str(payload), "--column", "pressure"])
    assert result.exit_code == 1


def test_plot_from_file(tmp_path):
    payload = make_payload(tmp_path)
    out = tmp_path / "kitchen.png"
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["plot", "kitchen", "--file", str(payload), "-o", str(out), "-c", "humidity", "--now", NOW],
    )
    assert result.exit_code == 0
    assert out.exists()
    assert "3 points" in result.stdout
    assert "% RH" in result.stdout
    assert f"wrote {out}" in result.stdout


def test_config_file(tmp_path):
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"chart": {"interval": "month"}}))
    runner = CliRunner()
    result = runner.invoke(app, ["--config", str(cfg), "window", "--now", NOW])
    assert result.exit_code == 0
    assert "interval=month" in result.stdout
    assert "step_t=172800s ticks=16" in result.stdout

    result = runner.invoke(app, ["--config", str(tmp_path / "missing.json"), "window"])
    assert result.exit_code == 2
