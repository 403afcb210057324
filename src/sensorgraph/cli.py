from __future__ import annotations

"""Command line interface for sensorgraph using Typer."""

from pathlib import Path
from typing import Dict, List, Optional

import asyncio
import json
import logging
from datetime import datetime

import typer
from pydantic import ValidationError

from ._typer import bad_parameter, fail
from .config import Settings, load_settings
from .core import RenderContext, resolve, scale, value_ticks
from .errors import SensorGraphError
from .graph import GraphState, SensorGraph, utc_now
from .ingest import HttpDataSource, load_payload
from .types import Column, Series
from .utils.logging import get_logger, level_for
from .utils.timeparse import parse_instant
from .viz import FigureRenderer

app = typer.Typer(help="Charts of BLE sensor readings served over HTTP")
logger = logging.getLogger(__name__)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            bad_parameter(f"invalid JSON override value: {raw}")
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys:
        if key not in getattr(type(current), "model_fields", {}):
            bad_parameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


def _parse_now(now: Optional[str]) -> datetime:
    if now is None:
        return utc_now()
    try:
        return parse_instant(now)
    except ValueError as exc:
        bad_parameter(str(exc), param_hint="--now")


def _parse_column(column: Optional[str], settings: Settings) -> Column:
    if column is None:
        return settings.chart.column
    try:
        return Column.parse(column)
    except SensorGraphError as exc:
        bad_parameter(str(exc), param_hint="--column")


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. source.host=10.0.0.2",
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity."),
) -> None:
    """Initialise the Typer context with validated settings."""

    get_logger("sensorgraph", level=level_for(verbose))

    if config is not None and not config.exists():
        bad_parameter(f"configuration file not found: {config}", param_hint="--config")

    try:
        settings = load_settings(config) if config else Settings()
    except (RuntimeError, TypeError, ValueError) as exc:
        bad_parameter(f"failed to load configuration: {exc}", param_hint="--config")

    if set_overrides:
        data = settings.model_dump()
        for override in set_overrides:
            if "=" not in override:
                bad_parameter("overrides must be of the form --set section.key=value")
            key, raw_value = override.split("=", 1)
            if not key:
                bad_parameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            value = _parse_override_value(raw_value)
            _apply_override(data, keys, value)
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            bad_parameter(f"invalid configuration override: {exc}")

    ctx.obj = settings


@app.command()
def window(
    ctx: typer.Context,
    interval: Optional[str] = typer.Option(None, "--interval", "-i"),
    now: Optional[str] = typer.Option(None, "--now", help="ISO-8601 instant or epoch milliseconds"),
) -> None:
    """Print the time window of an interval and its grid instants."""

    cfg: Settings = ctx.obj
    try:
        tw = resolve(interval or cfg.chart.interval, _parse_now(now), labels=cfg.labels)
    except SensorGraphError as exc:
        fail(exc)

    step = tw.step_t.total_seconds() if tw.step_t is not None else None
    typer.echo(f"interval={tw.interval.value} min_t={tw.min_t.isoformat()} max_t={tw.max_t.isoformat()}")
    typer.echo(f"step_t={'1 month' if step is None else f'{step:g}s'} ticks={len(tw.ticks)}")
    for t in tw.ticks:
        typer.echo(f"  {t.isoformat()}  {tw.label(t)}")


@app.command("scale")
def scale_cmd(
    ctx: typer.Context,
    payload: Path = typer.Argument(..., exists=True, dir_okay=False),
    column: Optional[str] = typer.Option(None, "--column", "-c"),
) -> None:
    """Print the value range and ticks of a saved payload."""

    cfg: Settings = ctx.obj
    col = _parse_column(column, cfg)
    try:
        series = load_payload(payload)
        if not series:
            typer.echo("series is empty, nothing to scale")
            return
        vr = scale(series, col)
    except SensorGraphError as exc:
        fail(exc)

    typer.echo(f"column={col.value} min_v={vr.min_v:g} max_v={vr.max_v:g} step={vr.step:g}")
    typer.echo("ticks=" + ",".join(f"{v:g}" for v in value_ticks(vr)))


async def _fetch(cfg: Settings, name: str, tw, columns: List[Column]) -> Series:
    async with HttpDataSource.from_settings(cfg) as source:
        return await source.fetch(name, tw.min_t, tw.max_t, columns)


@app.command()
def plot(
    ctx: typer.Context,
    name: str,
    payload: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False,
                                           help="Read a saved payload instead of fetching"),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
    interval: Optional[str] = typer.Option(None, "--interval", "-i"),
    column: Optional[str] = typer.Option(None, "--column", "-c"),
    now: Optional[str] = typer.Option(None, "--now", help="ISO-8601 instant or epoch milliseconds"),
) -> None:
    """Render one chart of ``name`` to an image file."""

    cfg: Settings = ctx.obj
    col = _parse_column(column, cfg)
    out = output or Path(cfg.viz.save.format(name=name))
    try:
        tw = resolve(interval or cfg.chart.interval, _parse_now(now), labels=cfg.labels)
        if payload is not None:
            series = load_payload(payload)
        else:
            columns = list(dict.fromkeys([col, *cfg.chart.columns]))
            series = asyncio.run(_fetch(cfg, name, tw, columns))
        if not series:
            typer.echo(f"{name}: no samples between {tw.min_t.isoformat()} and {tw.max_t.isoformat()}")
            return
        context = RenderContext.build(cfg.chart.plot_area(), tw, series, col)
    except SensorGraphError as exc:
        fail(exc)

    title = name if series.address is None else f"{name}  {series.address}"
    plan = context.plan(series, title=title)
    FigureRenderer.from_settings(cfg, output=out).render(plan)
    vr = context.value_range
    typer.echo(
        f"{name}: {len(plan.points)} points, {col.value} {vr.min_v:g}..{vr.max_v:g} {col.unit}, "
        f"{len(plan.ticks_x)} time ticks, wrote {out}"
    )


@app.command()
def devices(ctx: typer.Context) -> None:
    """List the devices known to the data source."""

    cfg: Settings = ctx.obj

    async def _list() -> List[str]:
        async with HttpDataSource.from_settings(cfg) as source:
            return await source.list_devices()

    try:
        names = asyncio.run(_list())
    except SensorGraphError as exc:
        fail(exc)
    for name in names:
        typer.echo(name)


async def _watch(cfg: Settings, names: List[str], iterations: int, output_dir: Path) -> List[SensorGraph]:
    async with HttpDataSource.from_settings(cfg) as source:
        graphs = [
            SensorGraph(
                name,
                source,
                FigureRenderer.from_settings(cfg, output=output_dir / cfg.viz.save.format(name=name)),
                settings=cfg,
            )
            for name in names
        ]
        try:
            await asyncio.gather(*(g.attach() for g in graphs))
            while not iterations or min(g.attempts for g in graphs) < iterations:
                await asyncio.sleep(min(cfg.chart.delay, 1.0))
        finally:
            await asyncio.gather(*(g.detach() for g in graphs))
    return graphs


@app.command()
def watch(
    ctx: typer.Context,
    names: List[str] = typer.Argument(..., help="Series to chart"),
    iterations: int = typer.Option(0, "--iterations", "-n", help="Stop after this many redraws (0 = forever)"),
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-d", file_okay=False),
) -> None:
    """Poll several series and keep their chart images up to date."""

    cfg: Settings = ctx.obj
    logger.info("watching %s every %gs", ", ".join(names), cfg.chart.delay)
    try:
        graphs = asyncio.run(_watch(cfg, names, iterations, output_dir))
    except KeyboardInterrupt:
        raise typer.Exit(130)

    failed = False
    for g in graphs:
        if g.state is GraphState.ERROR:
            failed = True
            typer.secho(f"{g.name}: {g.error}", err=True)
        else:
            typer.echo(f"{g.name}: {g.redraws} redraws")
    if failed:
        raise typer.Exit(1)
