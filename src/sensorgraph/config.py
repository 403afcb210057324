from __future__ import annotations

"""Configuration utilities for sensorgraph.

This module defines a hierarchical configuration schema using Pydantic models.
The :class:`Settings` container groups the data source endpoint, the chart
surface and refresh cadence, tick label formatting and renderer colours.
Instances can be populated from environment variables or from YAML/JSON files
with matching nested keys.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import EnvSettingsSource

from .types import Column, PlotArea

try:  # pragma: no cover - optional dependency
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _split_strings(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class SourceSettings(SectionModel):
    """HTTP endpoint serving sensor readings."""

    host: str = "localhost"
    port: int = 5000
    timeout: float = 10.0

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class ChartSettings(SectionModel):
    """Drawing surface, default selection and refresh cadence."""

    interval: str = "day"
    column: Column = Column.TEMPERATURE
    columns: list[Column] = Field(default_factory=list)
    delay: float = 8.0
    width: int = 800
    height: int = 300
    margin_x: int = 40
    margin_y: int = 30
    dpi: int = 100

    @field_validator("columns", mode="before")
    @classmethod
    def _coerce_columns(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _split_strings(value)
        return value

    @field_validator("delay")
    @classmethod
    def _positive_delay(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("delay must be positive")
        return value

    def plot_area(self) -> PlotArea:
        return PlotArea.from_surface(self.width, self.height, self.margin_x, self.margin_y)


class LabelSettings(SectionModel):
    """strftime patterns for time-axis labels."""

    timezone: str | None = None
    time_format: str = "%H:%M"
    date_format: str = "%m/%d"
    month_format: str = "%b"


class VizSettings(SectionModel):
    """Colours and output location for the matplotlib renderer."""

    background: str = "lightcyan"
    grid_color: str = "lightblue"
    line_color: str = "lightcoral"
    baseline_color: str = "steelblue"
    line_width: float = 3.0
    save: str = "{name}.png"


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    source: SourceSettings = Field(default_factory=SourceSettings)
    chart: ChartSettings = Field(default_factory=ChartSettings)
    labels: LabelSettings = Field(default_factory=LabelSettings)
    viz: VizSettings = Field(default_factory=VizSettings)

    model_config = SettingsConfigDict(
        env_prefix="SENSORGRAPH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        class LegacyEnvSettingsSource(EnvSettingsSource):
            def decode_complex_value(self, field_name, target_field, value):  # type: ignore[override]
                try:
                    return super().decode_complex_value(field_name, target_field, value)
                except json.JSONDecodeError:
                    return value

        env_settings.__class__ = LegacyEnvSettingsSource
        return init_settings, env_settings, dotenv_settings, file_secret_settings


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file."""

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAML is required to load YAML files")
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings.model_validate(data)
