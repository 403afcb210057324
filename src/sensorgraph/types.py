"""Common type helpers for sensorgraph.

This module defines the immutable containers exchanged between the data
source, the scaling engine and the renderer.  The structures are
intentionally small but add clarity and type safety around the readings
flowing through a redraw.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Sequence

import numpy as np

from .errors import InvalidColumn


class Column(str, Enum):
    """Sensor fields that can be charted, keyed by their wire name."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    ACCELERATION_X = "accelerationX"
    ACCELERATION_Y = "accelerationY"
    ACCELERATION_Z = "accelerationZ"
    VOLTAGE = "voltage"
    TX_POWER = "txPower"

    @property
    def unit(self) -> str:
        """Return the display unit of the column."""

        return _UNITS[self]

    @classmethod
    def parse(cls, value: "Column | str") -> "Column":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidColumn(f"unknown column: {value!r}") from None


_UNITS = {
    Column.TEMPERATURE: "°C",
    Column.HUMIDITY: "% RH",
    Column.PRESSURE: "hPa",
    Column.ACCELERATION_X: "mG",
    Column.ACCELERATION_Y: "mG",
    Column.ACCELERATION_Z: "mG",
    Column.VOLTAGE: "V",
    Column.TX_POWER: "dBm",
}


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


@dataclass(frozen=True)
class Sample:
    """One reading: an instant and the values reported for it."""

    time: datetime
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.time.tzinfo is None:
            object.__setattr__(self, "time", self.time.replace(tzinfo=timezone.utc))
        frozen = MappingProxyType({str(k): _as_float(v) for k, v in self.values.items()})
        object.__setattr__(self, "values", frozen)

    def value(self, column: Column | str) -> float:
        """Return the value of ``column`` or NaN when it was not reported."""

        key = column.value if isinstance(column, Column) else column
        return self.values.get(key, math.nan)


@dataclass(frozen=True)
class Series:
    """Samples of one device ordered by non-decreasing time."""

    samples: tuple[Sample, ...] = ()
    address: str | None = None

    def __post_init__(self) -> None:
        samples = tuple(self.samples)
        for i in range(1, len(samples)):
            if samples[i].time < samples[i - 1].time:
                raise ValueError(f"samples out of order at index {i}")
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def __bool__(self) -> bool:
        return bool(self.samples)

    def times(self) -> np.ndarray:
        """Return sample instants as POSIX seconds."""

        return np.array([s.time.timestamp() for s in self.samples], dtype=float)

    def values(self, column: Column | str) -> np.ndarray:
        """Return the values of ``column`` with missing entries as NaN."""

        return np.array([s.value(column) for s in self.samples], dtype=float)

    @classmethod
    def from_samples(cls, samples: Iterable[Sample], address: str | None = None) -> "Series":
        return cls(tuple(samples), address)


@dataclass(frozen=True)
class PlotArea:
    """Plotting rectangle on the drawing surface, in pixels."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self) -> None:
        if self.max_x <= self.min_x or self.max_y <= self.min_y:
            raise ValueError("plot area must have a positive width and height")

    @property
    def rng_x(self) -> float:
        return self.max_x - self.min_x

    @property
    def rng_y(self) -> float:
        return self.max_y - self.min_y

    @classmethod
    def from_surface(cls, width: float, height: float, margin_x: float, margin_y: float) -> "PlotArea":
        """Return the area left inside a ``width`` x ``height`` surface."""

        return cls(margin_x, margin_y, width - margin_x, height - margin_y)


@dataclass(frozen=True)
class Tick:
    """Labelled grid position on an axis, in pixels."""

    position: float
    label: str


@dataclass(frozen=True)
class RenderPlan:
    """Everything a renderer needs to draw one chart."""

    area: PlotArea
    ticks_x: Sequence[Tick]
    ticks_y: Sequence[Tick]
    points: Sequence[tuple[float, float]]
    zero_crossing_y: float | None = None
    unit: str = ""
    title: str = ""
