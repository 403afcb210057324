"""Mapping from data coordinates onto the drawing surface.

:class:`CoordinateTransform` holds the two affine maps

.. math::

   x(t) = x_{min} + \\frac{t - t_{min}}{t_{rng}} x_{rng} \\qquad
   y(v) = y_{max} - \\frac{v - v_{min}}{v_{rng}} y_{rng}

where the vertical map is inverted because the surface's y axis grows
downward.  :class:`RenderContext` bundles a transform with the window and
value range it was built from and turns a series into a
:class:`~sensorgraph.types.RenderPlan`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

import numpy as np

from ..types import Column, PlotArea, RenderPlan, Series, Tick
from .scaling import ValueRange, scale, value_ticks
from .window import TimeWindow


def _offset(t: datetime | float, origin: datetime) -> float:
    if isinstance(t, datetime):
        return (t - origin).total_seconds()
    return float(t) - origin.timestamp()


@dataclass(frozen=True)
class CoordinateTransform:
    """Affine data-to-pixel transform for one redraw.

    Parameters
    ----------
    area:
        Plotting rectangle supplied by the caller.
    window:
        Time window from :func:`~sensorgraph.core.window.resolve`; guarantees
        ``rng_t > 0``.
    value_range:
        Value range from :func:`~sensorgraph.core.scaling.scale`; guarantees
        ``rng_v > 0``.
    """

    area: PlotArea
    window: TimeWindow
    value_range: ValueRange

    def __post_init__(self) -> None:
        if self.window.rng_t <= 0:
            raise ValueError("time window must have a positive length")
        if self.value_range.rng_v <= 0:
            raise ValueError("value range must have a positive length")

    def to_x(self, t: datetime | float) -> float:
        """Map an instant (or POSIX seconds) onto the horizontal axis."""

        offset = _offset(t, self.window.min_t)
        return self.area.min_x + offset / self.window.rng_t * self.area.rng_x

    def to_y(self, v: float) -> float:
        """Map a value onto the vertical axis."""

        vr = self.value_range
        return self.area.max_y - (v - vr.min_v) / vr.rng_v * self.area.rng_y

    def to_x_array(self, seconds: np.ndarray) -> np.ndarray:
        offset = np.asarray(seconds, dtype=float) - self.window.min_t.timestamp()
        return self.area.min_x + offset / self.window.rng_t * self.area.rng_x

    def to_y_array(self, values: np.ndarray) -> np.ndarray:
        vr = self.value_range
        return self.area.max_y - (np.asarray(values, dtype=float) - vr.min_v) / vr.rng_v * self.area.rng_y

    @property
    def crosses_zero(self) -> bool:
        """True when the value range spans both signs."""

        return self.value_range.crosses_zero

    def zero_crossing_y(self) -> Optional[float]:
        return self.to_y(0.0) if self.crosses_zero else None


def _format_value(value: float) -> str:
    return f"{value:g}"


@dataclass(frozen=True)
class RenderContext:
    """Immutable state of a single redraw."""

    window: TimeWindow
    value_range: ValueRange
    transform: CoordinateTransform
    column: Column

    @classmethod
    def build(
        cls,
        area: PlotArea,
        window: TimeWindow,
        series: Series,
        column: Column | str,
    ) -> "RenderContext":
        """Scale ``series`` and combine it with ``window`` on ``area``."""

        column = Column.parse(column)
        value_range = scale(series, column)
        transform = CoordinateTransform(area, window, value_range)
        return cls(window, value_range, transform, column)

    def ticks_x(self) -> List[Tick]:
        return [Tick(self.transform.to_x(t), self.window.label(t)) for t in self.window.ticks]

    def ticks_y(self) -> List[Tick]:
        return [
            Tick(self.transform.to_y(v), _format_value(v))
            for v in value_ticks(self.value_range)
        ]

    def points(self, series: Series) -> List[Tuple[float, float]]:
        """Polyline vertices for ``series``; samples without a value are skipped."""

        values = series.values(self.column)
        keep = np.isfinite(values)
        xs = self.transform.to_x_array(series.times()[keep])
        ys = self.transform.to_y_array(values[keep])
        return [(float(x), float(y)) for x, y in zip(xs, ys)]

    def plan(self, series: Series, title: str = "") -> RenderPlan:
        return RenderPlan(
            area=self.transform.area,
            ticks_x=self.ticks_x(),
            ticks_y=self.ticks_y(),
            points=self.points(series),
            zero_crossing_y=self.transform.zero_crossing_y(),
            unit=self.column.unit,
            title=title,
        )


def build_plan(
    area: PlotArea,
    window: TimeWindow,
    series: Series,
    column: Column | str,
    title: str = "",
) -> RenderPlan:
    """Shortcut for ``RenderContext.build(...).plan(series, title)``."""

    return RenderContext.build(area, window, series, column).plan(series, title)


__all__ = ["CoordinateTransform", "RenderContext", "build_plan"]
