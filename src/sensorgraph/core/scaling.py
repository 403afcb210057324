"""Value-axis scaling.

The vertical axis is derived from the readings of one column: the raw
extremes are widened to whole numbers and a tick step is chosen so the axis
shows roughly five grid lines.  A collapsed range (constant series or spread
of at most one unit) is widened to exactly one unit with a step of ``0.2`` so
that both the tick loop and the transform denominator stay well defined.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

import numpy as np

from ..errors import NoData
from ..types import Column, Series

TARGET_TICKS = 5
DEGENERATE_STEP = 0.2
_EPS = 1e-9


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class ValueRange:
    """Scaled value range with its tick step."""

    min_v: float
    max_v: float
    step: float

    @property
    def rng_v(self) -> float:
        return self.max_v - self.min_v

    @property
    def crosses_zero(self) -> bool:
        return self.min_v < 0 < self.max_v


def tick_step(rng_v: float) -> float:
    """Return the tick step for an integer range ``rng_v`` greater than one."""

    if rng_v >= TARGET_TICKS:
        return _round_half_up(rng_v / TARGET_TICKS)
    return _round_half_up(rng_v / TARGET_TICKS * 10) / 10


def scale_values(values: np.ndarray) -> ValueRange:
    """Scale raw ``values``; NaN entries are ignored."""

    values = np.asarray(values, dtype=float)
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        raise NoData("no numeric values to scale")

    max_v = float(math.ceil(finite.max()))
    min_v = float(math.floor(finite.min()))
    rng_v = max_v - min_v
    if rng_v <= 1:
        return ValueRange(min_v, min_v + 1, DEGENERATE_STEP)
    return ValueRange(min_v, max_v, tick_step(rng_v))


def scale(series: Series, column: Column | str) -> ValueRange:
    """Compute the value range of ``column`` across ``series``.

    :class:`~sensorgraph.errors.NoData` is raised when no sample carries a
    numeric value for ``column``; callers are expected to skip empty series
    before getting here.
    """

    column = Column.parse(column)
    if not series:
        raise NoData(f"series is empty, nothing to scale for {column.value}")
    try:
        return scale_values(series.values(column))
    except NoData:
        raise NoData(f"no {column.value} values in series") from None


def value_ticks(value_range: ValueRange) -> List[float]:
    """Return tick values from ``min_v`` to ``max_v`` by ``step``.

    The number of ticks is fixed up front so accumulated float error can
    neither add nor drop a tick.  Values are rounded to one decimal place.
    """

    count = int(math.floor(value_range.rng_v / value_range.step + _EPS)) + 1
    return [round(value_range.min_v + i * value_range.step, 1) for i in range(count)]


__all__ = [
    "ValueRange",
    "scale",
    "scale_values",
    "tick_step",
    "value_ticks",
]
