"""Time window resolution for the chart's horizontal axis.

A named :class:`Interval` fixes how far back a chart looks, how far apart its
vertical grid lines are and how their labels read.  :func:`resolve` turns an
interval and the current instant into a :class:`TimeWindow` whose lower bound
is floored onto a round boundary, so grid lines fall on whole hours, days or
months rather than on arbitrary offsets from "now".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import LabelSettings
from ..errors import InvalidInterval

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


@dataclass(frozen=True)
class IntervalSpec:
    """Lookback, tick cadence and label policy of an interval.

    ``step`` and ``align`` are ``None`` for calendar based intervals, which
    advance by ``step_months`` and align on the first day of a month.
    ``align`` need not equal ``step``: day windows floor to the whole hour
    while ticking every two hours, so their grid lines may fall on odd hours.
    """

    lookback: timedelta
    step: Optional[timedelta]
    align: Optional[timedelta]
    label: str
    step_months: int = 0


class Interval(str, Enum):
    """Named lookback windows offered by a chart."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def spec(self) -> IntervalSpec:
        return _SPECS[self]

    @classmethod
    def parse(cls, value: "Interval | str") -> "Interval":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidInterval(f"unknown interval: {value!r}") from None


_SPECS = {
    Interval.DAY: IntervalSpec(timedelta(hours=24), 2 * HOUR, HOUR, "time"),
    Interval.WEEK: IntervalSpec(timedelta(days=7), DAY, DAY, "date"),
    Interval.MONTH: IntervalSpec(timedelta(days=30), 2 * DAY, 2 * DAY, "date"),
    Interval.YEAR: IntervalSpec(timedelta(days=365), None, None, "month", step_months=1),
}


def _utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def _add_months(instant: datetime, months: int) -> datetime:
    index = instant.month - 1 + months
    return instant.replace(year=instant.year + index // 12, month=index % 12 + 1)


def floor_align(instant: datetime, interval: Interval) -> datetime:
    """Floor ``instant`` onto the alignment boundary of ``interval``.

    Fixed alignments are multiples of the unit counted from the Unix epoch;
    calendar alignment snaps to midnight UTC on the first day of the month.
    """

    instant = _utc(instant)
    align = interval.spec.align
    if align is None:
        return instant.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return EPOCH + align * ((instant - EPOCH) // align)


def _label_timezone(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    if name.upper() in {"UTC", "Z"}:
        return timezone.utc
    return ZoneInfo(name)


@dataclass(frozen=True)
class TimeWindow:
    """Absolute time range ``[min_t, max_t]`` with its grid instants."""

    interval: Interval
    min_t: datetime
    max_t: datetime
    ticks: tuple[datetime, ...]
    label_format: str
    label_tz: Optional[tzinfo] = None

    @property
    def rng_t(self) -> float:
        """Window length in seconds."""

        return (self.max_t - self.min_t).total_seconds()

    @property
    def step_t(self) -> Optional[timedelta]:
        """Fixed tick spacing, ``None`` for month-stepped windows."""

        return self.interval.spec.step

    def label(self, instant: datetime) -> str:
        """Format ``instant`` as a time-axis label."""

        return _utc(instant).astimezone(self.label_tz).strftime(self.label_format)

    def contains(self, instant: datetime) -> bool:
        return self.min_t <= _utc(instant) <= self.max_t


def tick_instants(interval: Interval, min_t: datetime, max_t: datetime) -> tuple[datetime, ...]:
    """Return the grid instants from ``min_t`` up to and including ``max_t``."""

    spec = interval.spec
    if max_t < min_t:
        return ()
    if spec.step is None:
        months = (max_t.year - min_t.year) * 12 + (max_t.month - min_t.month)
        count = months // spec.step_months + 1
        return tuple(_add_months(min_t, i * spec.step_months) for i in range(count))
    count = (max_t - min_t) // spec.step + 1
    return tuple(min_t + i * spec.step for i in range(count))


def resolve(
    interval: Interval | str,
    now: datetime,
    *,
    labels: LabelSettings | None = None,
) -> TimeWindow:
    """Resolve ``interval`` ending at ``now`` into a :class:`TimeWindow`.

    ``now`` becomes ``max_t``; ``min_t`` is ``now - lookback`` floored onto
    the interval's alignment.  Naive instants are read as UTC.
    :class:`~sensorgraph.errors.InvalidInterval` is raised for unknown keys.
    """

    interval = Interval.parse(interval)
    if labels is None:
        labels = LabelSettings()

    spec = interval.spec
    max_t = _utc(now)
    min_t = floor_align(max_t - spec.lookback, interval)
    fmt = {
        "time": labels.time_format,
        "date": labels.date_format,
        "month": labels.month_format,
    }[spec.label]
    return TimeWindow(
        interval=interval,
        min_t=min_t,
        max_t=max_t,
        ticks=tick_instants(interval, min_t, max_t),
        label_format=fmt,
        label_tz=_label_timezone(labels.timezone),
    )


__all__ = [
    "Interval",
    "IntervalSpec",
    "TimeWindow",
    "floor_align",
    "resolve",
    "tick_instants",
]
