import math
from datetime import datetime, timedelta, timezone

import pytest

from sensorgraph.core import CoordinateTransform, RenderContext, ValueRange, build_plan, resolve
from sensorgraph.types import PlotArea, Sample, Series

NOW = datetime(2024, 5, 1, 13, 47, 12, 345000, tzinfo=timezone.utc)
AREA = PlotArea.from_surface(800, 300, 40, 30)


def test_plot_area_from_surface():
    assert AREA == PlotArea(40, 30, 760, 270)
    assert (AREA.rng_x, AREA.rng_y) == (720, 240)
    with pytest.raises(ValueError):
        PlotArea(10, 10, 10, 20)


@pytest.mark.parametrize("interval", ["day", "week", "month", "year"])
def test_boundaries_are_exact(interval):
    tw = resolve(interval, NOW)
    vr = ValueRange(-3, 17, 4)
    tr = CoordinateTransform(AREA, tw, vr)
    assert tr.to_x(tw.min_t) == AREA.min_x
    assert tr.to_x(tw.max_t) == AREA.max_x
    assert tr.to_y(vr.min_v) == AREA.max_y
    assert tr.to_y(vr.max_v) == AREA.min_y


def test_transform_is_linear():
    tw = resolve("day", NOW)
    tr = CoordinateTransform(AREA, tw, ValueRange(20, 22, 0.4))
    mid = tw.min_t + (tw.max_t - tw.min_t) / 2
    assert tr.to_x(mid) == pytest.approx((AREA.min_x + AREA.max_x) / 2)
    assert tr.to_x(mid.timestamp()) == pytest.approx(tr.to_x(mid))
    assert tr.to_y(21) == pytest.approx(150)


def test_zero_crossing():
    tw = resolve("day", NOW)
    tr = CoordinateTransform(AREA, tw, ValueRange(-3, 3, 1))
    assert tr.crosses_zero
    assert tr.zero_crossing_y() == pytest.approx(150)

    positive = CoordinateTransform(AREA, tw, ValueRange(0, 5, 1))
    assert not positive.crosses_zero
    assert positive.zero_crossing_y() is None


def test_degenerate_value_range_rejected():
    with pytest.raises(ValueError):
        CoordinateTransform(AREA, resolve("day", NOW), ValueRange(5, 5, 0.2))


def _series():
    base = datetime(2024, 5, 1, 10, tzinfo=timezone.utc)
    return Series.from_samples(
        [
            Sample(base, {"temperature": 20.0, "humidity": 41}),
            Sample(base + timedelta(hours=1), {"temperature": math.nan, "humidity": 43}),
            Sample(base + timedelta(hours=2), {"temperature": 22.0}),
            Sample(base + timedelta(hours=3), {"temperature": 21.0, "humidity": 44}),
        ],
        address="C4:7C:8D:6A:3E:21",
    )


def test_render_context_plan():
    tw = resolve("day", NOW)
    ctx = RenderContext.build(AREA, tw, _series(), "temperature")
    plan = ctx.plan(_series(), title="kitchen")

    assert plan.area == AREA
    assert plan.unit == "°C"
    assert plan.title == "kitchen"
    assert plan.zero_crossing_y is None
    assert [t.label for t in plan.ticks_y] == ["20", "20.4", "20.8", "21.2", "21.6", "22"]
    assert plan.ticks_y[0].position == AREA.max_y
    assert plan.ticks_y[-1].position == pytest.approx(AREA.min_y)
    assert plan.ticks_x[0].position == AREA.min_x
    assert len(plan.ticks_x) == len(tw.ticks)
    xs = [t.position for t in plan.ticks_x]
    assert xs == sorted(xs)

    # the NaN sample is left out of the polyline
    assert len(plan.points) == 3
    (x0, y0), (x1, y1), (x2, y2) = plan.points
    assert x0 < x1 < x2 <= AREA.max_x
    assert y0 == pytest.approx(AREA.max_y)
    assert y1 == pytest.approx(AREA.min_y)


def test_plan_for_other_column():
    plan = build_plan(AREA, resolve("day", NOW), _series(), "humidity")
    assert plan.unit == "% RH"
    assert len(plan.points) == 3
    assert [t.label for t in plan.ticks_y] == ["41", "41.6", "42.2", "42.8", "43.4", "44"]


def test_module_documented():
    from sensorgraph.core import transform

    assert transform.__doc__ and "drawing surface" in transform.__doc__
