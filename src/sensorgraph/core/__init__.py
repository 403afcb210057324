"""Axis scaling and coordinate transforms for sensor charts."""

from .window import Interval, TimeWindow, floor_align, resolve, tick_instants
from .scaling import ValueRange, scale, scale_values, tick_step, value_ticks
from .transform import CoordinateTransform, RenderContext, build_plan

__all__ = [
    "Interval",
    "TimeWindow",
    "floor_align",
    "resolve",
    "tick_instants",
    "ValueRange",
    "scale",
    "scale_values",
    "tick_step",
    "value_ticks",
    "CoordinateTransform",
    "RenderContext",
    "build_plan",
]
