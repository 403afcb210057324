"""Polling charts of BLE sensor readings."""

from .core import CoordinateTransform, Interval, RenderContext, TimeWindow, ValueRange, resolve, scale
from .errors import FetchFailure, InvalidColumn, InvalidInterval, NoData, SensorGraphError
from .graph import GraphState, SensorGraph
from .types import Column, PlotArea, RenderPlan, Sample, Series, Tick

__version__ = "0.1.0"

__all__ = [
    "Column",
    "CoordinateTransform",
    "FetchFailure",
    "GraphState",
    "Interval",
    "InvalidColumn",
    "InvalidInterval",
    "NoData",
    "PlotArea",
    "RenderContext",
    "RenderPlan",
    "Sample",
    "SensorGraph",
    "SensorGraphError",
    "Series",
    "Tick",
    "TimeWindow",
    "ValueRange",
    "resolve",
    "scale",
]
