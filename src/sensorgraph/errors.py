"""Exceptions raised while building a chart."""

from __future__ import annotations


class SensorGraphError(Exception):
    """Base class for errors that abort a single redraw."""


class InvalidInterval(SensorGraphError, ValueError):
    """Raised for an interval key outside ``day``/``week``/``month``/``year``."""


class InvalidColumn(SensorGraphError, ValueError):
    """Raised for a column key that is not a supported sensor field."""


class NoData(SensorGraphError):
    """Raised when the selected column has no numeric value in the series."""


class FetchFailure(SensorGraphError):
    """Raised when the data source cannot deliver a series."""

    def __init__(self, message: str, *, status: int | None = None):
        self.status = status
        super().__init__(message)


__all__ = [
    "SensorGraphError",
    "InvalidInterval",
    "InvalidColumn",
    "NoData",
    "FetchFailure",
]
