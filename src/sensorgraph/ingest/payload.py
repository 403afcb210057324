# src/sensorgraph/ingest/payload.py
"""Parser for sensor data payloads.

The data source answers a series query with a JSON document::

    {
      "address": "C4:7C:8D:6A:3E:21",
      "sensorData": [
        {"time": "2024-05-01T10:00:00Z", "temperature": 21.4, "humidity": 40.1},
        {"time": 1714557600000, "temperature": 21.6}
      ]
    }

``time`` is an ISO-8601 string or epoch milliseconds.  Every other key is a
reading; keys that are not numeric are kept as NaN so a missing column never
breaks the scan of another one.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Iterator, Mapping, Union

from ..errors import FetchFailure
from ..types import Sample, Series
from ..utils.timeparse import parse_instant

SAMPLES_KEY = "sensorData"
ADDRESS_KEY = "address"
TIME_KEY = "time"


class PayloadError(FetchFailure):
    """Raised when a payload does not describe a valid series."""

    def __init__(self, message: str, *, source: str = "<payload>", index: int | None = None):
        self.source = source
        self.index = index
        where = source if index is None else f"{source}[{index}]"
        super().__init__(f"{where}: {message}")


def _iter_samples(records: Any, *, source: str) -> Iterator[Sample]:
    if not isinstance(records, list):
        raise PayloadError(f"'{SAMPLES_KEY}' must be a list", source=source)
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise PayloadError("sample must be an object", source=source, index=index)
        if TIME_KEY not in record:
            raise PayloadError("sample has no 'time'", source=source, index=index)
        try:
            instant = parse_instant(record[TIME_KEY])
        except (TypeError, ValueError, OverflowError) as exc:
            raise PayloadError(str(exc), source=source, index=index) from exc
        values = {k: v for k, v in record.items() if k != TIME_KEY}
        yield Sample(instant, values)


def parse_payload(data: Any, *, source: str = "<payload>") -> Series:
    """Build a :class:`~sensorgraph.types.Series` from a decoded payload."""

    if not isinstance(data, Mapping):
        raise PayloadError("payload must be an object", source=source)
    if SAMPLES_KEY not in data:
        raise PayloadError(f"payload has no '{SAMPLES_KEY}'", source=source)
    samples = list(_iter_samples(data[SAMPLES_KEY], source=source))
    address = data.get(ADDRESS_KEY)
    try:
        return Series.from_samples(samples, None if address is None else str(address))
    except ValueError as exc:
        raise PayloadError(str(exc), source=source) from exc


def load_payload(path: Union[str, pathlib.Path]) -> Series:
    """Read a payload saved as a JSON file."""

    p = pathlib.Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf8"))
    except json.JSONDecodeError as exc:
        raise PayloadError(f"invalid JSON: {exc}", source=str(p)) from exc
    return parse_payload(data, source=str(p))
