"""Loading sensor series from the HTTP endpoint or from saved payloads."""

from .payload import PayloadError, load_payload, parse_payload
from .client import DataSource, HttpDataSource

__all__ = [
    "PayloadError",
    "load_payload",
    "parse_payload",
    "DataSource",
    "HttpDataSource",
]
