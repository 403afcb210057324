"""Utilities for parsing instants reported by the data source."""

from __future__ import annotations

import re
from datetime import datetime, timezone

# ISO-8601 (``T`` or space separated, optional ``Z``/offset) or epoch milliseconds
INSTANT_RE = re.compile(
    r"""^\s*(?:
            (?P<iso>\d{4}-\d{2}-\d{2}(?:[T\s]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?(?:Z|[+-]\d{2}:?\d{2})?)
          | (?P<millis>-?\d+(?:\.\d+)?)
        )\s*$""",
    re.VERBOSE,
)


def from_millis(value: float) -> datetime:
    """Return the UTC instant ``value`` milliseconds after the epoch.

    ``ValueError`` is raised for values outside the platform's time range,
    including NaN and infinities.
    """

    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError) as exc:
        raise ValueError(f"Instant out of range: {value!r}") from exc


def to_millis(instant: datetime) -> int:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return round(instant.timestamp() * 1000)


def parse_instant(token: str | int | float) -> datetime:
    """Parse ``token`` as an aware instant.

    Accepted forms are ISO-8601 strings (naive values are read as UTC) and
    epoch milliseconds given either as a number or as a numeric string.
    ``ValueError`` is raised on malformed input.
    """

    if isinstance(token, bool):
        raise ValueError(f"Unrecognised instant: {token!r}")
    if isinstance(token, (int, float)):
        return from_millis(float(token))

    m = INSTANT_RE.match(token)
    if not m:
        raise ValueError(f"Unrecognised instant: {token!r}")
    if m.group("millis"):
        return from_millis(float(m.group("millis")))

    parsed = datetime.fromisoformat(m.group("iso").strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_instant(instant: datetime) -> str:
    """Return ``instant`` as an ISO-8601 UTC string with a ``Z`` suffix."""

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
