"""HTTP data source for sensor series."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable

import aiohttp

from ..config import Settings
from ..errors import FetchFailure
from ..types import Column, Series
from ..utils.timeparse import format_instant
from .payload import parse_payload

logger = logging.getLogger(__name__)


@runtime_checkable
class DataSource(Protocol):
    """Protocol describing where a chart gets its readings from.

    ``fetch`` returns the samples of ``name`` between ``start`` and ``end``
    restricted to ``columns``.  Implementations raise
    :class:`~sensorgraph.errors.FetchFailure` for any failure to deliver.
    """

    async def fetch(
        self,
        name: str,
        start: datetime,
        end: datetime,
        columns: Sequence[Column],
    ) -> Series:
        """Return the series of ``name`` inside ``[start, end]``."""


class HttpDataSource:
    """:class:`DataSource` talking to the sensor HTTP endpoint with aiohttp.

    Series are requested as ``GET {base_url}/{name}?start=..&end=..&columns=..``
    and the device list as ``GET {base_url}/``.  A session is opened lazily
    and must be released with :meth:`close` (or ``async with``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpDataSource":
        return cls(settings.source.base_url, timeout=settings.source.timeout)

    async def __aenter__(self) -> "HttpDataSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        session = self._get_session()
        try:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchFailure(f"{resp.status} {resp.reason}", status=resp.status)
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise FetchFailure(f"timed out after {self.timeout:g}s: {url}") from exc
        except aiohttp.ClientError as exc:
            raise FetchFailure(f"request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchFailure(f"invalid JSON from {url}") from exc

    async def fetch(
        self,
        name: str,
        start: datetime,
        end: datetime,
        columns: Sequence[Column],
    ) -> Series:
        if not name:
            raise FetchFailure("series name not set")
        url = f"{self.base_url}/{name}"
        params = {
            "start": format_instant(start),
            "end": format_instant(end),
            "columns": ",".join(Column.parse(c).value for c in columns),
        }
        logger.debug("GET %s %s", url, params)
        data = await self._get_json(url, params)
        series = parse_payload(data, source=url)
        logger.debug("received %d samples for %s", len(series), name)
        return series

    async def list_devices(self) -> List[str]:
        """Return the names of the devices known to the endpoint."""

        data = await self._get_json(f"{self.base_url}/")
        if not isinstance(data, list):
            raise FetchFailure("device list must be a JSON array")
        names = []
        for entry in data:
            if isinstance(entry, dict) and entry.get("name"):
                names.append(str(entry["name"]))
            elif isinstance(entry, str):
                names.append(entry)
        return names
