import asyncio
from datetime import datetime, timezone

import pytest
from aiohttp import web
from aiohttp import test_utils

from sensorgraph.config import Settings
from sensorgraph.errors import FetchFailure
from sensorgraph.ingest import DataSource, HttpDataSource
from sensorgraph.types import Column

START = datetime(2024, 4, 30, 13, tzinfo=timezone.utc)
END = datetime(2024, 5, 1, 13, 47, tzinfo=timezone.utc)


def make_app(queries):
    async def devices(request):
        return web.json_response([{"name": "kitchen", "rssi": -60}, {"name": "garden"}])

    async def series(request):
        name = request.match_info["name"]
        queries.append(dict(request.query))
        if name == "missing":
            raise web.HTTPNotFound()
        if name == "slow":
            await asyncio.sleep(1)
        if name == "garbage":
            return web.Response(text="<html>oops</html>")
        return web.json_response(
            {
                "address": "C4:7C:8D:6A:3E:21",
                "sensorData": [
                    {"time": "2024-05-01T10:00:00Z", "temperature": 20},
                    {"time": "2024-05-01T11:00:00Z", "temperature": 22},
                ],
            }
        )

    app = web.Application()
    app.router.add_get("/", devices)
    app.router.add_get("/{name}", series)
    return app


def run_with_server(scenario):
    queries = []

    async def main():
        server = test_utils.TestServer(make_app(queries))
        await server.start_server()
        try:
            base = str(server.make_url("/")).rstrip("/")
            async with HttpDataSource(base, timeout=0.2) as source:
                return await scenario(source)
        finally:
            await server.close()

    return asyncio.run(main()), queries


def test_fetch_series():
    async def scenario(source):
        return await source.fetch("kitchen", START, END, [Column.TEMPERATURE, Column.HUMIDITY])

    series, queries = run_with_server(scenario)
    assert series.address == "C4:7C:8D:6A:3E:21"
    assert list(series.values("temperature")) == [20.0, 22.0]
    assert queries == [
        {
            "start": "2024-04-30T13:00:00Z",
            "end": "2024-05-01T13:47:00Z",
            "columns": "temperature,humidity",
        }
    ]


def test_list_devices():
    async def scenario(source):
        return await source.list_devices()

    names, _ = run_with_server(scenario)
    assert names == ["kitchen", "garden"]


@pytest.mark.parametrize(
    "name, message",
    [("missing", "404"), ("slow", "timed out"), ("garbage", "invalid JSON")],
)
def test_fetch_failures(name, message):
    async def scenario(source):
        with pytest.raises(FetchFailure, match=message) as excinfo:
            await source.fetch(name, START, END, [Column.TEMPERATURE])
        return excinfo.value

    exc, _ = run_with_server(scenario)
    if name == "missing":
        assert exc.status == 404


def test_connection_refused():
    async def main():
        async with HttpDataSource("http://127.0.0.1:9", timeout=1.0) as source:
            await source.fetch("kitchen", START, END, [Column.TEMPERATURE])

    with pytest.raises(FetchFailure):
        asyncio.run(main())


def test_from_settings():
    settings = Settings.model_validate({"source": {"host": "10.0.0.2", "port": 8080, "timeout": 3}})
    source = HttpDataSource.from_settings(settings)
    assert source.base_url == "http://10.0.0.2:8080"
    assert source.timeout == 3
    assert isinstance(source, DataSource)
