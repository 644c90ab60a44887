from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from src.adapters.api.dependencies import get_gateway_service, get_instance
from src.app.ports.output.engine_api import InitialResponse
from src.app.services import dispatch_table as endpoints
from src.app.services.gateway_service import GatewayService
from src.domain.models import Instance, Subsystem
from src.main import app
from tests.unit.fakes import FakeLoader, MemoryGlyphStore, MemoryTileStore, RecordingHandler


def _serve(instance: Instance) -> httpx.AsyncClient:
    app.dependency_overrides[get_gateway_service] = lambda: GatewayService(loader=FakeLoader())
    app.dependency_overrides[get_instance] = lambda: instance
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    async with _serve(Instance(data_path=Path("data"))) as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_api_passthrough_returns_endpoint_json() -> None:
    handler = RecordingHandler(result=InitialResponse(lat=59.33, lon=18.06, zoom=11))
    instance = Instance(
        data_path=Path("data"),
        subsystems={Subsystem.TIMETABLE: object()},
        handlers={endpoints.INITIAL: handler},
    )

    async with _serve(instance) as client:
        resp = await client.get("/api/v1/map/initial", params={"lang": "sv"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"lat": 59.33, "lon": 18.06, "zoom": 11.0}
    assert handler.calls[0].get("lang") == "sv"


@pytest.mark.unit
@pytest.mark.anyio
async def test_api_passthrough_status_codes() -> None:
    async with _serve(Instance(data_path=Path("data"))) as client:
        unknown = await client.get("/api/v1/nope")
        unavailable = await client.get("/api/v1/plan", params={"fromPlace": "1,2"})

    assert unknown.status_code == 404
    assert unknown.json() == {
        "error": "Unknown endpoint: /api/v1/nope",
        "stage": "endpoint",
        "path": "/api/v1/nope",
    }
    assert unavailable.status_code == 503


@pytest.mark.unit
@pytest.mark.anyio
async def test_tiles_and_glyphs() -> None:
    instance = Instance(
        data_path=Path("data"),
        subsystems={
            Subsystem.TILES: MemoryTileStore(tiles={(2, 1, 3): b"\x1a\x00"}),
            Subsystem.GLYPHS: MemoryGlyphStore(glyphs={"Noto Sans Regular/0-255.pbf": b"pbf"}),
        },
    )

    async with _serve(instance) as client:
        tile = await client.get("/tiles/2/1/3.mvt")
        missing = await client.get("/tiles/2/1/0.mvt")
        glyph = await client.get("/tiles/glyphs/Noto Sans Regular/0-255.pbf")
        no_glyph = await client.get("/tiles/glyphs/Other/0-255.pbf")

    assert tile.status_code == 200
    assert tile.headers["content-type"] == "application/vnd.mapbox-vector-tile"
    assert tile.content == b"\x1a\x00"
    assert missing.status_code == 404
    assert glyph.status_code == 200
    assert glyph.headers["content-type"] == "application/x-protobuf"
    assert glyph.content == b"pbf"
    assert no_glyph.status_code == 404
