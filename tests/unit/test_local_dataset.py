from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from src.adapters.engine.dataset_loader import LocalDatasetLoader
from src.adapters.ipc.command_loop import IpcCommandLoop
from src.app.services import dispatch_table as endpoints
from src.app.services.gateway_service import GatewayService
from src.app.services.native_api import NativeApi
from src.domain.exceptions import InitializationError
from src.domain.models import GeoPoint, Subsystem


def _api() -> NativeApi:
    return NativeApi(gateway=GatewayService(loader=LocalDatasetLoader()))


@pytest.mark.unit
def test_timetable_only_dataset_loads_partially(timetable_dataset: Path) -> None:
    instance = _api().open(timetable_dataset)

    assert instance.has(Subsystem.TIMETABLE)
    assert instance.has(Subsystem.GEOCODE_TEXT)
    assert not instance.has(Subsystem.STREETS)
    assert not instance.has(Subsystem.TILES)
    assert instance.handler(endpoints.PLAN) is None
    assert instance.handler(endpoints.GEOCODE) is not None


@pytest.mark.unit
def test_geocode_stockholm_central(timetable_dataset: Path) -> None:
    api = _api()
    instance = api.open(timetable_dataset)

    results = api.geocode(instance, "Stockholm Central")

    assert results
    first = results[0]
    assert first.type == "STOP"
    assert first.name == "Stockholm Central"
    assert 59.0 <= first.pos.lat <= 60.0
    assert 17.5 <= first.pos.lon <= 19.0
    assert [(t.start, t.length) for t in first.tokens] == [(0, 9), (10, 7)]
    assert first.modes == ("RAIL",)
    # Platforms sharing the name collapse into one result.
    assert [r.name for r in results].count("Stockholm Central") == 1


@pytest.mark.unit
def test_partial_dataset_answers_neutrally(timetable_dataset: Path) -> None:
    api = _api()
    instance = api.open(timetable_dataset)

    assert api.plan_route(
        instance, GeoPoint(lat=59.331, lon=18.059), GeoPoint(lat=59.859, lon=17.64)
    ) == []
    assert api.reverse_geocode(instance, GeoPoint(lat=59.3301, lon=18.0582)) is None
    loop = IpcCommandLoop(gateway=api.gateway, instance=instance)
    assert loop.handle_line('{"cmd":"get_tile","z":0,"x":0,"y":0}') == (
        '{"status":"ok","data":{"found":false}}'
    )


@pytest.mark.unit
def test_plan_route_with_walk_and_rail(full_dataset: Path) -> None:
    api = _api()
    instance = api.open(full_dataset)

    routes = api.plan_route(
        instance,
        GeoPoint(lat=59.3310, lon=18.0590),
        GeoPoint(lat=59.8590, lon=17.6400),
        departure_time="2024-05-02T07:55:00",
    )

    assert len(routes) == 1
    route = routes[0]
    assert [leg.mode for leg in route.legs] == ["WALK", "RAIL", "WALK"]
    assert route.transfers == 0
    ride = route.legs[1]
    assert (ride.from_name, ride.to_name) == ("Stockholm Central", "Uppsala Central")
    assert ride.route_short_name == "40"
    assert ride.headsign == "Uppsala"
    assert ride.duration_seconds == 40 * 60
    assert route.legs[0].from_name == "START"
    assert route.legs[-1].to_name == "END"
    assert route.duration_seconds >= ride.duration_seconds


@pytest.mark.unit
def test_reverse_geocode_is_idempotent(full_dataset: Path) -> None:
    api = _api()
    instance = api.open(full_dataset)
    pos = GeoPoint(lat=59.3301, lon=18.0582)

    first = api.reverse_geocode(instance, pos)
    second = api.reverse_geocode(instance, pos)

    assert first is not None
    assert first == second
    assert first.type == "STOP"
    assert first.name == "Stockholm Central"


@pytest.mark.unit
def test_tiles_and_glyphs_from_disk(full_dataset: Path) -> None:
    api = _api()
    instance = api.open(full_dataset)

    tile = api.get_tile(instance, 0, 0, 0)
    glyph = api.get_glyph(instance, "/tiles/glyphs/Noto%20Sans%20Display%20Regular/0-255.pbf")

    assert base64.b64decode(tile.data_base64) == b"\x1a\x02tile"
    assert not api.get_tile(instance, 1, 0, 0).found
    assert not api.get_tile(instance, 1, 5, 0).found
    assert base64.b64decode(glyph.data_base64) == b"glyph-bytes"
    assert not api.get_glyph(instance, "/tiles/glyphs/../streets.pkl").found


@pytest.mark.unit
def test_api_get_initial_view(full_dataset: Path) -> None:
    api = _api()
    instance = api.open(full_dataset)

    doc = json.loads(api.api_get(instance, "/api/v1/map/initial"))

    assert 59.3 < doc["lat"] < 59.9
    assert 17.6 < doc["lon"] < 18.1
    assert doc["zoom"] >= 2


@pytest.mark.unit
def test_config_can_disable_parts(full_dataset: Path) -> None:
    (full_dataset / "config.yml").write_text("tiles: false\ngeocoding: false\n", encoding="utf-8")

    instance = _api().open(full_dataset)

    assert not instance.has(Subsystem.TILES)
    assert not instance.has(Subsystem.GEOCODE_CACHE)
    assert instance.has(Subsystem.REVERSE_INDEX)
    assert instance.handler(endpoints.GEOCODE) is None


@pytest.mark.unit
def test_config_paths_are_resolved_against_dataset(full_dataset: Path) -> None:
    (full_dataset / "gtfs").rename(full_dataset / "feed")
    (full_dataset / "config.yml").write_text(
        "timetable:\n  datasets:\n    sl:\n      path: feed\n", encoding="utf-8"
    )

    instance = _api().open(full_dataset)

    assert instance.has(Subsystem.TIMETABLE)
    assert instance.config["timetable"]["datasets"]["sl"]["path"] == "feed"


@pytest.mark.unit
@pytest.mark.parametrize(
    "content",
    ["timetable: [unclosed\n", "- just\n- a list\n", "timetable: missing-dir\n"],
)
def test_bad_config_is_an_initialization_error(timetable_dataset: Path, content: str) -> None:
    (timetable_dataset / "config.yml").write_text(content, encoding="utf-8")

    with pytest.raises(InitializationError):
        _api().open(timetable_dataset)


@pytest.mark.unit
def test_missing_directory_is_an_initialization_error(tmp_path: Path) -> None:
    with pytest.raises(InitializationError):
        _api().open(tmp_path / "nope")
