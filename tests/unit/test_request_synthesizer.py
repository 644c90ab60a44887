from __future__ import annotations

import pytest

from src.app.services.request_synthesizer import (
    geocode_request,
    parse_place,
    parse_request,
    parse_tile_path,
    plan_request,
    reverse_geocode_request,
    tile_request,
)
from src.domain.models import ApiRequest, GeoPoint


@pytest.mark.unit
def test_plan_request_keeps_full_coordinate_precision() -> None:
    req = plan_request(
        GeoPoint(lat=59.330165432, lon=18.058234), GeoPoint(lat=59.8586, lon=17.6389)
    )

    assert req.path == "/api/v1/plan"
    assert req.get("fromPlace") == "59.330165432,18.058234"
    assert req.get("toPlace") == "59.8586,17.6389"
    assert req.get("time") is None
    assert req.url == "/api/v1/plan?fromPlace=59.330165432%2C18.058234&toPlace=59.8586%2C17.6389"


@pytest.mark.unit
def test_plan_request_optional_parameters() -> None:
    req = plan_request(
        GeoPoint(lat=1.0, lon=2.0),
        GeoPoint(lat=3.0, lon=4.0),
        departure_time="2024-05-01T08:00:00",
        num_itineraries=3,
    )

    assert req.get("time") == "2024-05-01T08:00:00"
    assert req.get("numItineraries") == "3"


@pytest.mark.unit
def test_geocode_request_encodes_reserved_characters() -> None:
    req = geocode_request("Gamla stan & Slussen?")

    assert req.get("text") == "Gamla stan & Slussen?"
    assert req.url == "/api/v1/geocode?text=Gamla%20stan%20%26%20Slussen%3F"
    assert ApiRequest.parse(req.url) == req


@pytest.mark.unit
def test_reverse_geocode_request() -> None:
    req = reverse_geocode_request(GeoPoint(lat=59.3301, lon=18.0582))

    assert req.path == "/api/v1/reverse-geocode"
    assert req.get("place") == "59.3301,18.0582"


@pytest.mark.unit
def test_parse_request_splits_path_and_decodes_query() -> None:
    req = parse_request("/api/v5/geocode?text=T-Centralen%20&language=sv&language=en")

    assert req.path == "/api/v5/geocode"
    assert req.get("text") == "T-Centralen "
    assert req.get_all("language") == ["sv", "en"]
    assert parse_request("/api/v1/map/initial").params == ()


@pytest.mark.unit
def test_tile_paths() -> None:
    assert tile_request(14, 8999, 4790).path == "/tiles/14/8999/4790.mvt"
    assert parse_tile_path("/tiles/14/8999/4790.mvt") == (14, 8999, 4790)
    assert parse_tile_path("/tiles/glyphs/Noto/0-255.pbf") is None
    assert parse_tile_path("/tiles/1/2.mvt") is None


@pytest.mark.unit
def test_parse_place() -> None:
    assert parse_place("59.33,18.06") == GeoPoint(lat=59.33, lon=18.06)
    assert parse_place("59.33,18.06,0") == GeoPoint(lat=59.33, lon=18.06)
    assert parse_place("stop:740000001") is None
    assert parse_place("north,east") is None
    assert parse_place(None) is None
