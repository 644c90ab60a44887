from __future__ import annotations

from pathlib import Path

import pytest

from src.app.services.gateway_service import GatewayService
from src.app.services.native_api import NativeApi
from src.domain.models import BinaryResult, GeoPoint, Instance, Subsystem
from tests.unit.fakes import FakeLoader


def _api(instance: Instance) -> NativeApi:
    return NativeApi(gateway=GatewayService(loader=FakeLoader(instance=instance)))


@pytest.mark.unit
def test_empty_instance_yields_neutral_values() -> None:
    instance = Instance(data_path=Path("data"))
    api = _api(instance)
    opened = api.open("data")

    assert api.plan_route(opened, GeoPoint(lat=59.33, lon=18.06), GeoPoint(lat=59.86, lon=17.64)) == []
    assert api.geocode(opened, "Odenplan") == []
    assert api.reverse_geocode(opened, GeoPoint(lat=59.33, lon=18.06)) is None
    assert api.get_tile(opened, 0, 0, 0) == BinaryResult(found=False)
    assert api.get_glyph(opened, "/tiles/glyphs/Noto/0-255.pbf") == BinaryResult(found=False)
    assert api.api_get(opened, "/api/v1/plan?fromPlace=1,2") is None
    assert api.api_get(opened, "/api/v1/unknown") is None


@pytest.mark.unit
def test_plan_route_is_empty_when_any_required_subsystem_is_missing() -> None:
    for missing in (Subsystem.STREETS, Subsystem.TIMETABLE, Subsystem.STOP_MATCHES):
        subsystems = {
            s: object()
            for s in (Subsystem.STREETS, Subsystem.TIMETABLE, Subsystem.STOP_MATCHES)
            if s is not missing
        }
        instance = Instance(data_path=Path("data"), subsystems=subsystems)

        assert _api(instance).plan_route(
            instance, GeoPoint(lat=59.33, lon=18.06), GeoPoint(lat=59.86, lon=17.64)
        ) == []
