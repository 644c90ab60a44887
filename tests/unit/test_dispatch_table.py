from __future__ import annotations

from pathlib import Path

import pytest

from src.app.services import capability_gate
from src.app.services import dispatch_table as endpoints
from src.app.services.dispatch_table import DispatchTable, EndpointRoute
from src.domain.exceptions import EndpointNotFound
from src.domain.models import Instance, Subsystem


@pytest.mark.unit
def test_aliases_resolve_to_the_same_endpoint() -> None:
    table = DispatchTable()

    assert table.resolve("/api/v1/plan").name == endpoints.PLAN
    assert table.resolve("/api/v5/plan").name == endpoints.PLAN
    assert table.resolve("/api/v1/reverse-geocode").name == endpoints.REVERSE_GEOCODE
    assert table.resolve("/api/experimental/one-to-all").name == endpoints.ONE_TO_ALL


@pytest.mark.unit
def test_unknown_path_is_not_found() -> None:
    with pytest.raises(EndpointNotFound) as excinfo:
        DispatchTable().resolve("/api/v1/unknown")

    assert str(excinfo.value) == "Unknown endpoint: /api/v1/unknown"


@pytest.mark.unit
def test_query_string_never_takes_part_in_resolution() -> None:
    with pytest.raises(EndpointNotFound):
        DispatchTable().resolve("/api/v1/plan?fromPlace=1,2")


@pytest.mark.unit
def test_every_alias_is_bound_once() -> None:
    table = DispatchTable()
    paths = table.paths()

    assert len(paths) == len(set(paths))
    assert len(table) == len(endpoints.ENDPOINTS)
    assert table.get(endpoints.GEOCODE).requires == {
        Subsystem.GEOCODE_TEXT,
        Subsystem.GEOCODE_FORMATTER,
        Subsystem.GEOCODE_CACHE,
    }


@pytest.mark.unit
def test_duplicate_alias_is_rejected() -> None:
    routes = [
        EndpointRoute("a", ("/api/v1/x",)),
        EndpointRoute("b", ("/api/v1/x",)),
    ]
    with pytest.raises(ValueError):
        DispatchTable(routes)


@pytest.mark.unit
def test_gate_reports_missing_subsystems() -> None:
    instance = Instance(
        data_path=Path("data"), subsystems={Subsystem.STREETS: object()}
    )
    required = DispatchTable().get(endpoints.PLAN).requires

    unavailable = capability_gate.check(required, instance)

    assert unavailable is not None
    assert unavailable.missing == {Subsystem.TIMETABLE, Subsystem.STOP_MATCHES}
    assert unavailable.message == (
        "Required subsystems not loaded: stop_matches, timetable"
    )


@pytest.mark.unit
def test_gate_passes_when_everything_is_loaded() -> None:
    instance = Instance(
        data_path=Path("data"),
        subsystems={s: object() for s in Subsystem},
    )

    for route in DispatchTable():
        assert capability_gate.check(route.requires, instance) is None
