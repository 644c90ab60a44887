from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import unquote

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from src.app.ports.output import IDatasetLoader
from src.app.ports.output.engine_api import Match, PlanResponse
from src.app.services import capability_gate
from src.app.services.dispatch_table import DispatchTable, EndpointRoute
from src.app.services.payload_codec import binary_result
from src.app.services.request_synthesizer import (
    geocode_request,
    parse_request,
    parse_tile_path,
    plan_request,
    reverse_geocode_request,
    tile_request,
)
from src.app.services.response_projector import (
    project_matches,
    project_plan,
    project_reverse_match,
)
from src.domain.exceptions import (
    EndpointNotFound,
    FailureKind,
    InitializationError,
    Outcome,
)
from src.domain.models import (
    ApiRequest,
    BinaryResult,
    GeoPoint,
    Instance,
    Location,
    Route,
    Subsystem,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

GLYPH_PREFIX = "/tiles/glyphs/"
# Styles may still reference the legacy display variant of the font.
_LEGACY_FONT_SUFFIX = " Display"

_PLAN_ADAPTER: TypeAdapter[PlanResponse] = TypeAdapter(PlanResponse)
_MATCHES_ADAPTER: TypeAdapter[list[Match]] = TypeAdapter(list[Match])


@dataclass(slots=True)
class GatewayService:
    """Dispatch-and-projection use cases over a loaded Instance.

    Every operation returns an `Outcome`; nothing raised by a handler or a
    store escapes. The Instance is passed in explicitly and never mutated.
    """

    loader: IDatasetLoader
    table: DispatchTable = field(default_factory=DispatchTable)

    def open(self, data_path: str | Path) -> Instance:
        try:
            instance = self.loader.load(data_path)
        except InitializationError:
            logger.exception("Failed to open dataset %s", data_path)
            raise
        except Exception as exc:
            logger.exception("Failed to open dataset %s", data_path)
            raise InitializationError(
                f"Failed to load dataset {data_path}: {exc}"
            ) from exc

        logger.info(
            "Opened dataset %s (subsystems: %s)",
            instance.data_path,
            ", ".join(sorted(s.value for s in instance.subsystems)) or "none",
        )
        return instance

    def close(self, instance: Instance) -> None:
        self.loader.release(instance)
        logger.info("Closed dataset %s", instance.data_path)

    # Generic dispatch

    def dispatch(self, instance: Instance, request: ApiRequest) -> Outcome[Any]:
        try:
            route = self.table.resolve(request.path)
        except EndpointNotFound as exc:
            return Outcome.fail(FailureKind.NOT_FOUND, str(exc))
        return self._invoke(instance, route, request)

    def _invoke(
        self, instance: Instance, route: EndpointRoute, request: ApiRequest
    ) -> Outcome[Any]:
        unavailable = capability_gate.check(route.requires, instance)
        if unavailable is not None:
            return Outcome.fail(
                FailureKind.UNAVAILABLE, f"{request.path}: {unavailable.message}"
            )

        handler = instance.handler(route.name)
        if handler is None:
            logger.debug("No handler for %s in the loaded engine", route.name)
            return Outcome.fail(
                FailureKind.UNAVAILABLE,
                f"{request.path}: endpoint not provided by the loaded engine",
            )

        try:
            return Outcome.success(handler(request))
        except Exception as exc:
            logger.exception("Endpoint %s failed", request.url)
            return Outcome.fail(
                FailureKind.HANDLER_FAULT, f"Endpoint failed: {request.path}: {exc}"
            )

    def api_get(self, instance: Instance, path_and_query: str) -> Outcome[str]:
        """Serve a raw `path?query` and return the endpoint's JSON text."""

        request = parse_request(path_and_query)
        outcome = self.dispatch(instance, request)
        if not outcome.ok:
            return outcome

        value = outcome.value
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            return Outcome.success(value)

        try:
            text = to_json(value, by_alias=True, exclude_none=True).decode("utf-8")
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            logger.exception("Endpoint %s returned a non-serializable payload", request.path)
            return Outcome.fail(
                FailureKind.HANDLER_FAULT,
                f"Endpoint did not return valid JSON: {request.path}: {exc}",
            )
        return Outcome.success(text)

    # Typed operations

    def plan_route(
        self,
        instance: Instance,
        origin: GeoPoint,
        destination: GeoPoint,
        *,
        departure_time: str | None = None,
        num_itineraries: int | None = None,
    ) -> Outcome[list[Route]]:
        request = plan_request(
            origin,
            destination,
            departure_time=departure_time,
            num_itineraries=num_itineraries,
        )
        return self._projected(
            instance, request, lambda v: project_plan(_PLAN_ADAPTER.validate_python(v))
        )

    def geocode(self, instance: Instance, query: str) -> Outcome[list[Location]]:
        return self._projected(
            instance,
            geocode_request(query),
            lambda v: project_matches(_MATCHES_ADAPTER.validate_python(v)),
        )

    def reverse_geocode(
        self, instance: Instance, pos: GeoPoint
    ) -> Outcome[Location | None]:
        return self._projected(
            instance,
            reverse_geocode_request(pos),
            lambda v: project_reverse_match(_MATCHES_ADAPTER.validate_python(v)),
        )

    def _projected(
        self,
        instance: Instance,
        request: ApiRequest,
        project: Callable[[Any], T],
    ) -> Outcome[T]:
        outcome = self.dispatch(instance, request)
        if not outcome.ok:
            return Outcome(failure=outcome.failure)
        try:
            return Outcome.success(project(outcome.value))
        except (ValidationError, TypeError, ValueError) as exc:
            logger.exception("Unexpected response shape from %s", request.path)
            return Outcome.fail(
                FailureKind.HANDLER_FAULT,
                f"Endpoint failed: {request.path}: unexpected response ({exc})",
            )

    # Binary payloads

    def get_tile(self, instance: Instance, z: int, x: int, y: int) -> Outcome[BinaryResult]:
        unavailable = capability_gate.check((Subsystem.TILES,), instance)
        if unavailable is not None:
            return Outcome.fail(FailureKind.UNAVAILABLE, unavailable.message)

        try:
            data = instance.get(Subsystem.TILES).get_tile(z, x, y)
        except Exception as exc:
            path = tile_request(z, x, y).path
            logger.exception("Tile fetch failed for %s", path)
            return Outcome.fail(FailureKind.HANDLER_FAULT, f"Tile fetch failed: {path}: {exc}")
        return Outcome.success(binary_result(data))

    def get_tile_path(self, instance: Instance, path: str) -> Outcome[BinaryResult]:
        coords = parse_tile_path(path)
        if coords is None:
            return Outcome.fail(FailureKind.NOT_FOUND, f"Unknown endpoint: {path}")
        return self.get_tile(instance, *coords)

    def get_glyph(self, instance: Instance, resource_path: str) -> Outcome[BinaryResult]:
        decoded = unquote(resource_path)
        if not decoded.startswith(GLYPH_PREFIX):
            return Outcome.success(BinaryResult(found=False))

        unavailable = capability_gate.check((Subsystem.GLYPHS,), instance)
        if unavailable is not None:
            return Outcome.fail(FailureKind.UNAVAILABLE, unavailable.message)

        name = decoded[len(GLYPH_PREFIX) :].replace(_LEGACY_FONT_SUFFIX, "", 1)
        try:
            data = instance.get(Subsystem.GLYPHS).get_glyph(name)
        except KeyError:
            return Outcome.success(BinaryResult(found=False))
        except Exception as exc:
            logger.exception("Glyph fetch failed for %s", decoded)
            return Outcome.fail(
                FailureKind.HANDLER_FAULT, f"Glyph fetch failed: {decoded}: {exc}"
            )
        return Outcome.success(binary_result(data))
