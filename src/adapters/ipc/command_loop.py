from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TextIO

from pydantic import BaseModel, ValidationError

from src.adapters.ipc.schemas import (
    BinarySchema,
    GeocodeCommand,
    GetTileCommand,
    LocationSchema,
    PathCommand,
    PlanRouteCommand,
    ReverseGeocodeCommand,
    RouteSchema,
)
from src.app.services.gateway_service import GatewayService
from src.domain.exceptions import FailureKind, Outcome
from src.domain.models import GeoPoint, Instance

logger = logging.getLogger(__name__)

_NOT_FOUND = {"found": False}


def ok_envelope(data: Any) -> dict[str, Any]:
    return {"status": "ok", "data": data}


def error_envelope(message: str) -> dict[str, Any]:
    return {"status": "error", "message": message}


def encode_envelope(envelope: dict[str, Any]) -> str:
    return json.dumps(envelope, ensure_ascii=False, allow_nan=False, separators=(",", ":"))


class _CommandError(Exception):
    pass


def _validation_message(cmd: str, exc: ValidationError) -> str:
    err = exc.errors()[0]
    where = ".".join(str(p) for p in err.get("loc", ())) or "request"
    return f"Invalid request for {cmd}: {where}: {err.get('msg', 'invalid value')}"


@dataclass(slots=True)
class IpcCommandLoop:
    """Serves one host session: one JSON request per line, one reply per line.

    The Instance is only read; a bad line yields an error envelope and the
    loop keeps going.
    """

    gateway: GatewayService
    instance: Instance
    _commands: dict[str, tuple[type[BaseModel], Callable[[Any], dict[str, Any]]]] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._commands = {
            "geocode": (GeocodeCommand, self._geocode),
            "plan_route": (PlanRouteCommand, self._plan_route),
            "reverse_geocode": (ReverseGeocodeCommand, self._reverse_geocode),
            "get_tile": (GetTileCommand, self._get_tile),
            "get_glyph": (PathCommand, self._get_glyph),
            "api_get": (PathCommand, self._api_get),
        }

    def handle_line(self, line: str) -> str:
        """Reply line for one input line, blank lines included."""

        try:
            payload = json.loads(line)
        except (ValueError, RecursionError) as exc:
            return encode_envelope(error_envelope(f"Invalid JSON: {exc}"))
        envelope = self.handle(payload)
        try:
            return encode_envelope(envelope)
        except ValueError as exc:
            # NaN and infinities have no JSON spelling
            logger.warning("Reply is not encodable: %s", exc)
            return encode_envelope(error_envelope(f"Response is not valid JSON: {exc}"))

    def handle(self, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, dict):
            return error_envelope("Request must be a JSON object")

        cmd = payload.get("cmd")
        entry = self._commands.get(cmd) if isinstance(cmd, str) else None
        if entry is None:
            return error_envelope(f"Unknown command: {cmd if cmd is not None else ''}")

        schema, run = entry
        try:
            command = schema.model_validate(payload)
        except ValidationError as exc:
            return error_envelope(_validation_message(cmd, exc))

        try:
            return run(command)
        except _CommandError as exc:
            return error_envelope(str(exc))
        except Exception as exc:
            logger.exception("Command %s failed", cmd)
            return error_envelope(f"Command failed: {cmd}: {exc}")

    def run(self, stdin: TextIO, stdout: TextIO) -> int:
        """Serve until EOF; returns the number of replies written."""

        replies = 0
        for line in stdin:
            try:
                reply = self.handle_line(line)
            except Exception as exc:
                logger.exception("Unhandled failure while serving a line")
                reply = encode_envelope(error_envelope(f"Internal error: {type(exc).__name__}"))
            stdout.write(reply + "\n")
            stdout.flush()
            replies += 1
        logger.info("Input closed after %d replies", replies)
        return replies

    # Commands

    @staticmethod
    def _reply(outcome: Outcome[Any], neutral: Any, render: Callable[[Any], Any]) -> dict[str, Any]:
        if outcome.ok:
            return ok_envelope(render(outcome.value))
        if outcome.failure.kind is FailureKind.UNAVAILABLE:
            logger.debug("Unavailable: %s", outcome.failure.message)
            return ok_envelope(neutral)
        return error_envelope(outcome.failure.message)

    def _geocode(self, command: GeocodeCommand) -> dict[str, Any]:
        outcome = self.gateway.geocode(self.instance, command.query)
        return self._reply(
            outcome, [], lambda locs: [LocationSchema.from_location(loc).to_wire() for loc in locs]
        )

    def _plan_route(self, command: PlanRouteCommand) -> dict[str, Any]:
        outcome = self.gateway.plan_route(
            self.instance,
            GeoPoint(lat=command.from_lat, lon=command.from_lon),
            GeoPoint(lat=command.to_lat, lon=command.to_lon),
            departure_time=command.time,
            num_itineraries=command.num_itineraries,
        )
        return self._reply(
            outcome, [], lambda routes: [RouteSchema.from_route(r).to_wire() for r in routes]
        )

    def _reverse_geocode(self, command: ReverseGeocodeCommand) -> dict[str, Any]:
        outcome = self.gateway.reverse_geocode(
            self.instance, GeoPoint(lat=command.lat, lon=command.lon)
        )
        return self._reply(
            outcome,
            None,
            lambda loc: LocationSchema.from_location(loc).to_wire() if loc is not None else None,
        )

    def _get_tile(self, command: GetTileCommand) -> dict[str, Any]:
        outcome = self.gateway.get_tile(self.instance, command.z, command.x, command.y)
        return self._reply(outcome, dict(_NOT_FOUND), lambda r: BinarySchema.from_result(r).to_wire())

    def _get_glyph(self, command: PathCommand) -> dict[str, Any]:
        if not command.path:
            raise _CommandError("Missing path")
        outcome = self.gateway.get_glyph(self.instance, command.path)
        return self._reply(outcome, dict(_NOT_FOUND), lambda r: BinarySchema.from_result(r).to_wire())

    def _api_get(self, command: PathCommand) -> dict[str, Any]:
        if not command.path:
            raise _CommandError("Missing path")
        outcome = self.gateway.api_get(self.instance, command.path)
        if not outcome.ok:
            return self._reply(outcome, None, lambda v: v)
        try:
            document = json.loads(outcome.value)
        except (TypeError, ValueError, RecursionError):
            logger.warning("Endpoint %s returned non-JSON output", command.path)
            raise _CommandError(f"Endpoint did not return valid JSON: {command.path}") from None
        return ok_envelope(document)
