from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.app.services.gateway_service import GatewayService
from src.domain.models import BinaryResult, GeoPoint, Instance, Location, Route


@dataclass(slots=True)
class NativeApi:
    """Typed in-process call surface for an embedding host.

    Failures never raise (except `open`): a missing subsystem, unknown
    endpoint or handler fault yields the operation's neutral value.
    """

    gateway: GatewayService

    def open(self, data_path: str | Path) -> Instance:
        return self.gateway.open(data_path)

    def close(self, instance: Instance) -> None:
        self.gateway.close(instance)

    def plan_route(
        self,
        instance: Instance,
        from_: GeoPoint,
        to: GeoPoint,
        departure_time: str | None = None,
        num_itineraries: int | None = None,
    ) -> list[Route]:
        outcome = self.gateway.plan_route(
            instance,
            from_,
            to,
            departure_time=departure_time,
            num_itineraries=num_itineraries,
        )
        return outcome.value_or([])

    def geocode(self, instance: Instance, query: str) -> list[Location]:
        return self.gateway.geocode(instance, query).value_or([])

    def reverse_geocode(self, instance: Instance, pos: GeoPoint) -> Location | None:
        return self.gateway.reverse_geocode(instance, pos).value

    def get_tile(self, instance: Instance, z: int, x: int, y: int) -> BinaryResult:
        return self.gateway.get_tile(instance, z, x, y).value_or(BinaryResult())

    def get_glyph(self, instance: Instance, resource_path: str) -> BinaryResult:
        return self.gateway.get_glyph(instance, resource_path).value_or(BinaryResult())

    def api_get(self, instance: Instance, path_and_query: str) -> str | None:
        return self.gateway.api_get(instance, path_and_query).value
