"""Wire models for the line-delimited JSON command protocol."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.domain.models import Area, BinaryResult, Location, Route, RouteLeg


class CommandSchema(BaseModel):
    # `cmd` and any extra keys sent by a host are ignored.
    model_config = ConfigDict(extra="ignore")


class GeocodeCommand(CommandSchema):
    query: str


class PlanRouteCommand(CommandSchema):
    from_lat: float
    from_lon: float
    to_lat: float
    to_lon: float
    time: str | None = None
    num_itineraries: int | None = Field(default=None, ge=1)


class ReverseGeocodeCommand(CommandSchema):
    lat: float
    lon: float


class GetTileCommand(CommandSchema):
    z: int
    x: int
    y: int


class PathCommand(CommandSchema):
    path: str = ""


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LatLonSchema(WireModel):
    lat: float
    lon: float


class RouteLegSchema(WireModel):
    mode: str
    from_name: str
    to_name: str
    from_: LatLonSchema = Field(alias="from")
    to: LatLonSchema
    duration_seconds: int
    distance_meters: int
    route_short_name: str | None = None
    headsign: str | None = None

    @classmethod
    def from_leg(cls, leg: RouteLeg) -> "RouteLegSchema":
        return cls(
            mode=leg.mode,
            from_name=leg.from_name,
            to_name=leg.to_name,
            from_=LatLonSchema(lat=leg.origin.lat, lon=leg.origin.lon),
            to=LatLonSchema(lat=leg.destination.lat, lon=leg.destination.lon),
            duration_seconds=leg.duration_seconds,
            distance_meters=leg.distance_meters,
            route_short_name=leg.route_short_name,
            headsign=leg.headsign,
        )


class RouteSchema(WireModel):
    duration_seconds: int
    transfers: int
    legs: list[RouteLegSchema] = []

    @classmethod
    def from_route(cls, route: Route) -> "RouteSchema":
        return cls(
            duration_seconds=route.duration_seconds,
            transfers=route.transfers,
            legs=[RouteLegSchema.from_leg(leg) for leg in route.legs],
        )


class AreaSchema(WireModel):
    name: str
    admin_level: int
    matched: bool
    unique: bool
    is_default: bool = Field(alias="default")

    @classmethod
    def from_area(cls, area: Area) -> "AreaSchema":
        return cls(
            name=area.name,
            admin_level=area.admin_level,
            matched=area.matched,
            unique=area.unique,
            is_default=area.is_default,
        )


class LocationSchema(WireModel):
    name: str
    place_id: str
    lat: float
    lon: float
    score: float
    type: str | None = None
    category: str | None = None
    areas: list[AreaSchema] = []
    tokens: list[list[int]] = []
    modes: list[str] | None = None
    importance: float | None = None
    street: str | None = None
    house_number: str | None = None
    country: str | None = None
    zip: str | None = None

    @classmethod
    def from_location(cls, loc: Location) -> "LocationSchema":
        return cls(
            name=loc.name,
            place_id=loc.place_id,
            lat=loc.pos.lat,
            lon=loc.pos.lon,
            score=loc.score,
            type=loc.type,
            category=loc.category,
            areas=[AreaSchema.from_area(a) for a in loc.areas],
            tokens=[[t.start, t.length] for t in loc.tokens],
            modes=list(loc.modes) if loc.modes is not None else None,
            importance=loc.importance,
            street=loc.street,
            house_number=loc.house_number,
            country=loc.country,
            zip=loc.zip,
        )


class BinarySchema(WireModel):
    found: bool
    data_base64: str | None = None

    @classmethod
    def from_result(cls, result: BinaryResult) -> "BinarySchema":
        return cls(found=result.found, data_base64=result.data_base64)
