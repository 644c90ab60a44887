"""Response types produced by engine endpoint handlers.

Field names follow the engine's public JSON API (camelCase aliases), so a
handler result can be serialized as-is for generic endpoint calls.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Mode(str, Enum):
    WALK = "WALK"
    BIKE = "BIKE"
    RENTAL = "RENTAL"
    CAR = "CAR"
    CAR_PARKING = "CAR_PARKING"
    CAR_DROPOFF = "CAR_DROPOFF"
    ODM = "ODM"
    RIDE_SHARING = "RIDE_SHARING"
    FLEX = "FLEX"
    TRANSIT = "TRANSIT"
    TRAM = "TRAM"
    SUBWAY = "SUBWAY"
    FERRY = "FERRY"
    AIRPLANE = "AIRPLANE"
    BUS = "BUS"
    COACH = "COACH"
    RAIL = "RAIL"
    HIGHSPEED_RAIL = "HIGHSPEED_RAIL"
    LONG_DISTANCE = "LONG_DISTANCE"
    NIGHT_RAIL = "NIGHT_RAIL"
    REGIONAL_FAST_RAIL = "REGIONAL_FAST_RAIL"
    REGIONAL_RAIL = "REGIONAL_RAIL"
    CABLE_CAR = "CABLE_CAR"
    FUNICULAR = "FUNICULAR"
    AERIAL_LIFT = "AERIAL_LIFT"
    OTHER = "OTHER"


class LocationType(str, Enum):
    STOP = "STOP"
    PLACE = "PLACE"
    ADDRESS = "ADDRESS"


class EngineModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Place(EngineModel):
    name: str = ""
    lat: float
    lon: float
    stop_id: str | None = Field(default=None, alias="stopId")


class EngineLeg(EngineModel):
    # Anything that is not a known Mode projects to UNKNOWN.
    mode: Any
    from_: Place = Field(alias="from")
    to: Place
    duration: float
    distance: float | None = None
    route_short_name: str | None = Field(default=None, alias="routeShortName")
    headsign: str | None = None
    trip_id: str | None = Field(default=None, alias="tripId")


class Itinerary(EngineModel):
    duration: float
    transfers: int = 0
    legs: list[EngineLeg] = []


class PlanResponse(EngineModel):
    from_: Place | None = Field(default=None, alias="from")
    to: Place | None = None
    itineraries: list[Itinerary] = []


class MatchArea(EngineModel):
    name: str
    admin_level: float = Field(alias="adminLevel")
    matched: bool = False
    unique: bool | None = None
    default: bool | None = None


class Match(EngineModel):
    type: LocationType | None = None
    name: str
    id: str
    lat: float
    lon: float
    score: float = 0.0
    # Each token is [start, length]; entries are checked during projection.
    tokens: list[list[Any]] = []
    areas: list[MatchArea] = []
    category: str | None = None
    modes: list[Any] | None = None
    importance: float | None = None
    street: str | None = None
    house_number: str | None = Field(default=None, alias="houseNumber")
    country: str | None = None
    zip: str | None = None


class InitialResponse(EngineModel):
    lat: float
    lon: float
    zoom: float
