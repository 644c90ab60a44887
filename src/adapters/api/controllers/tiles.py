from __future__ import annotations

import base64

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from src.adapters.api.dependencies import get_gateway_service, get_instance
from src.app.services.gateway_service import GatewayService
from src.domain.models import BinaryResult, Instance

router = APIRouter(prefix="/tiles", tags=["tiles"])

TILE_MEDIA_TYPE = "application/vnd.mapbox-vector-tile"
GLYPH_MEDIA_TYPE = "application/x-protobuf"


def _binary_response(result: BinaryResult | None, media_type: str) -> Response:
    if result is None or not result.found:
        raise HTTPException(status_code=404, detail="Not found")
    return Response(content=base64.b64decode(result.data_base64), media_type=media_type)


# Declared before the tile route so `glyphs/...` never parses as z/x/y.
@router.get("/glyphs/{fontstack}/{glyph_range}.pbf")
def get_glyph(
    fontstack: str,
    glyph_range: str,
    gateway: GatewayService = Depends(get_gateway_service),
    instance: Instance = Depends(get_instance),
) -> Response:
    outcome = gateway.get_glyph(instance, f"/tiles/glyphs/{fontstack}/{glyph_range}.pbf")
    return _binary_response(outcome.value, GLYPH_MEDIA_TYPE)


@router.get("/{z}/{x}/{y}.mvt")
def get_tile(
    z: int,
    x: int,
    y: int,
    gateway: GatewayService = Depends(get_gateway_service),
    instance: Instance = Depends(get_instance),
) -> Response:
    outcome = gateway.get_tile(instance, z, x, y)
    return _binary_response(outcome.value, TILE_MEDIA_TYPE)
