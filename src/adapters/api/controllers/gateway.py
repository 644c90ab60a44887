from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from src.adapters.api.dependencies import get_gateway_service, get_instance
from src.app.services.gateway_service import GatewayService
from src.domain.exceptions import FailureKind
from src.domain.models import Instance

router = APIRouter(tags=["gateway"])

_STATUS_BY_KIND = {
    FailureKind.NOT_FOUND: 404,
    FailureKind.UNAVAILABLE: 503,
    FailureKind.HANDLER_FAULT: 500,
    FailureKind.INITIALIZATION_FAULT: 500,
}


@router.get("/api/{endpoint:path}")
def api_passthrough(
    endpoint: str,
    request: Request,
    gateway: GatewayService = Depends(get_gateway_service),
    instance: Instance = Depends(get_instance),
) -> Response:
    path = request.url.path
    query = request.url.query
    outcome = gateway.api_get(instance, f"{path}?{query}" if query else path)
    if not outcome.ok:
        return JSONResponse(
            status_code=_STATUS_BY_KIND.get(outcome.failure.kind, 500),
            content={
                "error": outcome.failure.message,
                "stage": "endpoint",
                "path": path,
            },
        )
    return Response(content=outcome.value, media_type="application/json")
