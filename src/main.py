from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.gateway import router as gateway_router
from src.adapters.api.controllers.tiles import router as tiles_router
from src.adapters.config import GatewayRuntimeConfig, configure_logging
from src.domain.exceptions import InitializationError

configure_logging(GatewayRuntimeConfig.from_env())

app = FastAPI(title="Transit Gateway")
app.include_router(gateway_router)
app.include_router(tiles_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Keep error bodies JSON so browser clients can show them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = GatewayRuntimeConfig.from_env().reveal_errors
    if reveal or isinstance(exc, (InitializationError, FileNotFoundError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
