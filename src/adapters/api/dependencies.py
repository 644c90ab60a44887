from __future__ import annotations

from functools import lru_cache

from src.adapters.config import GatewayRuntimeConfig
from src.adapters.engine.dataset_loader import LocalDatasetLoader
from src.app.services.gateway_service import GatewayService
from src.domain.models import Instance


@lru_cache(maxsize=1)
def get_gateway_service() -> GatewayService:
    cfg = GatewayRuntimeConfig.from_env()
    return GatewayService(
        loader=LocalDatasetLoader(default_itineraries=cfg.default_itineraries)
    )


@lru_cache(maxsize=1)
def get_instance() -> Instance:
    """The dataset opened once per process from GATEWAY_DATA_PATH."""

    cfg = GatewayRuntimeConfig.from_env()
    return get_gateway_service().open(cfg.data_path)
