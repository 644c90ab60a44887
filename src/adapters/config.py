from __future__ import annotations

import logging
import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class GatewayRuntimeConfig:
    data_path: str
    log_level: str
    reveal_errors: bool
    default_itineraries: int

    @staticmethod
    def from_env() -> "GatewayRuntimeConfig":
        data_path = (os.getenv("GATEWAY_DATA_PATH") or "").strip() or "data"
        log_level = (os.getenv("GATEWAY_LOG_LEVEL") or "").strip().upper() or "INFO"

        return GatewayRuntimeConfig(
            data_path=data_path,
            log_level=log_level,
            reveal_errors=_env_bool("GATEWAY_REVEAL_ERRORS", False),
            default_itineraries=max(1, _env_int("GATEWAY_DEFAULT_ITINERARIES", 5)),
        )

    def resolved_log_level(self) -> int:
        """Numeric logging level; unknown names fall back to INFO."""

        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO


def configure_logging(config: GatewayRuntimeConfig) -> None:
    """Log to stderr; stdout is reserved for protocol output."""

    logging.basicConfig(
        level=config.resolved_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
