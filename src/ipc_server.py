from __future__ import annotations

import argparse
import logging
import sys

from src.adapters.config import GatewayRuntimeConfig, configure_logging
from src.adapters.engine.dataset_loader import LocalDatasetLoader
from src.adapters.ipc.command_loop import IpcCommandLoop, encode_envelope, error_envelope
from src.app.services.gateway_service import GatewayService
from src.domain.exceptions import InitializationError

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    config = GatewayRuntimeConfig.from_env()
    parser = argparse.ArgumentParser(
        prog="python -m src.ipc_server",
        description="Serve line-delimited JSON commands over stdin/stdout.",
    )
    parser.add_argument("dataset_path", nargs="?", default=config.data_path)
    args = parser.parse_args(argv)

    configure_logging(config)

    gateway = GatewayService(
        loader=LocalDatasetLoader(default_itineraries=config.default_itineraries)
    )
    try:
        instance = gateway.open(args.dataset_path)
    except InitializationError as exc:
        sys.stdout.write(encode_envelope(error_envelope(str(exc))) + "\n")
        sys.stdout.flush()
        return 1

    try:
        IpcCommandLoop(gateway=gateway, instance=instance).run(sys.stdin, sys.stdout)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        gateway.close(instance)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
