"""Server Entry Point — runs the app under uvicorn with a bounded graceful shutdown.

Invariants:
    - SIGINT/SIGTERM: stop accepting connections, wait for in-flight requests
    - The whole shutdown (drain + lifespan teardown) is bounded by
      shutdown_grace_seconds; exceeding it is a forced exit with status 1
    - Startup failures (pool, ping, migrations) abort the lifespan; uvicorn then
      exits with its startup-failure status
"""

import asyncio
import logging
import socket

import uvicorn

from userapi.config import Settings, get_settings
from userapi.main import create_app

logger = logging.getLogger(__name__)


class GracefulServer(uvicorn.Server):
    """uvicorn.Server whose shutdown gives up after `grace_period` seconds."""

    def __init__(self, config: uvicorn.Config, grace_period: float):
        super().__init__(config)
        self.grace_period = grace_period
        self.forced_exit = False

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        try:
            await asyncio.wait_for(
                super().shutdown(sockets=sockets), timeout=self.grace_period,
            )
        except asyncio.TimeoutError:
            self.forced_exit = True
            logger.critical("Graceful shutdown timed out, forcing exit")
            raise SystemExit(1)
        logger.info("Server stopped gracefully")


def build_server(settings: Settings) -> GracefulServer:
    config = uvicorn.Config(
        create_app(settings),
        host=settings.server_host,
        port=settings.server_port,
        lifespan="on",
        log_config=None,
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
    )
    return GracefulServer(config, grace_period=settings.shutdown_grace_seconds)


def main() -> None:
    settings = get_settings()
    server = build_server(settings)
    logger.info(f"Server is starting on {settings.server_host}:{settings.server_port}")
    server.run()


if __name__ == "__main__":
    main()
