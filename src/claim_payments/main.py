import asyncio
import signal
from typing import NoReturn

import structlog

from claim_payments.api.http_app import create_app
from claim_payments.api.http_server import HttpServer
from claim_payments.config import settings
from claim_payments.infrastructure.database import Database
from claim_payments.logging import configure_logging


logger = structlog.get_logger()


async def main() -> NoReturn:
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
    )

    logger.info(
        "starting_claim_payments_service",
        http_host=settings.http_host,
        http_port=settings.http_port,
        log_level=settings.log_level,
        metrics_enabled=settings.metrics_enabled,
    )

    database = Database(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

    app = create_app(database, metrics_enabled=settings.metrics_enabled)
    server = HttpServer(app, host=settings.http_host, port=settings.http_port)

    loop = asyncio.get_running_loop()

    async def shutdown() -> None:
        logger.info("shutting_down")
        await server.stop()
        await database.close()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: asyncio.create_task(shutdown()),
        )

    await server.start()
    await server.wait_for_termination()

    raise SystemExit(0)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
