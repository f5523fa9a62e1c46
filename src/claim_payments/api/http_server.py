import asyncio
import contextlib

import structlog
import uvicorn
from fastapi import FastAPI


logger = structlog.get_logger()


class HttpServer:
    """Runs the payments API under uvicorn as a background task."""

    def __init__(self, app: FastAPI, host: str = "0.0.0.0", port: int = 8000) -> None:
        self._app = app
        self._host = host
        self._port = port
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        config = uvicorn.Config(
            self._app,
            host=self._host,
            port=self._port,
            log_config=None,
            access_log=False,
        )
        self._server = uvicorn.Server(config)

        self._task = asyncio.create_task(self._server.serve())
        logger.info("http_server_started", host=self._host, port=self._port)

    async def wait_for_termination(self) -> None:
        if self._task:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def stop(self, grace: float = 10.0) -> None:
        if self._server:
            self._server.should_exit = True

        if self._task:
            try:
                await asyncio.wait_for(asyncio.shield(self._task), timeout=grace)
            except TimeoutError:
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task

        logger.info("http_server_stopped")
