"""
Server lifecycle: INITIALIZING -> LISTENING -> SHUTTING_DOWN -> TERMINATED.

SIGINT while listening closes the conversations database and the content
store concurrently, then stops the HTTP listener and waits for it to drain.
The process exit code is 1 after an interrupt and after a fatal startup
error alike.
"""
import asyncio
import contextlib
import logging
import signal
from enum import Enum
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from pymongo.errors import PyMongoError

from chatbot_server.bootstrap import BootstrapContext, build_context
from chatbot_server.core.config import HOST
from chatbot_server.core.errors import ServerError, StoreConnectionError
from chatbot_server.main import make_app

logger = logging.getLogger(__name__)

INTERRUPT_EXIT_CODE = 1
FATAL_EXIT_CODE = 1


class ServerState(Enum):
    INITIALIZING = "initializing"
    LISTENING = "listening"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class _UvicornServer(uvicorn.Server):
    """uvicorn server that leaves SIGINT handling to ChatbotServer."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class ChatbotServer:
    def __init__(self, context: BootstrapContext, host: str = HOST):
        self.context = context
        self.host = host
        self.state = ServerState.INITIALIZING
        self._serve_task: Optional[asyncio.Task] = None
        self._shutdown_task: Optional[asyncio.Task] = None
        self._interrupted = False
        self._terminated = asyncio.Event()

    def _make_http_server(self, app: FastAPI) -> uvicorn.Server:
        return _UvicornServer(
            uvicorn.Config(app, host=self.host, port=self.context.port, log_config=None)
        )

    async def _serve(self, http_server: uvicorn.Server) -> None:
        try:
            await http_server.serve()
        # uvicorn calls sys.exit(1) when it cannot bind
        except (OSError, SystemExit) as e:
            raise ServerError(f"HTTP server failed on port {self.context.port}: {e!r}") from e

    async def start(self) -> None:
        """Build the app, bind the port and return once the listener accepts connections."""
        logger.info("Starting server...")
        app = make_app(self.context.app_config)
        http_server = self._make_http_server(app)
        self.context.http_server = http_server

        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, self.handle_interrupt)

        self._serve_task = asyncio.create_task(self._serve(http_server))
        while not http_server.started:
            if self._serve_task.done():
                self._serve_task.result()
                raise ServerError("HTTP server stopped before it started listening")
            await asyncio.sleep(0.05)

        self.state = ServerState.LISTENING
        self._serve_task.add_done_callback(self._on_serve_done)
        logger.info(f"Server listening on port: {self.context.port}")

        if self._interrupted:
            self._begin_shutdown()

    def handle_interrupt(self) -> None:
        if self.state is ServerState.LISTENING:
            logger.info("SIGINT signal received")
            self._begin_shutdown()
        elif self.state is ServerState.INITIALIZING:
            logger.info("SIGINT signal received during startup, shutting down once listening")
            self._interrupted = True
        else:
            logger.info(f"SIGINT signal received while {self.state.value}, ignoring")

    def _on_serve_done(self, task: asyncio.Task) -> None:
        if self.state is ServerState.LISTENING:
            logger.error("HTTP server stopped unexpectedly, shutting down")
            self._begin_shutdown()

    def _begin_shutdown(self) -> None:
        self.state = ServerState.SHUTTING_DOWN
        self._shutdown_task = asyncio.create_task(self.shutdown())

    async def _close_database(self) -> None:
        try:
            await self.context.mongodb.close()
        except PyMongoError as e:
            raise StoreConnectionError(f"Failed to close conversations database: {e}") from e
        logger.info("Conversations database connection closed")

    async def shutdown(self) -> None:
        self.state = ServerState.SHUTTING_DOWN
        try:
            try:
                await asyncio.gather(
                    self._close_database(),
                    self.context.embedded_content_store.close(),
                )
            finally:
                http_server = self.context.http_server
                if http_server is not None:
                    http_server.should_exit = True
                if self._serve_task is not None:
                    await self._serve_task
                logger.info("HTTP server closed")
        finally:
            with contextlib.suppress(NotImplementedError, RuntimeError):
                asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
            self.state = ServerState.TERMINATED
            self._terminated.set()

    async def wait_closed(self) -> None:
        """Block until shutdown has finished; re-raises any shutdown error."""
        await self._terminated.wait()
        if self._shutdown_task is not None:
            await self._shutdown_task


async def run_server(env_path: str | Path) -> int:
    """Run the chatbot server until interrupted. Returns the process exit code."""
    try:
        context = await build_context(env_path)
        server = ChatbotServer(context)
        await server.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return FATAL_EXIT_CODE

    try:
        await server.wait_closed()
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)

    # Interrupt-triggered stops are never reported as successful
    return INTERRUPT_EXIT_CODE
