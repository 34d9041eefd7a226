import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from chatbot_server.api.conversations import ConversationsRouterConfig, make_conversations_router
from chatbot_server.core.config import STATIC_SITE_DIR

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    conversations_router_config: ConversationsRouterConfig
    max_request_timeout_ms: int = 30000
    serve_static_site: bool = False
    static_site_dir: str = STATIC_SITE_DIR


def make_app(config: AppConfig) -> FastAPI:
    """Build the chatbot HTTP application from an assembled configuration."""
    app = FastAPI(
        title="RAG Chatbot API",
        description="Retrieval-augmented chatbot with persisted conversations"
    )

    timeout_s = config.max_request_timeout_ms / 1000

    @app.middleware("http")
    async def request_timeout(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"Request {request.method} {request.url.path} timed out after {timeout_s}s")
            return JSONResponse(status_code=504, content={"detail": "Request timed out"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(make_conversations_router(config.conversations_router_config), prefix="/api/v1")

    # Mounted last so the API routes take precedence over "/"
    if config.serve_static_site:
        site_dir = Path(config.static_site_dir)
        if site_dir.is_dir():
            app.mount("/", StaticFiles(directory=site_dir, html=True), name="static")
        else:
            logger.warning(f"Static site directory {site_dir} not found, not serving a site")

    return app
