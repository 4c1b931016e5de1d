"""FastAPI application entrypoint.

Exposes ``create_app``/``get_app`` and a lazy ``app`` instance for uvicorn.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from .api.health import router as health_router
from .api.rooms import router as rooms_router
from .api.spotify import router as spotify_router
from .db.core import dispose_engine, init_db
from .env_utils import load_env
from .errors import register_error_handlers
from .logging_config import configure_logging
from .middleware import RequestIDMiddleware
from .settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_db()
    logger.info("🚀 songroom started")
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("songroom stopped")


def create_app() -> FastAPI:
    """Composition root for the FastAPI application."""
    configure_logging(get_settings().LOG_LEVEL)

    app = FastAPI(title="songroom", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(spotify_router, prefix="/api")
    app.include_router(rooms_router, prefix="/api")
    app.include_router(health_router)
    return app


_app_instance: FastAPI | None = None


def get_app() -> FastAPI:
    """Get the FastAPI app instance, creating it lazily if needed."""
    global _app_instance
    if _app_instance is None:
        load_env()
        get_settings.cache_clear()
        _app_instance = create_app()
    return _app_instance


class _LazyApp:
    """Lazy app accessor that creates the app only when accessed."""

    async def __call__(self, scope, receive, send):
        return await get_app()(scope, receive, send)

    def __getattr__(self, name: str) -> Any:
        return getattr(get_app(), name)


app = _LazyApp()


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(get_app(), host=host, port=port)
