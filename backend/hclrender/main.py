"""hclrender API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Health router registered before the render catch-all
    - Global error handlers map RenderError → text or JSON per settings.error_format
    - Logging configured once on startup via the lifespan context manager

Design Decisions:
    - create_app(settings) factory: tests build isolated apps on tmp storage;
      the module-level `app` uses get_settings() for uvicorn
    - Lifespan over @app.on_event: FastAPI recommended pattern
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hclrender import __version__
from hclrender.api.error_handlers import register_error_handlers
from hclrender.api.routes import health, render
from hclrender.config import Settings, get_settings
from hclrender.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    logger.info(f"hclrender started, serving {settings.storage}")
    yield
    logger.info("hclrender shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(title="hclrender", version=__version__, lifespan=lifespan)
    app.state.settings = settings or get_settings()

    register_error_handlers(app)

    # Routes: explicit registration, health first (render is a catch-all)
    app.include_router(health.router)
    app.include_router(render.router)
    return app


app = create_app()
