"""Digipod API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map DigipodError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Record stores built on startup via lifespan and kept on app.state

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Stores live on app.state rather than a module global, so each app
      instance (and each test) owns its storage handle
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.infrastructure.observability import setup_logging
from app.infrastructure.record_stores import build_stores
from app.config import get_settings
from app.api.routes import health, licenses, projects

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app.state.stores = await build_stores(settings)
    logger.info(
        f"Digipod API started (record store: {settings.record_store_backend})",
    )
    yield
    await app.state.stores.close()
    logger.info("Digipod API shutting down")


app = FastAPI(
    title="Digipod API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(licenses.router)
app.include_router(projects.router)

register_error_handlers(app)
