"""MetaRelay API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MetaRelayError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and relay executor initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py: domain (MetaRelayError),
      validation (Pydantic), catch-all (Exception) — never leaks internal details
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from metarelay.api.dependencies import init_relay
from metarelay.api.error_handlers import register_error_handlers
from metarelay.api.routes import executor_info, health, ledger, transfers
from metarelay.config import get_settings
from metarelay.infrastructure.database import init_db
from metarelay.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    executor = init_relay(db, settings.executor_address, settings.digest_domain)
    logger.info(
        f"MetaRelay API started, executor {executor.address}",
        extra={"relayer": executor.address},
    )
    yield
    await db.dispose()
    logger.info("MetaRelay API shutting down")


app = FastAPI(
    title="MetaRelay API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(executor_info.router)
app.include_router(transfers.router)
app.include_router(ledger.router)

register_error_handlers(app)
