"""fundhost API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FundhostError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Profile page router registered last: GET /{slug} must not shadow
      /graphql or /api/v1/*
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fundhost.api.error_handlers import register_error_handlers
from fundhost.api.routes import health, profile_page
from fundhost.config import get_settings
from fundhost.graphql.schema import router as graphql_router
from fundhost.infrastructure.database import init_db
from fundhost.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("fundhost API started")
    yield
    logger.info("fundhost API shutting down")
    await manager.close()


app = FastAPI(title="fundhost API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(graphql_router, prefix="/graphql")
app.include_router(profile_page.router)

register_error_handlers(app)
