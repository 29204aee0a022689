"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUserRepository, run_migrations
from src.api.dependencies import create_hasher
from src.api.errors import register_error_handlers
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.exceptions import StorageFailure
from src.domain.migration import CredentialMigrator

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Credential API v1 - Register users and verify their passwords",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs schema migrations on startup
    - Builds the credential hasher
    - Sweeps legacy plaintext credentials before serving traffic
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    hasher = create_hasher(settings)

    try:
        logger.info("Running database migrations...")
        run_migrations(pool)

        if settings.migrate_credentials_on_startup:
            logger.info("Migrating legacy credentials...")
            CredentialMigrator(hasher).migrate_all(PostgresUserRepository(pool))
    except StorageFailure:
        logger.error("Startup aborted: storage unavailable")
        pool.close()
        raise
    except Exception:
        logger.exception("Startup aborted: database migrations failed")
        pool.close()
        raise

    # Store shared services in app state for dependency injection
    app.state.pool = pool
    app.state.hasher = hasher

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="roster-credentials",
    description="User registration and login over the users/teams/groups store",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_error_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}
