"""
Music DB API - FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn musicdb.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────┐ ┌────────┐ ┌─────────┐ ┌──────────────┐   │
    │  │ CORS │→│ Req ID │→│ Logging │→│ Availability │   │
    │  └──────┘ └────────┘ └─────────┘ └──────────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ GET / & list │ │ GET /songs/* │ │ GET /health │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Validation/Query→400 │ NotFound→404 │ DB→500  │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Probe the database (retried); the gate stays closed until it answers
    3. If RESET_DB is set and the database is up, reseed the tracks table
    4. Start the background heartbeat

    Shutdown:
    1. Cancel the heartbeat
    2. Dispose database engine (close all connections)
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from musicdb import __version__
from musicdb.config import settings
from musicdb.database import connection_state, dispose_engine
from musicdb.exceptions import (
    DatabaseError,
    MusicDBError,
    NotFoundError,
    QueryError,
    ServiceUnavailableError,
    ValidationError,
)
from musicdb.middleware.availability import DatabaseAvailabilityMiddleware
from musicdb.middleware.logging import RequestLoggingMiddleware
from musicdb.middleware.request_id import RequestIDMiddleware, request_id_var
from musicdb.routes import health, root, songs
from musicdb.services.seed_service import reset_database

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access logger replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def seed_if_requested() -> None:
    """Run the seed loader when RESET_DB is set. Failures are logged, not fatal."""
    if not settings.reset_db:
        return
    if not connection_state.ready:
        logger.error("RESET_DB is set but the database is unreachable; skipping seed")
        return
    try:
        count = await reset_database()
        logger.info("Database reset with %d tracks", count)
    except (MusicDBError, OSError, ValueError) as e:
        # The server still starts and serves whatever the table held before
        logger.error("Database reset failed: %s", str(e))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    Code before yield runs on startup; code after yield on shutdown.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Music DB API %s starting up...", __version__)

    await connection_state.connect()
    await seed_if_requested()

    heartbeat = asyncio.create_task(connection_state.watch(settings.db_ping_interval))

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Music DB API shutting down...")

    heartbeat.cancel()
    with suppress(asyncio.CancelledError):
        await heartbeat

    await dispose_engine()

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "request_id": request_id_var.get("")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes.

    Handler hierarchy:
        ValidationError          → 400 Bad Request (malformed id, bad filter value)
        QueryError               → 400 Bad Request (lookup failed)
        NotFoundError            → 404 Not Found
        ServiceUnavailableError  → 503 Service Unavailable
        DatabaseError            → 500 Internal Server Error
        MusicDBError (base)      → 500 Internal Server Error
        Exception (fallback)     → 500 Internal Server Error

    Every body has the shape {"error": <free text>, "request_id": <id>}.
    Driver details stay in the server log.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(400, exc.message)

    @app.exception_handler(QueryError)
    async def handle_query_error(request: Request, exc: QueryError):
        logger.warning("[%s] Query error: %s %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(400, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, exc.message)

    @app.exception_handler(ServiceUnavailableError)
    async def handle_service_unavailable(request: Request, exc: ServiceUnavailableError):
        return error_response(503, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, exc.message)

    @app.exception_handler(MusicDBError)
    async def handle_app_error(request: Request, exc: MusicDBError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: stack trace goes to the log, never to the client."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(500, "An unexpected error occurred")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Music DB API",
        description=(
            "Read-only queries over a catalog of popular tracks: exact-match filters, "
            "a bpm threshold, and lookups by id, title, artist and genre."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # CORS → RequestID → Logging → Availability → GZip → route
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(DatabaseAvailabilityMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Allow-all by default; a wildcard origin cannot be combined with credentials
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(root.router)
    app.include_router(songs.router)
    app.include_router(health.router)

    return app


# uvicorn expects `musicdb.main:app` to be importable
app = create_app()
