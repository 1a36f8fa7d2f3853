"""
Traceability API — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (traceability.main:app) and by the test suite with
       its own Settings.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → CORS                │
    │                                                          │
    │  Routes:      GET /          GET /health                 │
    │               GET /api/track                             │
    │               POST /api/product/init                     │
    │               POST /api/log/{farmer,distributor,retailer}│
    │                                                          │
    │  Exception Handlers:                                     │
    │    ValidationError→400 │ NotFoundError→404 │ Internal→500│
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the Database (engine + pool) and store it on app.state
    3. Acquire one connection and run SELECT 1 — failure is FATAL:
       the exception propagates and uvicorn exits before binding its port
    4. Create missing tables (if DB_CREATE_TABLES)

    Shutdown:
    1. Dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from traceability import __version__
from traceability.config import Settings, settings as default_settings
from traceability.database import Database
from traceability.exceptions import (
    InternalError,
    NotFoundError,
    TraceabilityError,
    ValidationError,
)
from traceability.middleware.logging import RequestLoggingMiddleware
from traceability.middleware.request_id import RequestIDMiddleware, request_id_var
from traceability.routes import health, logs, products, track

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by the hosting platform)
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Owns the connection pool for the lifetime of the process.

    The startup connectivity check is a boot-time gate, not a runtime
    concern: if it fails there is nothing useful the server could answer,
    so the error is logged and re-raised instead of starting degraded.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("Traceability API starting up (version %s)...", __version__)

    database = Database.from_settings(app_settings)
    try:
        await database.check_connection()
    except Exception as e:
        logger.critical("FATAL: DATABASE CONNECTION FAILED: %s", str(e))
        logger.critical("Check the DB_* / DATABASE_URL settings and that the database is running.")
        await database.dispose()
        raise
    logger.info("Database connection successful!")

    if app_settings.db_create_tables:
        try:
            await database.create_tables()
        except Exception as e:
            logger.critical("FATAL: TABLE CREATION FAILED: %s", str(e))
            logger.critical("The database is reachable; check the role's CREATE privilege or set DB_CREATE_TABLES=false.")
            await database.dispose()
            raise

    app.state.db = database
    logger.info("Traceability API Server ready on port %d", app_settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Traceability API shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to status codes and the `{"error": ...}` body.

    Handler hierarchy:
        ValidationError         → 400
        RequestValidationError  → 400 (malformed JSON or wrongly typed value)
        NotFoundError           → 404
        InternalError           → 500 (context logged, never returned)
        Exception (fallback)    → 500
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request body: %s", rid, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body."})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(InternalError)
    async def handle_internal_error(request: Request, exc: InternalError):
        rid = request_id_var.get("")
        logger.error("[%s] Internal error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(TraceabilityError)
    async def handle_application_error(request: Request, exc: TraceabilityError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only; the client gets a generic 500."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error."})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to run with; defaults to the environment-loaded
                      singleton. Tests pass their own to point at SQLite.

    Nothing here touches the database; the pool is created by the lifespan.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Traceability API",
        description=(
            "Records and retrieves a product's supply-chain journey: product "
            "registration, harvest, shipment and sale."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → CORS
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(track.router)
    app.include_router(products.router)
    app.include_router(logs.router)

    return app


# uvicorn expects `traceability.main:app` to be importable
app = create_app()
