"""
Vibe Backend — FastAPI Application Factory
===========================================

What:  Builds and configures the FastAPI application.
How:   create_app() assembles middleware, exception handlers, routers and
       the /public static mount; `app` is the instance uvicorn serves
       (uvicorn vibe.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware: Request ID → Rate Limit → Access Log → GZip  │
    │              → CORS                                       │
    │                                                           │
    │  Routes:  /  /health  /api/auth  /api/users  /api/posts   │
    │           /api/marketplace  /api/video  /public/*         │
    │                                                           │
    │  Exception Handlers:                                      │
    │    VibeError subclasses → their own status + error code   │
    │    RequestValidationError → 422                           │
    │    Exception → 500                                        │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, check settings, create tables.
    Shutdown: dispose the database engine.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from vibe import __version__
from vibe.config import settings
from vibe.database import create_tables, dispose_engine
from vibe.exceptions import DatabaseError, RateLimitExceededError, VibeError
from vibe.middleware.logging import RequestLoggingMiddleware
from vibe.middleware.rate_limit import RateLimitMiddleware
from vibe.middleware.request_id import RequestIDMiddleware, request_id_var
from vibe.routes import auth, health, marketplace, posts, users, video

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] vibe.access: GET /api/posts 200 3.1ms [a1b2c3d4] ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Vibe backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: the default secret is fine for local development.
        logger.warning("Configuration warning: %s", str(e))

    await create_tables()
    logger.info("Database schema ready (%s)", "sqlite" if settings.is_sqlite else "postgresql")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/swagger", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Vibe backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def error_body(
    error: str,
    message: str,
    request_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """Failure envelope shared by every error path."""
    body: Dict[str, Any] = {"success": False, "error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to failure envelopes.

    Handler hierarchy:
        VibeError subclasses    → exc.status_code / exc.error_code
        RequestValidationError  → 422 request_validation_error
        HTTPException           → its status (unknown route, wrong method)
        Exception (fallback)    → 500 internal_server_error

    Internal details (stack traces, SQL) are logged, never returned.
    """

    @app.exception_handler(VibeError)
    async def handle_vibe_error(request: Request, exc: VibeError):
        rid = _request_id(request)
        headers = {}
        message = exc.message
        details: Optional[Dict[str, Any]] = exc.context

        if isinstance(exc, DatabaseError):
            logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
            message = "An internal error occurred. Please try again later."
            details = None
        elif exc.status_code >= 500:
            logger.error("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, message, rid, details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        logger.info("[%s] Request validation failed on %s", rid, request.url.path)
        return JSONResponse(
            status_code=422,
            content=error_body(
                "request_validation_error",
                "The request body or parameters are invalid.",
                rid,
                jsonable_encoder(exc.errors()),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = "not_found" if exc.status_code == 404 else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(error, str(exc.detail), _request_id(request)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                rid,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Vibe Social Network API",
        description=(
            "Backend for the Vibe social network: accounts, profiles, a news feed "
            "with likes and comments, a second-hand marketplace and video rooms."
        ),
        version=__version__,
        docs_url="/swagger",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(marketplace.router)
    app.include_router(video.router)

    static_dir = Path(settings.static_root)
    if static_dir.is_dir():
        app.mount("/public", StaticFiles(directory=static_dir), name="public")
    else:
        logger.debug("Static directory %s not found; /public is not mounted", static_dir)

    return app


app = create_app()
