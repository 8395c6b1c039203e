"""Darija Lessons API — FastAPI application entry point.

Features:
- Lifespan context manager: builds the lesson store on startup, disposes the
  DB engine on shutdown when the database backend is used
- Structured exception handlers for all domain exceptions
- Request/response logging middleware with request-ID tracing
- /health endpoint reporting the lesson store status
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError

from darija_lessons.config import get_settings
from darija_lessons.exceptions import (
    DatabaseConnectionError,
    LessonNotFoundError,
    QuizSessionNotFoundError,
)
from darija_lessons.exceptions import ValidationError as DomainValidationError

# ---------------------------------------------------------------------------
# Logging setup  (must happen before routers are imported)
# ---------------------------------------------------------------------------

_settings = get_settings()
logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Router and service imports
# ---------------------------------------------------------------------------

from darija_lessons.api import activities as _activities_module  # noqa: E402
from darija_lessons.api import lessons as _lessons_module  # noqa: E402
from darija_lessons.api import quiz as _quiz_module  # noqa: E402
from darija_lessons.schemas.lesson import HealthResponse  # noqa: E402
from darija_lessons.services.ids import utcnow  # noqa: E402
from darija_lessons.services.lesson_store import (  # noqa: E402
    InMemoryLessonStore,
    SqlLessonStore,
)
from darija_lessons.services.quiz import QuizSessionRegistry  # noqa: E402

# ---------------------------------------------------------------------------
# Lifespan context manager
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    Startup:
    1. Build the lesson store for ``LESSON_STORE_BACKEND`` and store it on
       ``app.state.lesson_store``.
    2. For the database backend, check connectivity (non-fatal).
    3. Create the quiz session registry.

    Shutdown:
    1. Dispose the SQLAlchemy connection pool (database backend only).
    """
    logger.info("Darija Lessons API — starting up (v%s)", _settings.app_version)

    if _settings.lesson_store_backend == "database":
        from darija_lessons.database import AsyncSessionLocal, check_db_connection

        app.state.lesson_store = SqlLessonStore(AsyncSessionLocal)
        db_health = await check_db_connection()
        if db_health["status"] == "ok":
            logger.info("Database: OK")
        else:
            logger.warning("Database: DEGRADED — %s", db_health.get("detail", "unknown"))
    else:
        app.state.lesson_store = InMemoryLessonStore()
        logger.info("Lesson store: in-memory")

    app.state.quiz_sessions = QuizSessionRegistry(
        max_sessions=_settings.quiz_max_sessions
    )
    logger.info("Startup complete — serving requests")
    yield

    logger.info("Darija Lessons API — shutting down")
    if _settings.lesson_store_backend == "database":
        from darija_lessons.database import dispose_engine

        try:
            await dispose_engine()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error during engine disposal: %s", exc)
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Darija Lessons API",
    description=(
        "Author multi-step Moroccan Darija lessons from typed activities and "
        "play them back as guided, step-by-step quizzes with immediate feedback."
    ),
    version=_settings.app_version,
    debug=_settings.debug,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "health", "description": "System health and readiness checks."},
        {"name": "lessons", "description": "Saved lessons (list, fetch, upsert)."},
        {
            "name": "activities",
            "description": "Activity validation and fill-in-the-blanks tokenizing.",
        },
        {"name": "quiz", "description": "Learner quiz sessions over saved lessons."},
    ],
)

# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # restrict in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next: Any) -> Response:
    """Log every HTTP request with method, path, status, and duration.

    A short UUID-derived ``request_id`` is attached to each log line and
    returned as the ``X-Request-ID`` response header.
    """
    request_id = str(uuid.uuid4())[:8]
    t0 = time.monotonic()
    logger.info("[%s] → %s %s", request_id, request.method, request.url.path)

    try:
        response: Response = await call_next(request)
    except Exception as exc:
        elapsed = (time.monotonic() - t0) * 1000
        logger.error(
            "[%s] ✗ %s %s — unhandled after %.1f ms: %s",
            request_id,
            request.method,
            request.url.path,
            elapsed,
            exc,
        )
        raise

    elapsed = (time.monotonic() - t0) * 1000
    logger.info(
        "[%s] ← %s %s — %d (%.1f ms)",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Structured exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(LessonNotFoundError)
async def lesson_not_found_handler(
    request: Request, exc: LessonNotFoundError
) -> JSONResponse:
    """404 for unknown lessons."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "lesson_not_found",
            "message": str(exc),
            "lesson_id": exc.lesson_id,
        },
    )


@app.exception_handler(QuizSessionNotFoundError)
async def quiz_session_not_found_handler(
    request: Request, exc: QuizSessionNotFoundError
) -> JSONResponse:
    """404 for unknown quiz sessions."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "quiz_session_not_found",
            "message": str(exc),
            "session_id": exc.session_id,
        },
    )


@app.exception_handler(DomainValidationError)
async def validation_error_handler(
    request: Request, exc: DomainValidationError
) -> JSONResponse:
    """422 for activity validation failures."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_failed",
            "message": str(exc),
            "errors": exc.errors,
        },
    )


@app.exception_handler(SchemaValidationError)
async def schema_validation_error_handler(
    request: Request, exc: SchemaValidationError
) -> JSONResponse:
    """422 for documents that do not parse (e.g. unknown activity type)."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "invalid_document",
            "message": f"{exc.error_count()} schema error(s)",
            "detail": exc.errors(include_url=False, include_context=False),
        },
    )


@app.exception_handler(DatabaseConnectionError)
async def database_connection_error_handler(
    request: Request, exc: DatabaseConnectionError
) -> JSONResponse:
    """503 for database connectivity failures."""
    logger.error("DatabaseConnectionError: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "database_unavailable", "message": str(exc)},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render FastAPI HTTPExceptions as structured JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )


# ---------------------------------------------------------------------------
# Core routes
# ---------------------------------------------------------------------------


@app.get("/", tags=["health"], summary="API root / service info")
async def root() -> dict[str, str]:
    """Return basic service metadata and navigation links."""
    return {
        "service": "Darija Lessons API",
        "version": _settings.app_version,
        "documentation": "/docs",
        "health": "/health",
        "openapi": "/openapi.json",
    }


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    summary="System health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Report lesson store status; ``degraded`` when the database is unreachable."""
    backend = _settings.lesson_store_backend
    store_status = "ok"
    if getattr(request.app.state, "lesson_store", None) is None:
        store_status = "not_initialised"
    elif backend == "database":
        from darija_lessons.database import check_db_connection

        store_status = (await check_db_connection())["status"]

    return HealthResponse(
        status="ok" if store_status == "ok" else "degraded",
        timestamp=utcnow(),
        version=_settings.app_version,
        lesson_store={"backend": backend, "status": store_status},
    )


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------

app.include_router(_lessons_module.router)
app.include_router(_activities_module.router)
app.include_router(_quiz_module.router)


# ---------------------------------------------------------------------------
# Development entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "darija_lessons.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=_settings.log_level.lower(),
    )
