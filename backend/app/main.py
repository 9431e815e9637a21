"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.api.dependencies import NotAuthenticatedError
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.posts import router as posts_router
from backend.app.core.logging import (
    EVENT_APP_START,
    EVENT_CONFIG_LOADED,
    EVENT_REQUEST_VALIDATION_FAILED,
    log_event,
    setup_logging,
)
from backend.app.core.settings import settings
from backend.app.db.engine import init_db
from backend.app.db.migrations import run_migrations

setup_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info(EVENT_APP_START)
    logger.info("%s: %s", EVENT_CONFIG_LOADED, settings.safe_dump())
    init_db()
    run_migrations()
    logger.info("Posts API ready")
    yield
    logger.info("Posts API shutting down")


app = FastAPI(
    title="Posts API",
    version="0.1.0",
    description="Multi-user post API with author-only mutation.",
    lifespan=lifespan,
)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(
    _request: Request, exc: NotAuthenticatedError,
) -> JSONResponse:
    return JSONResponse(status_code=401, content={"message": str(exc)})


def _describe_validation_error(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    return f"{'.'.join(loc) or 'body'}: {error.get('msg', 'Invalid value')}"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed request bodies as ``400 {"error": ...}``."""
    detail = ", ".join(_describe_validation_error(e) for e in exc.errors())
    log_event(
        logger, "warning", EVENT_REQUEST_VALIDATION_FAILED,
        method=request.method, path=request.url.path, errors=len(exc.errors()),
    )
    return JSONResponse(status_code=400, content={"error": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler: log details, return safe generic message."""
    from backend.app.core.errors import normalize_unknown_error

    error = normalize_unknown_error(exc, operation=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=error.http_status,
        content={"detail": error.user_message},
    )


app.include_router(health_router, tags=["health"])
app.include_router(posts_router, tags=["posts"])
