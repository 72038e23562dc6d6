"""
Blog Admin API

File-backed FastAPI backend for the blog's browser editor: posts live as
Markdown files with frontmatter, uploads as content-addressed images.
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_admin.config import get_settings
from blog_admin.errors import AdminError
from blog_admin.middleware import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from blog_admin.routers import media, posts

logger = logging.getLogger(__name__)

settings = get_settings()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"
VERSION = "0.1.0"


def configure_logging(level: str) -> None:
    """Send application logs to stderr with the current request ID."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIDLogFilter) for f in handler.filters):
            handler.addFilter(RequestIDLogFilter())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    configure_logging(get_settings().log_level)
    logger.info("Serving posts from %s", get_settings().posts_path)
    yield


app = FastAPI(
    title="Blog Admin API",
    description="Markdown-file CMS backend for the blog editor",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

# Request ID (added last, so it is the outermost middleware)
app.add_middleware(RequestIDMiddleware)

# Routers
app.include_router(posts.router, prefix=settings.api_prefix)
app.include_router(media.router, prefix=settings.api_prefix)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


@app.exception_handler(AdminError)
async def admin_error_handler(request: Request, exc: AdminError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning(
            "%s %s rejected (%d): %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location + ': ' if location else ''}{first.get('msg', '')}"
    else:
        message = "Invalid request"
    logger.warning("%s %s: %s", request.method, request.url.path, message)
    return _error_response(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, f"Internal server error: {exc}")


def _check_config() -> str:
    """Verify the project root exists. Returns 'ok' or 'fail'."""
    return "ok" if get_settings().project_root.is_dir() else "fail"


def _check_storage() -> str:
    """Verify the content directory (or its nearest existing parent) is writable."""
    path = get_settings().posts_path
    while not path.exists() and path != path.parent:
        path = path.parent
    return "ok" if os.access(path, os.W_OK) else "fail"


def _run_health_checks() -> dict[str, Any]:
    checks = {"config": _check_config(), "storage": _check_storage()}
    failed = [k for k, v in checks.items() if v != "ok"]
    if failed:
        logger.warning("Health check degraded, failed: %s", ", ".join(failed))
    return {
        "status": "degraded" if failed else "ok",
        "service": "blog-admin-api",
        "version": VERSION,
        "checks": checks,
    }


@app.get(f"{settings.api_prefix}/health")
async def health_check() -> JSONResponse:
    """Health check verifying the content directory is usable."""
    return JSONResponse(content=_run_health_checks())
