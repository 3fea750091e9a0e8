# src/stackit_api/main.py
"""Main entry point for the StackIt application."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from stackit_api import __version__
from stackit_api.api.v1 import (
    admin_router,
    answers_router,
    notifications_router,
    questions_router,
    users_router,
)
from stackit_api.api.v1.dependencies import general_rate_limit
from stackit_api.core.errors import StackItError, ValidationError
from stackit_api.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Question and answer platform API",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
_api_dependencies = [Depends(general_rate_limit)]
app.include_router(questions_router, prefix="/api/v1", dependencies=_api_dependencies)
app.include_router(answers_router, prefix="/api/v1", dependencies=_api_dependencies)
app.include_router(notifications_router, prefix="/api/v1", dependencies=_api_dependencies)
app.include_router(users_router, prefix="/api/v1", dependencies=_api_dependencies)
app.include_router(admin_router, prefix="/api/v1", dependencies=_api_dependencies)


def _error_body(kind: str, message: str, **extra: object) -> dict[str, object]:
    return {"error": kind, "message": message, **extra}


@app.exception_handler(StackItError)
async def handle_domain_error(request: Request, exc: StackItError) -> JSONResponse:
    """Render domain errors as ``{"error": kind, "message": text}``."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.kind, exc.message))


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as 400 validation errors with per-field details."""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=_error_body(ValidationError.kind, ValidationError.default_message, details=details),
    )


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their internals unless debugging."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.debug else "Something went wrong"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal", message),
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "description": "Question and answer platform API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stackit_api.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
