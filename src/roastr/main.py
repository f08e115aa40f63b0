# src/roastr/main.py
"""Main entry point for the Roastr front-end service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from roastr.api.v1 import feed_router, posts_router, profile_router, tags_router
from roastr.backend import reset_backend
from roastr.core.errors import (
    NotPermittedError,
    RoastrError,
    TransportError,
    UnauthenticatedError,
    ValidationFailedError,
)
from roastr.core.settings import settings
from roastr.schemas import ErrorResponse

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Roastr API",
    description="Share, vote on and save roasts",
    version=settings.app_version,
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
app.include_router(tags_router, prefix="/api/v1")
app.include_router(feed_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(profile_router, prefix="/api/v1")

_ERROR_STATUS: dict[type[RoastrError], int] = {
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
    NotPermittedError: status.HTTP_403_FORBIDDEN,
    ValidationFailedError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TransportError: status.HTTP_502_BAD_GATEWAY,
}


@app.exception_handler(RoastrError)
async def roastr_error_handler(request: Request, exc: RoastrError) -> JSONResponse:
    """Translate service errors into JSON responses carrying the notifications."""
    status_code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    notifier = getattr(request.state, "notifier", None)
    body = ErrorResponse(
        detail=str(exc),
        rule=getattr(exc, "rule", None),
        notifications=notifier.notifications if notifier else [],
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(level=settings.log_level.upper())
    logger.info("%s %s starting with %s backend", settings.app_name, settings.app_version, settings.backend_kind)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await reset_backend()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Roastr API",
        "version": settings.app_version,
        "description": "Share, vote on and save roasts",
        "docs": "/docs",
        "redoc": "/redoc"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("roastr.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
