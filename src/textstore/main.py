# src/textstore/main.py
"""Main entry point for the Textstore application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from textstore import __version__
from textstore.api.v1 import auth_router, records_router, system_router
from textstore.core.errors import (
    AddressInUse,
    AlreadyInitialized,
    ContentTooLong,
    CounterOverflow,
    InvalidCounterRecord,
    InvalidText,
    NotInitialized,
    RecordNotFound,
    RecordStoreError,
    TitleTooLong,
    Unauthorized,
)
from textstore.core.settings import settings
from textstore.db.session import create_tables

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

# Checked in order; subclasses must precede their bases.
ERROR_STATUS: tuple[tuple[type[RecordStoreError], int], ...] = (
    (NotInitialized, status.HTTP_404_NOT_FOUND),
    (RecordNotFound, status.HTTP_404_NOT_FOUND),
    (AlreadyInitialized, status.HTTP_409_CONFLICT),
    (AddressInUse, status.HTTP_409_CONFLICT),
    (InvalidCounterRecord, status.HTTP_409_CONFLICT),
    (CounterOverflow, status.HTTP_409_CONFLICT),
    (TitleTooLong, status.HTTP_400_BAD_REQUEST),
    (ContentTooLong, status.HTTP_400_BAD_REQUEST),
    (InvalidText, status.HTTP_400_BAD_REQUEST),
    (Unauthorized, status.HTTP_403_FORBIDDEN),
)


def status_for(error: RecordStoreError) -> int:
    """Return the HTTP status code reported for a record store error."""
    for error_type, code in ERROR_STATUS:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# Initialize FastAPI app
app = FastAPI(
    title="Textstore API",
    description="Text records at derived, collision-free addresses",
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
app.include_router(auth_router, prefix="/api/v1")
app.include_router(records_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.exception_handler(RecordStoreError)
async def record_store_error_handler(request: Request, exc: RecordStoreError) -> JSONResponse:
    """Translate record store errors into JSON responses."""
    code = status_for(exc)
    if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Unhandled record store error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=code,
        content={"detail": exc.message, "code": exc.code, "number": exc.number},
    )


@app.on_event("startup")
async def on_startup() -> None:
    create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Textstore API",
        "version": __version__,
        "description": "Text records at derived, collision-free addresses",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("textstore.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
