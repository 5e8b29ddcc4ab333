"""Campus Functions FastAPI application.

Serves the platform's server-side functions (account registration and
deletion, payment initialization and verification) under
``/functions/v1``.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campus_api.config import settings, validate_service_credentials
from campus_api.database import close_database
from campus_api.logging_config import get_logger, setup_logging
from campus_api.middleware import CorrelationIdMiddleware
from campus_api.routers import accounts, health, payments

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Migrations are applied by `campus-migrate` before the server starts
    validate_service_credentials()
    logger.info("Campus Functions API started")

    yield

    logger.info("Shutting down Campus Functions API...")
    await close_database()
    logger.info("Campus Functions API shutdown complete")


app = FastAPI(
    title="Campus Functions API",
    description="Account lifecycle and payment functions for the campus marketplace",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies get the functions' ``{"error": ...}`` shape and a 400."""
    logger.info("Rejected malformed request body", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


# Middleware (order matters: first added = last executed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(CorrelationIdMiddleware)

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(payments.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "Campus Functions API",
        "version": "0.1.0",
        "docs": "/docs",
    }
