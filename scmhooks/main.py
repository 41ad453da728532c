"""FastAPI application factory with lifespan context manager and error handlers."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from scmhooks.config import settings
from scmhooks.errors import (
    InvalidSignatureError,
    MalformedPayloadError,
    PayloadTooLargeError,
    SecretResolutionError,
)
from scmhooks.logging_config import configure_logging
from scmhooks.routers import health, webhooks

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging before serving requests."""
    configure_logging(json_logs=not settings.debug, log_level=settings.log_level)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)


@app.exception_handler(InvalidSignatureError)
async def invalid_signature_handler(request: Request, exc: InvalidSignatureError) -> JSONResponse:
    """Reject unauthenticated deliveries with 401."""
    logger.warning("webhook_signature_invalid", path=request.url.path, reason=exc.reason)
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Invalid signature"},
    )


@app.exception_handler(MalformedPayloadError)
async def malformed_payload_handler(request: Request, exc: MalformedPayloadError) -> JSONResponse:
    """Reject bodies that do not fit their event type with 400."""
    logger.warning(
        "webhook_payload_malformed",
        path=request.url.path,
        field=exc.field,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Malformed payload", "field": exc.field},
    )


@app.exception_handler(SecretResolutionError)
async def secret_resolution_handler(request: Request, exc: SecretResolutionError) -> JSONResponse:
    """Report a failed secret lookup as a server-side error."""
    logger.error("webhook_secret_unresolved", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Secret resolution failed"},
    )


@app.exception_handler(PayloadTooLargeError)
async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError) -> JSONResponse:
    logger.warning("webhook_payload_too_large", path=request.url.path, limit=exc.limit)
    return JSONResponse(status_code=413, content={"detail": "Payload too large"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for any unhandled exception."""
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(health.router)
app.include_router(webhooks.router)
