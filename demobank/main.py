"""
Demo Bank Service

A FastAPI-based demo banking backend: session login, account listing and
peer-to-peer transfers with history, all held in process memory.

State:
------
Users, accounts and the transfer ledger live in memory and reset on every
restart. The transfer engine serializes transfers under a single lock so
concurrent requests cannot double-spend a balance.

Sessions:
---------
The signed-in user id is kept in a signed session cookie
(Starlette SessionMiddleware) keyed by SESSION_SECRET.
"""
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response

from demobank import __version__, metrics
from demobank.api import router
from demobank.config import settings
from demobank.errors import BankError, InvalidInput
from demobank.logging import (
    clear_request_context,
    configure_logging,
    generate_request_id,
    get_logger,
    set_request_context,
)

# Configure structured logging
configure_logging(settings.log_level)
logger = get_logger(__name__)

START_TIME = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "service_starting",
        service_name=settings.service_name,
        port=settings.port,
        seed_demo_data=settings.seed_demo_data,
    )

    yield

    logger.info("service_stopping", service_name=settings.service_name)


app = FastAPI(
    title="Demo Bank",
    description="Minimal demo banking backend with in-memory accounts and transfers",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """
    Middleware for request tracing, logging, and metrics.

    Sets up request context with:
    - request_id: Unique identifier for tracing
    - Timing for duration_ms calculation
    - Prometheus metrics collection
    """
    method = request.method
    path = request.url.path

    # Skip logging/metrics for health and metrics endpoints
    if path in ("/health", "/metrics"):
        return await call_next(request)

    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    set_request_context(request_id)
    request.state.request_id = request_id

    start_time = time.perf_counter()

    logger.info("request_received", method=method, path=path)

    try:
        response = await call_next(request)

        duration_seconds = time.perf_counter() - start_time

        logger.info(
            "request_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=round(duration_seconds * 1000, 2),
        )
        metrics.record_http_request(method, path, response.status_code, duration_seconds)

        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        duration_seconds = time.perf_counter() - start_time

        logger.error(
            "request_failed",
            method=method,
            path=path,
            duration_ms=round(duration_seconds * 1000, 2),
            error=str(e),
        )
        metrics.record_http_request(method, path, 500, duration_seconds)
        raise

    finally:
        clear_request_context()


def _error_response(request: Request, exc: BankError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
        headers={"X-Request-ID": request_id},
    )


@app.exception_handler(BankError)
async def bank_error_handler(request: Request, exc: BankError):
    """Render domain errors as {error, code} with their HTTP status."""
    logger.info(
        "request_rejected",
        status_code=exc.status_code,
        code=exc.code,
        detail=exc.message,
    )
    return _error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as INVALID_INPUT, not 422."""
    logger.info("request_invalid", errors=len(exc.errors()))
    return _error_response(request, InvalidInput("Invalid request body"))


app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": settings.service_name,
        "uptime": round(time.monotonic() - START_TIME, 3),
    }


@app.get("/metrics")
async def metrics_endpoint():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Static UI; mounted last so API routes take precedence
if Path(settings.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
