"""Main FastAPI application."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from customer_accounts.api import customers, errors, health, metrics
from customer_accounts.core import settings, setup_logging
from customer_accounts.core.logging import bind, get_logger
from customer_accounts.core.metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_PROGRESS,
    HTTP_REQUESTS_TOTAL,
    endpoint_label,
    set_app_info,
)
from customer_accounts.db import create_tables

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables for local development; migrations own the schema elsewhere."""
    if settings.environment.lower() == "development" and not settings.testing:
        try:
            create_tables()
        except Exception as exc:  # pragma: no cover - best effort
            logger.warning("Skipping table creation (database unavailable): %s", exc)
    logger.info(
        "Customer API started",
        extra={"environment": settings.environment, "version": settings.api_version},
    )
    yield


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    lifespan=lifespan,
)

set_app_info(version=settings.api_version, environment=settings.environment)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def prometheus_metrics_middleware(request: Request, call_next):
    """Collect Prometheus metrics for all HTTP requests."""
    if request.url.path == "/metrics":
        return await call_next(request)

    method = request.method
    endpoint = endpoint_label(request.app, request.scope)

    HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
    start_time = time.perf_counter()
    status_code = "500"

    try:
        response = await call_next(request)
        status_code = str(response.status_code)
    finally:
        duration = time.perf_counter() - start_time
        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, endpoint=endpoint).observe(duration)
        HTTP_REQUESTS_TOTAL.labels(method=method, endpoint=endpoint, status_code=status_code).inc()

    return response


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log every request with client address and user agent."""
    log = bind(
        logger,
        {
            "method": request.method,
            "path": request.url.path,
            "ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
        },
    )
    log.info("%s %s", request.method, request.url.path)
    response = await call_next(request)
    log.debug(
        "Completed %s %s",
        request.method,
        request.url.path,
        extra={"status_code": response.status_code},
    )
    return response


app.include_router(metrics.router)
app.include_router(health.router)
app.include_router(customers.router, prefix=settings.api_prefix)

errors.register_exception_handlers(app)


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "message": settings.api_title,
        "version": settings.api_version,
        "docs": "/docs",
    }
