"""Translation of errors into the uniform error envelope.

Every failure raised while serving a request ends up here: domain errors from
the service, request-shape errors from FastAPI, framework HTTP errors such as
unmatched routes, and anything unexpected.
"""

from __future__ import annotations

import traceback
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from customer_accounts.core import settings
from customer_accounts.core.logging import bind, get_logger
from customer_accounts.domain.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from customer_accounts.schemas.envelope import ErrorBody, ErrorEnvelope, FieldErrorDetail

logger = get_logger(__name__)

VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
CONFLICT = "CONFLICT"
INTERNAL_ERROR = "INTERNAL_ERROR"

UNEXPECTED_MESSAGE = "An unexpected error occurred"


def to_http(exc: DomainError) -> tuple[int, str]:
    """Map a domain error to ``(status_code, error_code)``."""
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND, NOT_FOUND
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT, CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR


def code_for_status(status_code: int) -> str:
    """Envelope code for a bare HTTP status (``405`` -> ``METHOD_NOT_ALLOWED``)."""
    if status_code == status.HTTP_400_BAD_REQUEST:
        return VALIDATION_ERROR
    if status_code >= 500:
        return INTERNAL_ERROR
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "HTTP_ERROR"


def error_envelope(
    code: str,
    message: str,
    exc: BaseException | None = None,
    details: list[FieldErrorDetail] | None = None,
) -> dict:
    """Build the error body; the stack is only exposed outside production."""
    stack = None
    if exc is not None and not settings.is_production:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    envelope = ErrorEnvelope(
        error=ErrorBody(code=code, message=message, details=details, stack=stack)
    )
    return envelope.model_dump(exclude_none=True)


def _log(request: Request, status_code: int, code: str, message: str, exc: BaseException) -> None:
    log = bind(
        logger,
        {"method": request.method, "path": request.url.path, "status_code": status_code, "error_code": code},
    )
    if status_code >= 500:
        log.error("Request error: %s", message, exc_info=(type(exc), exc, exc.__traceback__))
    else:
        log.warning("Request failed: %s", message)


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code, code = to_http(exc)
    details = None
    if isinstance(exc, ValidationError) and exc.violations:
        details = [FieldErrorDetail(field=v.field, message=v.message) for v in exc.violations]
    _log(request, status_code, code, exc.message, exc)
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(code, exc.message, exc, details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            location = []
        else:
            location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            FieldErrorDetail(field=".".join(location) or "body", message=error.get("msg", ""))
        )
    message = ", ".join(f"{d.field}: {d.message}" for d in details) or "Validation failed"
    _log(request, status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR, message, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(VALIDATION_ERROR, message, exc, details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = code_for_status(exc.status_code)
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail in (None, "Not Found"):
        message = "Route not found"
    else:
        message = str(exc.detail)
    _log(request, exc.status_code, code, message, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(code, message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    message = UNEXPECTED_MESSAGE if settings.is_production else str(exc) or UNEXPECTED_MESSAGE
    _log(request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, message, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(INTERNAL_ERROR, message, exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Route every error class through the envelope formatter."""
    app.add_exception_handler(DomainError, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
