"""Error Handlers — render every failure as the Digipod error envelope.

Envelope (all handlers):
    {"error": {code, message, category, severity, retryable, timestamp, ...}}
    - DigipodError adds context.resource_id and context.attempt (the attempt on
      which a bounded retry gave up, e.g. phase advance after 3 lost races)
    - RequestValidationError adds details[] with field/message/type, status 400
    - Anything else is 500 INTERNAL_ERROR with no exception text

Invariants:
    - retryable is true only for ConcurrencyError and StoreUnavailableError
      (never CorruptRecordError): clients may repeat exactly those calls
    - 5xx domain errors log at ERROR, 4xx at WARNING; logs carry error_code and path
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from app.core.errors import DigipodError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DigipodError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


async def _domain_error_handler(request: Request, exc: DigipodError):
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "attempt": exc.context.attempt,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Request validation failed: {len(exc.errors())} error(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    body = _envelope(
        "VALIDATION_ERROR", "Invalid request data",
        ErrorCategory.VALIDATION, ErrorSeverity.WARNING,
    )
    body["error"]["details"] = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
) -> dict:
    """Envelope for failures that are not DigipodError (never retryable)."""
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            "retryable": False,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }
