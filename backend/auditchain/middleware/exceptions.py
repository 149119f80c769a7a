"""Exception hierarchy and FastAPI handlers for consistent error responses.

The write path (`EventRecorder.log`) never lets these escape; they are
raised by stores, ledger clients and the read side, and the handlers turn
them into the standard error envelope for the HTTP surface.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AuditChainException(Exception):
    """Base exception for AuditChain errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class LogStoreError(AuditChainException):
    """The authoritative store rejected or failed an operation."""

    def __init__(self, message: str, error_code: str = "LOG_STORE_ERROR"):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code=error_code,
        )


class LedgerError(AuditChainException):
    """Base for ledger mirror failures."""

    def __init__(self, message: str, error_code: str = "LEDGER_ERROR"):
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code=error_code,
        )


class LedgerUnavailableError(LedgerError):
    """The ledger gateway could not be reached."""

    def __init__(self, message: str = "Ledger unavailable"):
        super().__init__(message=message, error_code="LEDGER_UNAVAILABLE")


class LedgerResponseError(LedgerError):
    """The ledger answered, but not with a usable receipt."""

    def __init__(self, message: str, status_code: int | None = None):
        self.ledger_status = status_code
        super().__init__(message=message, error_code="LEDGER_BAD_RESPONSE")


class InvalidFilterError(AuditChainException):
    """A query filter names an unknown field or operator."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="INVALID_FILTER",
        )


class LogNotFoundError(AuditChainException):
    def __init__(self, log_id: str):
        super().__init__(
            message=f"Log entry not found: {log_id}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="LOG_NOT_FOUND",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: dict | None = None,
) -> JSONResponse:
    """Error envelope: {"error": {"code", "message", "details"?}}."""
    error = {"code": error_code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


async def auditchain_exception_handler(request: Request, exc: AuditChainException) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.error_code, exc.message)
    return create_error_response(exc.status_code, exc.message, exc.error_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # FastAPI's HTTPException subclasses Starlette's, so one handler covers both
    if exc.status_code >= 500:
        logger.error("%s %s -> HTTP %d: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return create_error_response(exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}")


async def query_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bad query or path parameters on the read endpoints."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Invalid query parameters",
        "VALIDATION_ERROR",
        {"errors": errors},
    )


async def store_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Audit store unreachable on %s: %s", request.url.path, exc)
    return create_error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Audit store temporarily unavailable",
        "STORE_UNAVAILABLE",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s", request.url.path, exc_info=exc)
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register the error envelope for every failure the read API can hit."""
    app.add_exception_handler(AuditChainException, auditchain_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, query_validation_handler)
    app.add_exception_handler(OperationalError, store_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
