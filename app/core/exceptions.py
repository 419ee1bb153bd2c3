"""
Domain error taxonomy and global exception handlers.

Services raise the ``ServiceError`` subclasses below; the handlers turn
them into JSON envelopes so clients can branch on ``code`` without ever
seeing a stack trace.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class ServiceError(Exception):
    """Base class for errors surfaced to the transport layer as-is."""

    status_code: int = 400
    code: str = "SERVICE_ERROR"
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(ServiceError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_detail = "Authentication required"


class InvalidToken(ServiceError):
    status_code = 401
    code = "INVALID_TOKEN"
    default_detail = "Could not validate credentials"


class TokenExpired(InvalidToken):
    code = "TOKEN_EXPIRED"
    default_detail = "Token has expired"


class Forbidden(ServiceError):
    status_code = 403
    code = "FORBIDDEN"
    default_detail = "Insufficient role for this operation"


class NotFound(ServiceError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, identifier: str, entity: str = "Record") -> None:
        self.identifier = identifier
        self.entity = entity
        super().__init__(f"{entity} {identifier} not found")


class Conflict(ServiceError):
    status_code = 409
    code = "CONFLICT"
    default_detail = "Record already exists"


class InvalidCredentials(ServiceError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_detail = "Invalid credentials"


class AccountInactive(ServiceError):
    status_code = 403
    code = "ACCOUNT_INACTIVE"
    default_detail = "Account is inactive"


class InvalidQuery(ServiceError):
    status_code = 400
    code = "INVALID_QUERY"
    default_detail = "Invalid filter or pagination input"


class StorageUnavailable(ServiceError):
    status_code = 503
    code = "STORAGE_UNAVAILABLE"
    default_detail = "Storage is unavailable"


# ── Handlers ────────────────────────────────────────────────────────
async def _service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code, "success": False},
        headers=headers,
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "code": "CONFLICT", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(ServiceError, _service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
