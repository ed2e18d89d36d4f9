"""Error taxonomy and JSON error rendering."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base error carrying a machine-readable code and HTTP status."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LedgerError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UnauthorizedError(LedgerError):
    """Missing or invalid credential. The message is for logs only."""

    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(LedgerError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Entry not found or access denied"


class NotFoundError(LedgerError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PreconditionFailedError(LedgerError):
    code = "PRECONDITION_FAILED"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Precondition failed"


class AIParsingError(LedgerError):
    code = "AI_PARSING_ERROR"
    default_message = "AI returned invalid JSON"


class AIValidationError(LedgerError):
    code = "AI_VALIDATION_ERROR"
    default_message = "AI response is missing required fields"


class AIProviderError(LedgerError):
    code = "AI_PROVIDER_ERROR"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "AI provider request failed"


class StorageError(LedgerError):
    code = "STORAGE_ERROR"
    default_message = "Object storage request failed"


class TranscriptError(LedgerError):
    code = "TRANSCRIPT_ERROR"
    default_message = "Failed to fetch transcript"


class DatabaseError(LedgerError):
    code = "DATABASE_ERROR"
    default_message = "Database error"


class GuestConfigError(LedgerError):
    code = "GUEST_CONFIG"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Guest mode is not configured. Set GUEST_USER_ID."


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    msg = first.get("msg", "Invalid value")
    return f"{loc}: {msg}" if loc else msg


async def _ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if isinstance(exc, UnauthorizedError):
        # Never echo the internal reason on 401
        logger.info("Unauthorized request to %s: %s", request.url.path, exc.message)
        return error_response(exc.status_code, exc.code, "Unauthorized")
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return error_response(exc.status_code, exc.code, exc.message)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST, ValidationError.code, _first_validation_message(exc)
    )


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s", request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, DatabaseError.code, DatabaseError.default_message
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, LedgerError.code, LedgerError.default_message
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, _ledger_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
