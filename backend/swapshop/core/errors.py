"""
Centralized error handling for service/API failures.
Domain errors carry an HTTP status and a machine-readable code so routes stay thin;
register_error_handlers renders them (and opaque storage failures) in one place.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500

MSG_INTERNAL_ERROR = "Internal server error"


class AppError(Exception):
    """Caller-facing error: recoverable, carries kind (code) and human message."""

    status_code = STATUS_INTERNAL_ERROR
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class BadRequestError(AppError):
    status_code = STATUS_BAD_REQUEST
    default_code = "BAD_REQUEST"


class UnauthorizedError(AppError):
    status_code = STATUS_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    status_code = STATUS_FORBIDDEN
    default_code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = STATUS_NOT_FOUND
    default_code = "NOT_FOUND"


def _error_body(code: str, message: str) -> dict:
    return {"ok": False, "error": {"code": code, "message": message}}


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.code, exc.message))


async def _storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Never leak SQL or constraint names to the client
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=STATUS_INTERNAL_ERROR,
        content=_error_body("INTERNAL_ERROR", MSG_INTERNAL_ERROR),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(SQLAlchemyError, _storage_error_handler)
