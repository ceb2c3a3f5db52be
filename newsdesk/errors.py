"""
Application error taxonomy and the FastAPI handlers that render it.

Services raise these exceptions instead of returning sentinel values; the
handlers installed by ``register_exception_handlers`` translate them into
JSON responses of the form ``{"message": ...}`` (plus ``"error"`` for
internal failures).
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that carry their own HTTP status."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, error: str | None = None) -> None:
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Authentication required"


class Unauthorized(AppError):
    status_code = 403
    default_message = "Not authorized to perform this action"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"


def _render(exc: AppError) -> JSONResponse:
    body: dict = {"message": exc.message}
    if exc.error is not None:
        body["error"] = exc.error
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.error)
    return _render(exc)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return _render(ConflictError())


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _render(InternalError("Database error", error=str(exc)))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _render(InternalError(error=str(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    # Served by Starlette's outermost error middleware, which re-raises after responding.
    app.add_exception_handler(Exception, unhandled_error_handler)
