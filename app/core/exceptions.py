"""
Application exceptions and their HTTP rendering
"""
from typing import List, Optional, Dict
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto a client-facing response"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_content(self) -> Dict:
        return {"message": self.message}


class ValidationFailed(AppError):
    """Malformed or missing input, detected before touching the store"""

    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}], message)

    def to_content(self) -> Dict:
        return {"message": self.message, "errors": self.errors}


class NotFoundOrDenied(AppError):
    """
    The target does not exist or the caller may not act on it.

    Both cases produce the same 404 so callers cannot probe for rows
    they are not allowed to see.
    """

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request conflicts with current state"


class InvalidCredentials(AppError):
    """Unknown email or wrong password on login"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class AuthenticationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No token, authorization denied"


class AdminRequired(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied. Admin only."


def _format_validation_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({
            "field": ".".join(location),
            "message": error.get("msg", "Invalid value"),
        })
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the application"""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        headers = None
        if isinstance(exc, AuthenticationFailed):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_content(),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "message": "Validation failed",
                "errors": _format_validation_errors(exc),
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Server error"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Server error"},
        )
