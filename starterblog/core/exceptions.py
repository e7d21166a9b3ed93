"""
Application exceptions and the FastAPI handlers that render them.

Services raise these instead of HTTPException so they stay usable outside a
request. Every error is rendered as ``{"message": ...}`` with its status code.
"""

import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("app")


class StarterBlogException(Exception):
    """Base exception for the StarterBlog API."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message}


class ValidationError(StarterBlogException):
    """Missing or malformed input, oversize upload, short description."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(StarterBlogException):
    """Raised when an email address is already taken."""

    status_code = status.HTTP_409_CONFLICT


class AuthError(StarterBlogException):
    """Bad credentials or an invalid/expired session token."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(StarterBlogException):
    """Raised when someone other than the creator tries to mutate a post."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(StarterBlogException):
    status_code = status.HTTP_404_NOT_FOUND


class UpdateFailedError(StarterBlogException):
    """Raised when an update did not take effect."""

    status_code = status.HTTP_400_BAD_REQUEST


class StorageError(StarterBlogException):
    """Raised when an uploaded file cannot be written or removed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Exception Handlers

async def starterblog_exception_handler(request: Request, exc: StarterBlogException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/form validation errors in the common shape."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": message},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Not Found - {request.url.path}"
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "An unknown error occurred"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarterBlogException, starterblog_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
