"""
Error taxonomy and the handlers that render it.

Every failure leaves the API as ``{"success": false, "message": ...}``.
Domain code raises ``AppError`` subclasses; FastAPI's own ``HTTPException``
and request validation errors are rendered in the same envelope.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Access token is missing"


class InvalidToken(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Invalid or expired token"


class UserNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class CourseNotFound(NotFound):
    message = "Course not found"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


class ValidationFailed(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Validation failed"


class EnrollmentRejected(AppError):
    """Base for business-rule violations on an enrollment write."""

    status_code = status.HTTP_403_FORBIDDEN


class CourseFull(EnrollmentRejected):
    message = "Course Full"


class CourseInactive(EnrollmentRejected):
    message = "Course is not accepting new enrollments"


class DuplicateEnrollment(EnrollmentRejected):
    status_code = status.HTTP_409_CONFLICT
    message = "Already enrolled in this course"


def _envelope(status_code: int, message: str, **extra) -> JSONResponse:
    body = {"success": False, "message": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _envelope(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    response = _envelope(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return _envelope(
        status.HTTP_422_UNPROCESSABLE_ENTITY, ValidationFailed.message, errors=errors
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, AppError.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
