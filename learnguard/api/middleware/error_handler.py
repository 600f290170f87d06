"""Global exception handlers for the API.

Every error leaves the API as an ``ErrorResponse`` body. Domain exceptions
are mapped to HTTP statuses by family, so routes simply let them propagate.
"""

import logging
import traceback
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from learnguard.api.schemas.common import ErrorDetail, ErrorResponse
from learnguard.shared.config import get_settings
from learnguard.shared.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    FeatureDisabledError,
    InvalidStateError,
    LearnGuardException,
    ResourceNotFoundError,
    ValidationError as DomainValidationError,
)

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Error raised by route code itself rather than the domain layer."""

    def __init__(
        self,
        message: str,
        error_code: str = "API_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(APIError):
    """A resource that the route looked up directly does not exist."""

    def __init__(self, resource: str, identifier: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} for '{identifier}' not found"
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "identifier": identifier},
        )


# (status code, error code) per domain exception family, most specific first
DOMAIN_STATUS: list[tuple[type[LearnGuardException], int, str]] = [
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (InvalidStateError, status.HTTP_409_CONFLICT, "CONFLICT"),
    (DomainValidationError, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR"),
    (FeatureDisabledError, status.HTTP_403_FORBIDDEN, "FEATURE_DISABLED"),
    (ExternalServiceError, status.HTTP_503_SERVICE_UNAVAILABLE, "SERVICE_UNAVAILABLE"),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "CONFIGURATION_ERROR"),
]


def domain_status(exc: LearnGuardException) -> tuple[int, str]:
    """Map a domain exception to its HTTP status and error code."""
    for exc_type, status_code, error_code in DOMAIN_STATUS:
        if isinstance(exc, exc_type):
            return status_code, error_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "DOMAIN_ERROR"


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the JSON error response for a request.

    The request id set by the logging middleware is reused so clients can
    quote it; requests that bypassed the middleware get a fresh one.
    """
    request_id = getattr(request.state, "request_id", None) or str(uuid4())
    body = ErrorResponse(
        request_id=request_id,
        error=ErrorDetail(code=error_code, message=message, details=details or {}),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the handlers on ``app``."""
    settings = get_settings()

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        logger.warning(f"API Error: {exc.error_code} - {exc.message} ({request.url.path})")
        return error_response(request, exc.status_code, exc.error_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {
                "field": " -> ".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        logger.warning(f"Validation Error: {len(errors)} errors ({request.url.path})")
        return error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": errors},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Invalid values that got past the schemas (negative counters, progress past total)."""
        logger.warning(f"ValueError: {exc} ({request.url.path})")
        return error_response(request, status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", str(exc))

    @app.exception_handler(LearnGuardException)
    async def domain_exception_handler(
        request: Request, exc: LearnGuardException
    ) -> JSONResponse:
        status_code, error_code = domain_status(exc)
        logger.warning(
            f"Domain Exception: {exc.__class__.__name__} - {exc.message}",
            extra={"status_code": status_code, "path": request.url.path},
        )
        return error_response(request, status_code, error_code, exc.message, exc.details)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        if settings.is_development:
            logger.error(
                f"Unhandled Exception: {type(exc).__name__}: {exc}\n{traceback.format_exc()}"
            )
        else:
            logger.error(f"Unhandled Exception: {type(exc).__name__} ({request.url.path})")

        # Internal details only leak in development
        message = str(exc) if settings.is_development else "Internal server error"
        return error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message
        )
