"""API middleware package."""

from learnguard.api.middleware.error_handler import APIError, NotFoundError, setup_exception_handlers
from learnguard.api.middleware.logging import RequestLoggingMiddleware, setup_logging

__all__ = [
    "APIError",
    "NotFoundError",
    "RequestLoggingMiddleware",
    "setup_exception_handlers",
    "setup_logging",
]
