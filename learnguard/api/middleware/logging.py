"""Request logging middleware and logging setup."""

import logging
import re
import time
from typing import Any
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from learnguard.shared.config import get_settings

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied request ids are only trusted when they match this
_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-_]{1,64}$")
_LEARNER_PATH = re.compile(r"^/users/(?P<user_id>[0-9a-fA-F-]{36})(/|$)")


def resolve_request_id(header_value: str | None) -> str:
    """Reuse a well-formed client request id, otherwise mint one."""
    if header_value and _REQUEST_ID_PATTERN.match(header_value):
        return header_value
    return str(uuid4())


def request_log_context(request: Request, request_id: str) -> dict[str, Any]:
    """Structured fields attached to every log line for a request.

    Per-learner routes also carry the learner id so one learner's analysis
    cycles can be followed through the logs.
    """
    context: dict[str, Any] = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
    }
    match = _LEARNER_PATH.match(request.url.path)
    if match:
        context["user_id"] = match.group("user_id")
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, echo it back and log the outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        context = request_log_context(request, request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"{request.method} {request.url.path} raised {type(exc).__name__}",
                extra={**context, "duration_ms": _elapsed_ms(started)},
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": _elapsed_ms(started),
            },
        )
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def setup_logging() -> None:
    """Configure root logging from settings.

    JSON lines in production, human-readable lines otherwise. The scheduler
    logs every job run, so it is kept at INFO only in development.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.is_production:
        log_format = (
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(level=level, format=log_format, datefmt="%Y-%m-%dT%H:%M:%S%z")

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(
        logging.INFO if settings.is_development else logging.WARNING
    )
