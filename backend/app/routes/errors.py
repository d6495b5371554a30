"""Translation of unexpected route failures into JSON error responses."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

# Lower-cased substrings that identify a lost or refused database connection.
CONNECTION_ERROR_MARKERS = (
    "econnrefused",
    "connect",
    "timeout",
    "timed out",
    "terminating connection",
    "server closed the connection",
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def is_connection_error(exc: BaseException) -> bool:
    """Return whether ``exc`` describes a database connectivity failure."""

    message = str(exc).lower()
    return any(marker in message for marker in CONNECTION_ERROR_MARKERS)


def failure_response(exc: Exception, *, logger: logging.Logger, event: str, **context: Any) -> JSONResponse:
    """Log ``exc`` with structured context and map it to a 503 or 500 response."""

    connection_failure = is_connection_error(exc)
    logger.exception(
        "%s connection_failure=%s context=%s",
        event,
        connection_failure,
        context,
        extra={"event": event, "connection_failure": connection_failure, **context},
    )
    if connection_failure:
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Service temporarily unavailable")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
