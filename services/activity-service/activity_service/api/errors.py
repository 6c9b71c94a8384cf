"""Translate ingestion errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..domain.errors import (
    ActivityNotFoundError,
    DependencyError,
    InvalidUserError,
    InvalidUserRequestError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (InvalidUserError, status.HTTP_400_BAD_REQUEST),
    (InvalidUserRequestError, status.HTTP_400_BAD_REQUEST),
    (ActivityNotFoundError, status.HTTP_404_NOT_FOUND),
    (UserNotFoundError, status.HTTP_404_NOT_FOUND),
    (DependencyError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def register_exception_handlers(app: FastAPI) -> None:
    """Attach one handler per error kind plus a catch-all 500."""
    for error_type, status_code in _STATUS_BY_ERROR:
        app.add_exception_handler(error_type, _handler_for(status_code))
    app.add_exception_handler(Exception, _unhandled_error)


def _handler_for(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "internal server error"},
    )
