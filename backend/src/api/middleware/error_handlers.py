"""FastAPI exception handlers producing the ``{"error", "message", "detail"}`` body."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...services.profiles import GENERIC_FAILURE_MESSAGE

logger = logging.getLogger(__name__)

# Framework-raised errors carry a plain string detail; map them to stable codes
ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def error_body(error: str, message: str, detail: Optional[Any] = None) -> dict:
    return {"error": error, "message": message, "detail": jsonable_encoder(detail)}


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            "validation_error", "Invalid request payload", {"errors": exc.errors()}
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Routes raise ``HTTPException`` with a ready-made error dict; anything the
    framework raises itself (unknown path, wrong method) has a string detail.
    """
    code = ERROR_CODES.get(exc.status_code, "http_error")
    if isinstance(exc.detail, dict):
        body = error_body(
            exc.detail.get("error", code),
            exc.detail.get("message", GENERIC_FAILURE_MESSAGE),
            exc.detail.get("detail"),
        )
    else:
        body = error_body(code, str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("internal_error", GENERIC_FAILURE_MESSAGE),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the shared exception handlers to the application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = [
    "error_body",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "internal_exception_handler",
]
