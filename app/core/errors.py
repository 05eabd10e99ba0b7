"""API error type and handlers.

Every error response uses the same envelope as the success payloads:
``{"success": false, "error": "<message>"}``, optionally with a machine
``code`` and extra identifiers such as ``brandId``.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("cleverkit.errors")

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class AppError(HTTPException):
    """HTTP error with a user-facing message and optional machine code."""

    def __init__(self, status_code: int, message: str, code: str | None = None,
                 headers: dict | None = None, **extra):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code
        self.extra = extra


def error_body(message: str, code: str | None = None, **extra) -> dict:
    body = {"success": False, "error": message, "detail": message}
    if code:
        body["code"] = code
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = getattr(exc, "code", None)
    extra = getattr(exc, "extra", {}) or {}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), code, **extra),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and path parameters are a 400, not FastAPI's default 422."""
    errors = exc.errors()
    location = ".".join(str(part) for part in errors[0]["loc"]) if errors else "request"
    return JSONResponse(status_code=400, content=error_body(f"Invalid request: {location}"))


async def unhandled_error_middleware(request: Request, call_next):
    """Outermost boundary: log unexpected errors, answer with a generic 500."""
    try:
        return await call_next(request)
    except Exception:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=True)
        return JSONResponse(status_code=500, content=error_body(GENERIC_ERROR_MESSAGE))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.middleware("http")(unhandled_error_middleware)
