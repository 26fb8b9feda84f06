"""
Exception handlers.

Every error leaves the API as ``{"success": false, "message": ...}``.
Expected failures carry their own message; anything else is logged and
reduced to a generic message outside development.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from spendwise.core.config import settings

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


def first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    if first.get("type") == "missing":
        field = str(first.get("loc", ["", "field"])[-1])
        return f"{field[:1].upper()}{field[1:]} is required"

    # ValueErrors raised by our validators keep their own wording.
    ctx_error = (first.get("ctx") or {}).get("error")
    if isinstance(ctx_error, ValueError):
        return str(ctx_error)

    if first.get("type") == "json_invalid":
        return "Malformed JSON body"
    return first.get("msg", "Invalid request")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        client = request.client.host if request.client else "unknown"
        logger.warning(f"Rate limit exceeded for {client} on {request.url.path}: {exc.limit.limit}")
        return error_response(status.HTTP_429_TOO_MANY_REQUESTS, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = first_validation_message(exc)
        logger.info(f"Rejected {request.method} {request.url.path}: {message}")
        return error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        message = str(exc) if settings.is_development else "Internal Server Error"
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)
