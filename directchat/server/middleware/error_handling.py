"""
Exception handlers giving every HTTP-level failure the protocol's ERROR body.

Rejections the transport makes itself (missing bearer token, wrong method,
unknown route) keep their HTTP status code but answer with
``{"status": "ERROR", "message": ...}`` like every other relay response.
Anything that escapes a route is logged and reported as ``Internal error``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...error_types import ErrorType, create_error_payload
from ...structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

_STATUS_ERRORS = {
    401: ErrorType.UNAUTHORIZED,
    405: ErrorType.METHOD_NOT_ALLOWED,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the relay application."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        error_type = _STATUS_ERRORS.get(exc.status_code)
        message = None if error_type else str(exc.detail)
        logger.info("HTTP rejection", status_code=exc.status_code, method=request.method, path=request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=create_error_payload(error_type or ErrorType.MALFORMED_REQUEST, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Request validation failed", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(status_code=200, content=create_error_payload(ErrorType.MALFORMED_REQUEST))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error in relay route",
            error_type=type(exc).__name__,
            path=request.url.path,
            exc_info=exc,
        )
        return JSONResponse(status_code=200, content=create_error_payload(ErrorType.INTERNAL_ERROR))
