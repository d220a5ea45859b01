"""
Exception handlers producing the ``{"error": "..."}`` body used by every
endpoint.
"""

from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging import capture_error
from app.logging import get_logger

logger = get_logger(__name__)


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def http_exception_handler(request, exc: StarletteHTTPException):
    """HTTP exception handler"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request, exc: RequestValidationError):
    """Request validation exception handler"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _format_validation_error(exc)},
    )


async def python_exception_handler(request, exc: Exception):
    """Unexpected exceptions: log server-side, never leak details"""
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        error=type(exc).__name__,
    )
    capture_error(exc, tags={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
