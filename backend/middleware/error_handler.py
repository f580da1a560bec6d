"""
Error handling for SchoolFees.

Turns exceptions that escape a route into JSON responses, so error bodies
still pass through CORSMiddleware and nothing internal leaks to the client.

- SchoolFeesException subclasses map to a status code and their own
  to_dict() body. ConfigurationError details stay in the server log.
- Anything else becomes a generic 500.
"""

import logging
import traceback

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from exceptions import (
    AuthenticationError,
    ConfigurationError,
    SchoolFeesException,
    TenantResolutionError,
)

logger = logging.getLogger(__name__)


def status_for(exc: SchoolFeesException) -> int:
    if isinstance(exc, ConfigurationError):
        return 500
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, TenantResolutionError):
        return 502
    return 400


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Catches unhandled exceptions from the route stack.

    Must be added before CORSMiddleware so its responses get CORS headers.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            error_type = type(exc).__name__
            logger.error(
                f"Unhandled exception in request {request.method} {request.url.path}: "
                f"{error_type}: {exc or '(no message)'}"
            )
            logger.debug(f"Full traceback:\n{traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "error_type": error_type},
            )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the SchoolFeesException handler on the app."""

    @app.exception_handler(SchoolFeesException)
    async def school_fees_exception_handler(request: Request, exc: SchoolFeesException):
        status_code = status_for(exc)
        if isinstance(exc, ConfigurationError):
            logger.error(f"Configuration error on {request.url.path}: missing {', '.join(exc.missing) or 'unknown'}")
            body = {"error": {"code": exc.code, "message": exc.message, "details": {}}}
        else:
            logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
            body = exc.to_dict()
        return JSONResponse(status_code=status_code, content=body)
