"""
Middleware package for SchoolFees backend.

Includes:
- ErrorHandlerMiddleware: JSON responses for unhandled exceptions
- add_exception_handlers: SchoolFeesException to HTTP status mapping
"""

from middleware.error_handler import ErrorHandlerMiddleware, add_exception_handlers, status_for

__all__ = [
    "ErrorHandlerMiddleware",
    "add_exception_handlers",
    "status_for",
]
