"""
Authentication middleware for FastAPI.

Enforces the route policies from auth/policies.py before handlers run:
SUPERADMIN routes need a valid superadmin cookie, TENANT routes need a
Supabase bearer token. Handlers can still add finer checks through the
dependencies in auth/dependencies.py (e.g. require_linked_school).

Usage:
    app.add_middleware(AuthMiddleware)
"""

import logging
from typing import Callable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from config import Settings, get_settings
from .credentials import is_valid_superadmin_token
from .policies import get_auth_level, AuthLevel
from .session_cookie import session_cookies
from .supabase_client import verify_jwt, supabase_client

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests that lack the credential class their route requires.

    On success the verified identity is attached to request.state:
    ``request.state.user`` (Supabase user dict) for TENANT routes and
    ``request.state.is_superadmin`` for SUPERADMIN routes.
    """

    def __init__(self, app, settings_provider: Callable[[], Settings] = get_settings):
        super().__init__(app)
        self._settings_provider = settings_provider

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request and enforce authentication policies."""
        # Skip OPTIONS requests (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        auth_level = get_auth_level(request.url.path)

        request.state.user = None
        request.state.user_id = None
        request.state.is_superadmin = False
        request.state.auth_level = auth_level

        if auth_level == AuthLevel.NONE:
            return await call_next(request)

        if auth_level == AuthLevel.SUPERADMIN:
            token = session_cookies.read(request)
            if not is_valid_superadmin_token(token, self._settings_provider()):
                logger.info(f"Superadmin access denied for {request.url.path}")
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"authenticated": False, "detail": "Superadmin authentication required"},
                )
            request.state.is_superadmin = True
            return await call_next(request)

        # TENANT
        if not supabase_client.is_configured():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": "Authentication service not configured"},
            )

        token = _bearer_token(request)
        user_data = await verify_jwt(token) if token else None
        if not user_data:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or expired token" if token else "Authentication required"},
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.user = user_data
        request.state.user_id = user_data.get("id")
        return await call_next(request)


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None

