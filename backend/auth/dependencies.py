"""
Authentication dependencies for FastAPI.

Provides dependency injection for the two identity classes in route
handlers: school administrators (bearer token + school scope) and the
superadmin (cookie).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config import Settings, get_settings
from exceptions import TenantResolutionError
from .credentials import is_valid_superadmin_token
from .models import Linked, SchoolScope, TenantUser, UNLINKED
from .school_directory import SchoolDirectory, SupabaseSchoolDirectory
from .session_cookie import session_cookies
from .supabase_client import supabase_client, verify_jwt

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TenantUser:
    """
    Get the current school administrator.

    Raises HTTPException 401 if not authenticated.
    """
    if not supabase_client.is_configured():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured"
        )

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_data = await verify_jwt(credentials.credentials)

    if not user_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TenantUser.from_provider(user_data)


def get_school_directory() -> SchoolDirectory:
    """Dependency to get the school directory backed by Supabase."""
    client = supabase_client.get_client()
    if not client:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured"
        )
    return SupabaseSchoolDirectory(client)


# =============================================================================
# School scope
# =============================================================================

@dataclass
class SchoolContext:
    """The caller and the school they are scoped to."""
    user: TenantUser
    scope: SchoolScope
    notice: Optional[str] = None


async def get_school_context(
    user: TenantUser = Depends(get_current_user),
    directory: SchoolDirectory = Depends(get_school_directory),
) -> SchoolContext:
    """
    Resolve the caller's school scope.

    A failed lookup is not an error for the caller: the user is signed in
    but unlinked, and a notice says why.
    """
    try:
        row = await directory.find_admin(user.id)
    except TenantResolutionError as e:
        logger.warning(f"School lookup failed for {user.id}: {e.reason}")
        return SchoolContext(
            user=user,
            scope=UNLINKED,
            notice="Failed to load school information for your account. Please try re-logging in.",
        )

    if row is None:
        return SchoolContext(
            user=user,
            scope=UNLINKED,
            notice="Your account is not currently linked to a school.",
        )

    return SchoolContext(user=user, scope=row.to_scope())


def require_linked_school(
    context: SchoolContext = Depends(get_school_context),
) -> SchoolContext:
    """
    Require a school scope.

    Unlinked accounts get 403, not 401: they are authenticated.
    """
    if not isinstance(context.scope, Linked):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not linked to a school",
        )
    return context


# =============================================================================
# Superadmin
# =============================================================================

def require_superadmin(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Require a superadmin cookie equal to SUPERADMIN_AUTH_TOKEN."""
    token = session_cookies.read(request)
    if not is_valid_superadmin_token(token, settings):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Superadmin authentication required",
        )
