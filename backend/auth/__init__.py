"""
Authentication module for SchoolFees.

Two identity classes:
- School administrators: Supabase Auth sessions, scoped to one school via
  the school_administrators join table
- Superadmin: one global identity, configured credentials, cookie session

This module provides:
- Superadmin cookie, credential check and client-side auth gate
- Tenant auth context resolving sessions to a school scope
- Page guards, FastAPI dependencies and policy middleware
"""

from .supabase_client import supabase_client
from .dependencies import (
    get_current_user,
    get_school_context,
    require_linked_school,
    require_superadmin,
    SchoolContext,
)
from .models import (
    TenantUser,
    SchoolScope,
    Unresolved,
    Unlinked,
    Linked,
    LoginResult,
)
from .credentials import (
    CredentialVerifier,
    PlainCredentialVerifier,
    ConstantTimeCredentialVerifier,
    check_superadmin_credentials,
    is_valid_superadmin_token,
)
from .session_cookie import SessionCookieManager, session_cookies, SUPERADMIN_COOKIE_NAME
from .superadmin_gate import SuperadminAuthGate, GateState, HistoryNavigator
from .tenant_context import TenantAuthContext, TenantAuthState
from .route_guard import PageAccess, evaluate_tenant_page, evaluate_superadmin_page
from .policies import AuthLevel, get_auth_level, PUBLIC_PATHS, AUTH_POLICIES
from .middleware import AuthMiddleware

__all__ = [
    # Supabase client
    "supabase_client",
    # Dependencies
    "get_current_user",
    "get_school_context",
    "require_linked_school",
    "require_superadmin",
    "SchoolContext",
    # Models
    "TenantUser",
    "SchoolScope",
    "Unresolved",
    "Unlinked",
    "Linked",
    "LoginResult",
    # Superadmin
    "CredentialVerifier",
    "PlainCredentialVerifier",
    "ConstantTimeCredentialVerifier",
    "check_superadmin_credentials",
    "is_valid_superadmin_token",
    "SessionCookieManager",
    "session_cookies",
    "SUPERADMIN_COOKIE_NAME",
    "SuperadminAuthGate",
    "GateState",
    "HistoryNavigator",
    # Tenant
    "TenantAuthContext",
    "TenantAuthState",
    # Guards and policies
    "PageAccess",
    "evaluate_tenant_page",
    "evaluate_superadmin_page",
    "AuthLevel",
    "get_auth_level",
    "PUBLIC_PATHS",
    "AUTH_POLICIES",
    "AuthMiddleware",
]
