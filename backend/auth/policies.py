"""
Centralized authentication policy configuration.

Maps API routes to the credential class they require. There are exactly two
identity classes: school administrators (Supabase bearer token, scoped to a
school) and the single superadmin (cookie carrying the shared token).

Usage:
    from auth.policies import get_auth_level, AuthLevel

    level = get_auth_level("/api/superadmin/overview")
    if level == AuthLevel.SUPERADMIN:
        # Require the superadmin cookie
"""

import fnmatch
import logging
from enum import Enum
from typing import Dict, List, Set, Tuple

logger = logging.getLogger(__name__)


class AuthLevel(str, Enum):
    """
    NONE: No authentication (health, superadmin login/logout/status)
    TENANT: Supabase bearer token of a school administrator
    SUPERADMIN: Valid superadmin_token cookie
    """
    NONE = "none"
    TENANT = "tenant"
    SUPERADMIN = "superadmin"


# =============================================================================
# Public Paths (no authentication needed)
# =============================================================================

PUBLIC_PATHS: Set[str] = {
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


# =============================================================================
# Authentication Policies by Route Pattern
# =============================================================================
#
# Patterns support:
#   - Exact match: "/api/superadmin-login"
#   - Wildcard suffix: "/api/superadmin/*" (matches /api/superadmin/overview)
#   - Glob patterns via fnmatch
#
# More specific patterns take precedence over general patterns.
# Unmatched routes default to TENANT.

AUTH_POLICIES: List[Tuple[str, AuthLevel]] = [
    # Superadmin session endpoints establish or inspect the cookie themselves
    ("/api/superadmin-login", AuthLevel.NONE),
    ("/api/superadmin-logout", AuthLevel.NONE),
    ("/api/superadmin-status", AuthLevel.NONE),

    # Superadmin area
    ("/api/superadmin/*", AuthLevel.SUPERADMIN),

    # School administrator session
    ("/api/session", AuthLevel.TENANT),
    ("/api/session/*", AuthLevel.TENANT),
]

DEFAULT_AUTH_LEVEL = AuthLevel.TENANT


def _match_pattern(pattern: str, path: str) -> bool:
    """
    Check if a path matches a pattern.

    Supports exact match, wildcard suffix (/api/x/* also matches /api/x)
    and fnmatch globs.
    """
    if pattern == path:
        return True

    if pattern.endswith("/*"):
        prefix = pattern[:-1]  # Keep trailing slash
        if path.startswith(prefix) or path == prefix[:-1]:
            return True

    if "*" in pattern:
        return fnmatch.fnmatch(path, pattern)

    return False


def _get_pattern_specificity(pattern: str) -> int:
    """More path segments score higher; wildcards score lower."""
    segments = pattern.count("/")
    wildcards = pattern.count("*")
    length_bonus = len(pattern) // 10
    return (segments * 10) + length_bonus - (wildcards * 5)


def get_auth_level(path: str) -> AuthLevel:
    """
    Get the authentication level required for a given path.

    Example:
        >>> get_auth_level("/api/superadmin-login")
        AuthLevel.NONE
        >>> get_auth_level("/api/superadmin/overview")
        AuthLevel.SUPERADMIN
        >>> get_auth_level("/api/session")
        AuthLevel.TENANT
    """
    path = path.rstrip("/")
    if not path:
        path = "/"

    if path in PUBLIC_PATHS:
        return AuthLevel.NONE

    matches: List[Tuple[str, AuthLevel, int]] = []
    for pattern, level in AUTH_POLICIES:
        if _match_pattern(pattern, path):
            matches.append((pattern, level, _get_pattern_specificity(pattern)))

    if matches:
        matches.sort(key=lambda x: x[2], reverse=True)
        best_match = matches[0]
        logger.debug(f"Auth policy for '{path}': {best_match[1].value} (matched '{best_match[0]}')")
        return best_match[1]

    logger.debug(f"Auth policy for '{path}': {DEFAULT_AUTH_LEVEL.value} (no matching policy)")
    return DEFAULT_AUTH_LEVEL


def get_policy_summary() -> Dict[str, List[str]]:
    """Patterns grouped by auth level."""
    summary: Dict[str, List[str]] = {
        AuthLevel.NONE.value: sorted(PUBLIC_PATHS),
        AuthLevel.TENANT.value: [],
        AuthLevel.SUPERADMIN.value: [],
    }
    for pattern, level in AUTH_POLICIES:
        summary[level.value].append(pattern)
    return summary
