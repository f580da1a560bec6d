"""
Authentication models for SchoolFees.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union
from pydantic import BaseModel


# =============================================================================
# Superadmin HTTP models
# =============================================================================

class SuperadminLogin(BaseModel):
    """
    Superadmin login form.

    Both fields are optional: an absent or non-string value is a credential
    mismatch, decided after the configuration check, never a 422.
    """
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_body(cls, body: Any) -> "SuperadminLogin":
        if not isinstance(body, dict):
            return cls()
        fields = {}
        for key in ("username", "password"):
            value = body.get(key)
            if isinstance(value, str):
                fields[key] = value
        return cls(**fields)


class SuperadminLoginResponse(BaseModel):
    """Body returned by the login and logout endpoints."""
    success: bool
    message: Optional[str] = None


class SuperadminStatusResponse(BaseModel):
    """Body returned by the status endpoint."""
    authenticated: bool


# =============================================================================
# Tenant identity
# =============================================================================

class TenantUser(BaseModel):
    """Identity-provider user, as seen by the school dashboard."""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_provider(cls, user: Any) -> "TenantUser":
        """Build from a Supabase user object or a verified-JWT dict."""
        if isinstance(user, dict):
            metadata = user.get("user_metadata") or {}
            return cls(id=user["id"], email=user.get("email"), full_name=metadata.get("full_name"))
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(id=user.id, email=getattr(user, "email", None), full_name=metadata.get("full_name"))


# =============================================================================
# School scope (tagged variant)
# =============================================================================

@dataclass(frozen=True)
class Unresolved:
    """School scope not known yet."""
    school_id: None = None
    is_admin: bool = False


@dataclass(frozen=True)
class Unlinked:
    """Authenticated (or logged out) user without a school."""
    school_id: None = None
    is_admin: bool = False


@dataclass(frozen=True)
class Linked:
    """User mapped to exactly one school through school_administrators."""
    school_id: str
    is_admin: bool = False


SchoolScope = Union[Unresolved, Unlinked, Linked]

UNRESOLVED = Unresolved()
UNLINKED = Unlinked()


@dataclass(frozen=True)
class SchoolAdminRow:
    """A school_administrators row, reduced to the columns auth needs."""
    user_id: str
    school_id: Optional[str]
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_scope(self) -> Union[Linked, Unlinked]:
        # school_id is a nullable foreign key
        if self.school_id is None:
            return UNLINKED
        return Linked(school_id=self.school_id, is_admin=self.is_admin)


class SchoolScopeResponse(BaseModel):
    """Body of GET /api/session."""
    user: TenantUser
    status: str
    school_id: Optional[str] = None
    is_admin: bool = False
    notice: Optional[str] = None

    @classmethod
    def build(cls, user: TenantUser, scope: SchoolScope, notice: Optional[str] = None) -> "SchoolScopeResponse":
        if isinstance(scope, Linked):
            status = "linked"
        elif isinstance(scope, Unlinked):
            status = "unlinked"
        else:
            status = "unresolved"
        return cls(
            user=user,
            status=status,
            school_id=scope.school_id,
            is_admin=scope.is_admin,
            notice=notice,
        )


class SchoolResponse(BaseModel):
    """Body of GET /api/session/school."""
    school_id: str
    name: Optional[str] = None
    is_admin: bool = False


# =============================================================================
# Superadmin overview
# =============================================================================

class SchoolSummary(BaseModel):
    """Per-school fee totals."""
    id: str
    name: Optional[str] = None
    student_count: int = 0
    total_assigned_fees: float = 0.0
    total_collected_fees: float = 0.0


class SchoolAdministratorDetail(BaseModel):
    """A school_administrators row with its school name."""
    id: str
    user_id: str
    school_id: Optional[str] = None
    role: Optional[str] = None
    school_name: Optional[str] = None
    created_at: Optional[str] = None


class SuperadminOverview(BaseModel):
    """Cross-school aggregates for the superadmin dashboard."""
    total_schools: int = 0
    total_students: int = 0
    total_assigned_fees: float = 0.0
    total_collected_fees: float = 0.0
    schools: list[SchoolSummary] = []
    administrators: list[SchoolAdministratorDetail] = []


@dataclass
class LoginResult:
    """Outcome of SuperadminAuthGate.login()."""
    success: bool
    message: Optional[str] = None
