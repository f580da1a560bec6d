"""
Pytest fixtures for SchoolFees tests.
"""

import asyncio
from types import SimpleNamespace
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from auth.identity_provider import INITIAL_SESSION
from auth.models import SchoolAdminRow
from auth.notices import NoticeBuffer
from exceptions import IdentityProviderError, TenantResolutionError

SUPERADMIN_ENV = {
    "SUPERADMIN_USERNAME": "root",
    "SUPERADMIN_PASSWORD": "secret123",
    "SUPERADMIN_AUTH_TOKEN": "TOKEN",
}


def _reset_settings_cache():
    from config import get_settings
    get_settings.cache_clear()


@pytest.fixture
def app():
    """Get FastAPI app instance."""
    from main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def superadmin_env(monkeypatch):
    """Configure the superadmin as (root, secret123, TOKEN) in development."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    for key, value in SUPERADMIN_ENV.items():
        monkeypatch.setenv(key, value)
    _reset_settings_cache()
    yield SUPERADMIN_ENV
    _reset_settings_cache()


@pytest.fixture
def no_superadmin_env(monkeypatch):
    """Remove every superadmin variable."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    for key in SUPERADMIN_ENV:
        monkeypatch.delenv(key, raising=False)
    _reset_settings_cache()
    yield
    _reset_settings_cache()


@pytest_asyncio.fixture
async def async_client(app):
    """Create async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def notices():
    return NoticeBuffer()


# =============================================================================
# Tenant fakes
# =============================================================================

def make_session(user_id: str, email: Optional[str] = None, full_name: Optional[str] = None):
    """Supabase-like session with a nested user."""
    user = SimpleNamespace(
        id=user_id,
        email=email or f"{user_id}@school.test",
        user_metadata={"full_name": full_name} if full_name else {},
    )
    return SimpleNamespace(user=user, access_token=f"access-{user_id}", refresh_token=f"refresh-{user_id}")


class FakeSubscription:
    def __init__(self):
        self.unsubscribed = False

    def unsubscribe(self) -> None:
        self.unsubscribed = True


class FakeIdentityProvider:
    """Identity provider driven by the test."""

    def __init__(self, initial_session=None, emit_initial: bool = True):
        self.initial_session = initial_session
        self.emit_initial = emit_initial
        self.callback = None
        self.subscription = FakeSubscription()
        self.sign_out_error: Optional[Exception] = None
        self.sign_out_calls = 0

    def on_auth_state_change(self, callback):
        self.callback = callback
        if self.emit_initial:
            callback(INITIAL_SESSION, self.initial_session)
        return self.subscription

    def emit(self, event: str, session) -> None:
        self.callback(event, session)

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.emit("SIGNED_OUT", None)


class FakeSchoolDirectory:
    """
    In-memory school directory.

    ``gates[user_id]`` holds an asyncio.Event the lookup waits on, to make a
    lookup slow on purpose.
    """

    def __init__(self):
        self.admins: Dict[str, SchoolAdminRow] = {}
        self.schools: Dict[str, dict] = {}
        self.errors: Dict[str, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.lookups = []

    def link(self, user_id: str, school_id: str, role: str = "admin", school_name: str = "Test School"):
        self.admins[user_id] = SchoolAdminRow(user_id=user_id, school_id=school_id, role=role)
        self.schools[school_id] = {"id": school_id, "name": school_name}

    async def find_admin(self, user_id: str):
        self.lookups.append(user_id)
        gate = self.gates.get(user_id)
        if gate is not None:
            await gate.wait()
        if user_id in self.errors:
            raise self.errors[user_id]
        return self.admins.get(user_id)

    async def get_school(self, school_id: str):
        return self.schools.get(school_id)


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def directory():
    return FakeSchoolDirectory()


@pytest.fixture
def lookup_failure():
    return TenantResolutionError("connection reset", user_id="u-err")


@pytest.fixture
def sign_out_failure():
    return IdentityProviderError("network down")
