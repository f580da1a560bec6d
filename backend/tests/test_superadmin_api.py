"""
Tests for the superadmin login, logout, status and overview endpoints.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from auth.dependencies import get_school_directory
from routers.superadmin import summarize_schools


def _set_cookie_parts(response) -> dict:
    """Parse the superadmin Set-Cookie header into {attribute: value}."""
    header = response.headers.get("set-cookie")
    assert header is not None
    parts = [p.strip() for p in header.split(";")]
    name, value = parts[0].split("=", 1)
    attrs = {"name": name, "value": value}
    for part in parts[1:]:
        key, _, val = part.partition("=")
        attrs[key.lower()] = val or True
    return attrs


class TestSuperadminLogin:
    """POST /api/superadmin-login"""

    @pytest.mark.asyncio
    async def test_wrong_password_is_rejected_without_cookie(self, async_client, superadmin_env):
        response = await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "wrong"},
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials."}
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_wrong_username_is_rejected(self, async_client, superadmin_env):
        response = await async_client.post(
            "/api/superadmin-login",
            json={"username": "admin", "password": "secret123"},
        )

        assert response.status_code == 401
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_valid_credentials_set_session_cookie(self, async_client, superadmin_env):
        response = await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "secret123"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}

        cookie = _set_cookie_parts(response)
        assert cookie["name"] == "superadmin_token"
        assert cookie["value"] == "TOKEN"
        assert cookie["httponly"] is True
        assert cookie["path"] == "/"
        assert cookie["samesite"].lower() == "lax"
        assert cookie["max-age"] == "604800"
        assert "secure" not in cookie

    @pytest.mark.asyncio
    async def test_cookie_is_secure_in_production(self, async_client, superadmin_env, monkeypatch):
        from config import get_settings
        monkeypatch.setenv("ENVIRONMENT", "production")
        get_settings.cache_clear()

        response = await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "secret123"},
        )

        assert response.status_code == 200
        assert _set_cookie_parts(response)["secure"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["SUPERADMIN_USERNAME", "SUPERADMIN_PASSWORD", "SUPERADMIN_AUTH_TOKEN"])
    async def test_missing_configuration_wins_over_credentials(
        self, async_client, superadmin_env, monkeypatch, missing
    ):
        from config import get_settings
        monkeypatch.delenv(missing)
        get_settings.cache_clear()

        response = await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "secret123"},
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Server configuration error."}
        assert "set-cookie" not in response.headers
        # The missing variable is never named to the caller
        assert missing not in response.text

    @pytest.mark.asyncio
    async def test_missing_configuration_with_wrong_credentials(self, async_client, no_superadmin_env):
        response = await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "wrong"},
        )

        assert response.status_code == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"username": "root"},
        {"password": "secret123"},
        {"username": "root", "password": 123},
        {},
        ["root", "secret123"],
    ])
    async def test_incomplete_body_without_configuration(self, async_client, no_superadmin_env, body):
        response = await async_client.post("/api/superadmin-login", json=body)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Server configuration error."}
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"username": "root"},
        {"password": "secret123"},
        {"username": "root", "password": None},
        {"username": ["root"], "password": "secret123"},
        {},
    ])
    async def test_incomplete_body_is_a_mismatch(self, async_client, superadmin_env, body):
        response = await async_client.post("/api/superadmin-login", json=body)

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials."}
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_non_json_body_is_a_mismatch(self, async_client, superadmin_env):
        response = await async_client.post(
            "/api/superadmin-login",
            content=b"username=root&password=secret123",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

        assert response.status_code == 401
        assert "set-cookie" not in response.headers


class TestSuperadminStatusAndLogout:
    """GET /api/superadmin-status and POST /api/superadmin-logout"""

    @pytest.mark.asyncio
    async def test_status_without_cookie(self, async_client, superadmin_env):
        response = await async_client.get("/api/superadmin-status")

        assert response.status_code == 401
        assert response.json() == {"authenticated": False}

    @pytest.mark.asyncio
    async def test_status_with_wrong_cookie(self, async_client, superadmin_env):
        async_client.cookies.set("superadmin_token", "NOT-THE-TOKEN")

        response = await async_client.get("/api/superadmin-status")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_status_is_stable_after_login(self, async_client, superadmin_env):
        await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "secret123"},
        )

        first = await async_client.get("/api/superadmin-status")
        second = await async_client.get("/api/superadmin-status")

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json() == {"authenticated": True}

    @pytest.mark.asyncio
    async def test_status_unauthenticated_right_after_logout(self, async_client, superadmin_env):
        await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "secret123"},
        )

        logout = await async_client.post("/api/superadmin-logout")
        status = await async_client.get("/api/superadmin-status")

        assert logout.status_code == 200
        assert logout.json() == {"success": True}
        assert status.status_code == 401
        assert "superadmin_token" not in async_client.cookies

    @pytest.mark.asyncio
    async def test_logout_without_cookie_still_succeeds(self, async_client, no_superadmin_env):
        response = await async_client.post("/api/superadmin-logout")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert "superadmin_token" not in async_client.cookies

    @pytest.mark.asyncio
    async def test_status_when_token_not_configured(self, async_client, no_superadmin_env):
        async_client.cookies.set("superadmin_token", "TOKEN")

        response = await async_client.get("/api/superadmin-status")

        assert response.status_code == 401


class TestSuperadminOverview:
    """GET /api/superadmin/overview"""

    @pytest.fixture
    def overview_directory(self):
        directory = MagicMock()
        directory.list_schools_with_fees = AsyncMock(return_value=[
            {
                "id": "s1",
                "name": "Hill School",
                "students": [
                    {"id": "st1", "total_fees": 1000, "payments": [{"amount_paid": 400}, {"amount_paid": 100}]},
                    {"id": "st2", "total_fees": 500, "payments": []},
                ],
            },
            {"id": "s2", "name": "Lake School", "students": None},
        ])
        directory.list_administrators = AsyncMock(return_value=[
            {
                "id": "a1",
                "user_id": "u1",
                "role": "admin",
                "school_id": "s1",
                "created_at": "2024-02-01T00:00:00Z",
                "schools": {"name": "Hill School"},
            },
        ])
        return directory

    @pytest.mark.asyncio
    async def test_requires_superadmin_cookie(self, app, async_client, superadmin_env, overview_directory):
        app.dependency_overrides[get_school_directory] = lambda: overview_directory

        response = await async_client.get("/api/superadmin/overview")

        assert response.status_code == 401
        overview_directory.list_schools_with_fees.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_aggregates_when_logged_in(self, app, async_client, superadmin_env, overview_directory):
        app.dependency_overrides[get_school_directory] = lambda: overview_directory
        await async_client.post(
            "/api/superadmin-login",
            json={"username": "root", "password": "secret123"},
        )

        response = await async_client.get("/api/superadmin/overview")

        assert response.status_code == 200
        data = response.json()
        assert data["total_schools"] == 2
        assert data["total_students"] == 2
        assert data["total_assigned_fees"] == 1500
        assert data["total_collected_fees"] == 500
        assert data["administrators"][0]["school_name"] == "Hill School"

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_502(self, app, async_client, superadmin_env, overview_directory):
        overview_directory.list_schools_with_fees.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_school_directory] = lambda: overview_directory
        async_client.cookies.set("superadmin_token", "TOKEN")

        response = await async_client.get("/api/superadmin/overview")

        assert response.status_code == 502


class TestSummarizeSchools:
    """Unit tests for the overview aggregation."""

    def test_empty(self):
        overview = summarize_schools([], [])
        assert overview.total_schools == 0
        assert overview.schools == []

    def test_missing_amounts_count_as_zero(self):
        overview = summarize_schools(
            [{"id": 7, "name": None, "students": [{"id": 1, "total_fees": None, "payments": [{"amount_paid": None}]}]}],
            [],
        )
        school = overview.schools[0]
        assert school.id == "7"
        assert school.student_count == 1
        assert school.total_assigned_fees == 0
        assert school.total_collected_fees == 0

    def test_admin_without_school(self):
        overview = summarize_schools([], [{"id": "a", "user_id": "u", "school_id": None, "schools": None}])
        admin = overview.administrators[0]
        assert admin.school_id is None
        assert admin.school_name is None
