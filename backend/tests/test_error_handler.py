"""
Tests for the exception handler and the catch-all error middleware.
"""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from exceptions import ServerConfigurationError, TenantResolutionError
from middleware.error_handler import ErrorHandlerMiddleware, add_exception_handlers


@pytest_asyncio.fixture
async def client():
    app = FastAPI()
    add_exception_handlers(app)
    app.add_middleware(ErrorHandlerMiddleware)

    @app.get("/config")
    async def config_error():
        raise ServerConfigurationError(missing=["SUPERADMIN_AUTH_TOKEN"])

    @app.get("/lookup")
    async def lookup_error():
        raise TenantResolutionError("timeout", user_id="u1")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("database password is hunter2")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_configuration_error_hides_variable_names(client):
    response = await client.get("/config")

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "Server configuration error."
    assert "SUPERADMIN_AUTH_TOKEN" not in response.text


@pytest.mark.asyncio
async def test_tenant_resolution_error(client):
    response = await client.get("/lookup")

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "TENANT_RESOLUTION_ERROR"


@pytest.mark.asyncio
async def test_unhandled_exception_is_generic(client):
    response = await client.get("/crash")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error", "error_type": "RuntimeError"}
    assert "hunter2" not in response.text
