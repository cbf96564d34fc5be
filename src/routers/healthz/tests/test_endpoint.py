import pytest


@pytest.mark.asyncio
async def test_health_check(client_factory):
    """Test the health check endpoint returns healthy status."""
    async with client_factory() as client:
        response = await client.get("/healthz/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"


@pytest.mark.asyncio
async def test_root_endpoint(client_factory):
    """Test the root endpoint returns welcome message."""
    async with client_factory() as client:
        response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Welcome to the Lockstep API"
