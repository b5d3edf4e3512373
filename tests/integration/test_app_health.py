"""Integration tests for health endpoints and request middleware."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient, settings):
    res = await client.get("/health")

    assert res.status_code == 200
    assert res.json() == {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@pytest.mark.asyncio
async def test_ready(client: AsyncClient):
    res = await client.get("/ready")

    assert res.status_code == 200
    assert res.json() == {"status": "ready", "database": "connected"}


@pytest.mark.asyncio
async def test_correlation_id_echoed(client: AsyncClient):
    res = await client.get("/health", headers={"X-Correlation-ID": "cid_test123"})

    assert res.headers["X-Correlation-ID"] == "cid_test123"


@pytest.mark.asyncio
async def test_correlation_id_generated(client: AsyncClient):
    res = await client.get("/health")

    assert res.headers["X-Correlation-ID"].startswith("cid_")


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(client: AsyncClient):
    res = await client.get("/nope")

    assert res.status_code == 404
    assert res.json() == {"message": "Not Found", "data": None}


def _app_with_failing_route(debug: bool):
    from feedgate.core.config import get_settings
    from feedgate.infrastructure.api.app import create_app

    app = create_app(get_settings().model_copy(update={"debug": debug}))

    @app.get("/explode")
    async def explode():
        raise RuntimeError("disk on fire")

    return app


@pytest.mark.asyncio
async def test_unhandled_exception_is_generic_500():
    from httpx import ASGITransport

    app = _app_with_failing_route(debug=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        res = await ac.get("/explode", headers={"X-Correlation-ID": "cid_boom"})

    assert res.status_code == 500
    assert res.json() == {"message": "Internal server error", "data": None}
    assert res.headers["X-Correlation-ID"] == "cid_boom"


@pytest.mark.asyncio
async def test_unhandled_exception_text_shown_in_debug():
    from httpx import ASGITransport

    app = _app_with_failing_route(debug=True)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        res = await ac.get("/explode")

    assert res.status_code == 500
    assert res.json() == {"message": "disk on fire", "data": None}
    assert res.headers["X-Correlation-ID"].startswith("cid_")
