"""App factory — lifespan ownership of the gateway, CORS wiring."""

from httpx import ASGITransport, AsyncClient

from counter_gateway.main import create_app
from counter_gateway.services.counter_gateway import CounterGateway


async def test_lifespan_builds_and_closes_own_gateway(app_config, monkeypatch):
    closed = []

    async def record_close(self):
        closed.append(self)

    monkeypatch.setattr(CounterGateway, "close", record_close)
    app = create_app(config=app_config)
    async with app.router.lifespan_context(app):
        gateway = app.state.gateway
        assert isinstance(gateway, CounterGateway)
        assert closed == []
    assert closed == [gateway]


async def test_lifespan_leaves_injected_gateway_open(mock_gateway, app_config):
    app = create_app(mock_gateway, app_config)
    async with app.router.lifespan_context(app):
        assert app.state.gateway is mock_gateway
    mock_gateway.close.assert_not_called()


async def test_cors_allows_configured_origin(client):
    res = await client.options(
        "/health",
        headers={
            "origin": "http://localhost:3000",
            "access-control-request-method": "GET",
        },
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "http://localhost:3000"


async def test_config_taken_from_injected_gateway(mock_gateway):
    app = create_app(mock_gateway)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        res = await c.get("/health")
    assert res.json()["programId"] == mock_gateway.config.program_id
