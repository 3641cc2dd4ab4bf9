"""API test fixtures — FastAPI app wired to either a mocked or a fake-RPC gateway.

Invariants:
    - mock_gateway: AsyncMock per operation, for response-shaping and error-mapping tests
    - chain_client: real CounterGateway over FakeRpcClient, for end-to-end HTTP tests
    - raise_app_exceptions=False so the catch-all 500 handler's response is observable
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from counter_gateway.main import create_app
from counter_gateway.services.counter_gateway import ClusterInfo, CounterGateway
from tests.services.fake_solana import FakeRpcClient


def _client_for(app) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    )


@pytest.fixture
def mock_gateway(app_config):
    gateway = MagicMock(spec=CounterGateway)
    gateway.config = app_config
    gateway.initialize_counter = AsyncMock()
    gateway.increment_counter = AsyncMock()
    gateway.get_counter_data = AsyncMock()
    gateway.get_cluster_info = MagicMock(return_value=ClusterInfo(
        cluster=app_config.solana_cluster_url, program_id=app_config.program_id,
    ))
    return gateway


@pytest.fixture
async def client(mock_gateway, app_config):
    async with _client_for(create_app(mock_gateway, app_config)) as c:
        yield c


@pytest.fixture
def fake_rpc() -> FakeRpcClient:
    return FakeRpcClient()


@pytest.fixture
def chain_gateway(app_config, fake_rpc) -> CounterGateway:
    return CounterGateway(app_config, client=fake_rpc)


@pytest.fixture
async def chain_client(chain_gateway, app_config):
    async with _client_for(create_app(chain_gateway, app_config)) as c:
        yield c
