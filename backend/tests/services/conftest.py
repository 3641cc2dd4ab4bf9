"""Service test fixtures — CounterGateway wired to an in-memory fake RPC client."""

import pytest

from counter_gateway.services.counter_gateway import CounterGateway
from tests.services.fake_solana import FakeRpcClient


@pytest.fixture
def fake_rpc() -> FakeRpcClient:
    return FakeRpcClient()


@pytest.fixture
def gateway(app_config, fake_rpc) -> CounterGateway:
    return CounterGateway(app_config, client=fake_rpc)
