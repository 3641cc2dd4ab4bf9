"""Root conftest — shared configuration fixtures.

Invariants:
    - Tests never read the developer's real wallet: WALLET_* and COUNTER_* env vars
      are removed for every test, and get_config's cache is cleared around each test
"""

import pytest
from solders.keypair import Keypair

from counter_gateway.config import AppConfig, get_config

PROGRAM_ID = "GK5CdkKWciUWsj6uSLSZwJBDpji7AavaBin5dZau4uX3"
CLUSTER_URL = "https://api.devnet.solana.com"

_ENV_VARS = (
    "NODE_ENV", "PORT", "SOLANA_CLUSTER_URL", "COMMITMENT",
    "COUNTER_PROGRAM_ID", "COUNTER_IDL_PATH",
    "WALLET_KEYPAIR", "WALLET_KEYPAIR_PATH",
    "LOG_LEVEL", "LOG_FORMAT", "CORS_ORIGINS",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def wallet() -> Keypair:
    return Keypair()


@pytest.fixture
def app_config(wallet) -> AppConfig:
    return AppConfig(
        node_env="test",
        port=3000,
        solana_cluster_url=CLUSTER_URL,
        commitment="confirmed",
        program_id=PROGRAM_ID,
        wallet_secret_key=bytes(wallet),
        log_format="text",
    )
