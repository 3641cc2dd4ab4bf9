"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - The wallet secret comes from the environment (inline or keypair file), never hardcoded
    - Inline WALLET_KEYPAIR takes priority over WALLET_KEYPAIR_PATH
    - COUNTER_PROGRAM_ID takes priority over the IDL's metadata.address
    - get_config() is cached (lru_cache) — one AppConfig snapshot per process
    - Invalid input (missing wallet, malformed PORT) fails fast with ConfigurationError

Design Decisions:
    - Settings (raw env) vs AppConfig (resolved, frozen): the gateway and app factory
      receive an explicit AppConfig, get_config() is only the default
    - Repeated builds are idempotent, so a concurrent first call to get_config() is harmless
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from counter_gateway.core.errors import ConfigurationError
from counter_gateway.core.secret_key import parse_json_array, parse_secret_key

DEFAULT_CLUSTER_URL = "https://api.devnet.solana.com"
DEFAULT_IDL_PATH = Path(__file__).parent / "idl" / "counter.json"

NodeEnv = Literal["development", "test", "production"]
Commitment = Literal["processed", "confirmed", "finalized"]


class Settings(BaseSettings):
    """Raw settings read from environment variables (and .env)."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    node_env: NodeEnv = "development"
    port: int = 3000

    # Solana
    solana_cluster_url: str = DEFAULT_CLUSTER_URL
    commitment: Commitment = "confirmed"
    counter_program_id: str | None = None
    counter_idl_path: str | None = None

    # Wallet — exactly one source required
    wallet_keypair: str | None = None
    wallet_keypair_path: str | None = None

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("port")
    @classmethod
    def check_port_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("PORT must be a positive integer")
        return v

    @field_validator(
        "counter_program_id", "counter_idl_path",
        "wallet_keypair", "wallet_keypair_path", mode="before",
    )
    @classmethod
    def blank_as_unset(cls, v):
        """Treat FOO= (empty) the same as an unset variable."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


@dataclass(frozen=True)
class AppConfig:
    """Resolved, immutable configuration snapshot."""
    node_env: str
    port: int
    solana_cluster_url: str
    commitment: str
    program_id: str
    wallet_secret_key: bytes
    counter_idl_path: str | None = None
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def idl_path(self) -> Path:
        """IDL file the gateway loads: configured path or the bundled default."""
        if self.counter_idl_path:
            return Path(self.counter_idl_path).resolve()
        return DEFAULT_IDL_PATH


def load_wallet(settings: Settings) -> bytes:
    """Resolve wallet secret bytes from the inline value or the keypair file."""
    if settings.wallet_keypair:
        return parse_secret_key(settings.wallet_keypair)

    if settings.wallet_keypair_path:
        path = Path(settings.wallet_keypair_path).expanduser().resolve()
        if not path.exists():
            raise ConfigurationError(f"Wallet keypair file does not exist: {path}")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(
                f"Failed to read wallet keypair file {path}: {e}",
            ) from e
        try:
            return parse_json_array(content)
        except ValueError:
            return parse_secret_key(content)

    raise ConfigurationError(
        "Wallet configuration missing: set WALLET_KEYPAIR_PATH or WALLET_KEYPAIR",
    )


def load_program_id(settings: Settings) -> str:
    """Explicit COUNTER_PROGRAM_ID, else metadata.address from the IDL."""
    if settings.counter_program_id:
        return settings.counter_program_id

    idl_path = (
        Path(settings.counter_idl_path).resolve()
        if settings.counter_idl_path else DEFAULT_IDL_PATH
    )
    try:
        idl = json.loads(idl_path.read_text(encoding="utf-8"))
        address = (idl.get("metadata") or {}).get("address")
    except (OSError, ValueError, AttributeError):
        address = None
    if address:
        return address

    raise ConfigurationError(
        "COUNTER_PROGRAM_ID is not set and could not be inferred from the IDL metadata",
    )


def build_config(settings: Settings | None = None) -> AppConfig:
    """Build an AppConfig from settings. No caching — see get_config()."""
    if settings is None:
        try:
            settings = Settings()
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid environment configuration: {e}",
            ) from e

    wallet = load_wallet(settings)
    program_id = load_program_id(settings)
    return AppConfig(
        node_env=settings.node_env,
        port=settings.port,
        solana_cluster_url=settings.solana_cluster_url,
        commitment=settings.commitment,
        program_id=program_id,
        wallet_secret_key=wallet,
        counter_idl_path=settings.counter_idl_path,
        cors_origins=tuple(settings.cors_origins),
        log_level=settings.log_level,
        log_format=settings.log_format,
    )


@lru_cache
def get_config() -> AppConfig:
    return build_config()
