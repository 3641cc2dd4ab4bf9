"""Counter Gateway — service façade over the Solana RPC client and the counter program.

Invariants:
    - Built once from an AppConfig; connection, keypair and program handle never change after
    - Counter addresses are program-derived from (seed, wallet pubkey, program id), never random
    - initialize/increment: exactly one submit + one confirmation wait, no retries
    - AccountNotFoundError propagates unchanged; every other failure is rewrapped as SolanaError
    - get_cluster_info() never touches the network

Design Decisions:
    - RPC client and program handle injectable: tests pass fakes, production builds AsyncClient
    - Account views re-fetched on every call — nothing cached locally
    - No cancellation from the HTTP layer into in-flight chain calls (accepted limitation)
"""

import json
import logging
from dataclasses import dataclass

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import Transaction
from solders.transaction_status import TransactionErrorFieldless

from counter_gateway.config import AppConfig, get_config
from counter_gateway.core.errors import (
    AccountNotFoundError,
    ConfigurationError,
    SolanaError,
    TransactionError,
)
from counter_gateway.infrastructure.counter_program import CounterProgram

logger = logging.getLogger(__name__)

DEFAULT_SEED = "counter"
COUNTER_ACCOUNT = "Counter"
KEYPAIR_LENGTH = 64
MAX_SEED_LENGTH = 32


@dataclass(frozen=True)
class InitializedCounter:
    counter_address: str
    seed: str
    signature: str


@dataclass(frozen=True)
class IncrementedCounter:
    signature: str
    new_count: str


@dataclass(frozen=True)
class CounterAccountView:
    """Read-only projection of the on-chain counter. count is a decimal string (u64)."""
    authority: str
    count: str


@dataclass(frozen=True)
class ClusterInfo:
    cluster: str
    program_id: str


class CounterGateway:
    """Initialize, increment and read counters owned by the configured wallet."""

    def __init__(
        self,
        config: AppConfig | None = None,
        client: AsyncClient | None = None,
        program: CounterProgram | None = None,
    ):
        self.config = config or get_config()
        if len(self.config.wallet_secret_key) != KEYPAIR_LENGTH:
            raise ConfigurationError(
                f"Invalid wallet secret key: expected {KEYPAIR_LENGTH} bytes, "
                f"got {len(self.config.wallet_secret_key)}",
            )
        try:
            self.wallet = Keypair.from_bytes(self.config.wallet_secret_key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid wallet secret key: {e}") from e
        try:
            self.program_id = Pubkey.from_string(self.config.program_id)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid program id: {self.config.program_id}",
            ) from e
        self.commitment = Commitment(self.config.commitment)
        self.client = client or AsyncClient(
            self.config.solana_cluster_url, self.commitment,
        )
        self.program = program or CounterProgram.from_file(
            self.config.idl_path, self.program_id,
        )

    def derive_counter_address(self, seed: str = DEFAULT_SEED) -> Pubkey:
        """Program-derived counter address for this wallet and seed.

        Seeds over MAX_SEED_LENGTH bytes raise ValueError before reaching find_program_address.
        """
        seed_bytes = seed.encode("utf-8")
        if len(seed_bytes) > MAX_SEED_LENGTH:
            raise ValueError("Max seed length exceeded")
        address, _bump = Pubkey.find_program_address(
            [seed_bytes, bytes(self.wallet.pubkey())], self.program_id,
        )
        return address

    async def initialize_counter(self, seed: str = DEFAULT_SEED) -> InitializedCounter:
        try:
            counter = self.derive_counter_address(seed)
            ix = self.program.instruction("initialize", {
                "counter": counter,
                "user": self.wallet.pubkey(),
                "systemProgram": SYSTEM_PROGRAM_ID,
            })
            signature = await self._send(ix)
            await self._confirm_transaction(signature)
        except Exception as e:
            raise SolanaError("Failed to initialize counter", e) from e

        logger.info(
            f"Counter initialized with seed '{seed}'",
            extra={"counter_address": str(counter), "signature": signature},
        )
        return InitializedCounter(
            counter_address=str(counter), seed=seed, signature=signature,
        )

    async def increment_counter(self, counter_address: str) -> IncrementedCounter:
        try:
            counter = Pubkey.from_string(counter_address)
            ix = self.program.instruction("increment", {
                "counter": counter,
                "user": self.wallet.pubkey(),
            })
            signature = await self._send(ix)
            await self._confirm_transaction(signature)
            view = await self.get_counter_data(counter_address)
        except AccountNotFoundError:
            raise
        except Exception as e:
            raise SolanaError("Failed to increment counter", e) from e

        logger.info(
            f"Counter incremented to {view.count}",
            extra={"counter_address": counter_address, "signature": signature},
        )
        return IncrementedCounter(signature=signature, new_count=view.count)

    async def get_counter_data(self, counter_address: str) -> CounterAccountView:
        try:
            counter = Pubkey.from_string(counter_address)
            resp = await self.client.get_account_info(
                counter, commitment=self.commitment,
            )
            account = resp.value
            if account is None or not account.data:
                raise AccountNotFoundError(counter_address)
            fields = self.program.decode_account(COUNTER_ACCOUNT, bytes(account.data))
        except AccountNotFoundError:
            raise
        except Exception as e:
            if "Account does not exist" in str(e):
                raise AccountNotFoundError(counter_address) from e
            raise SolanaError("Failed to fetch counter data", e) from e

        return CounterAccountView(
            authority=str(fields["authority"]), count=str(fields["count"]),
        )

    def get_cluster_info(self) -> ClusterInfo:
        return ClusterInfo(
            cluster=self.config.solana_cluster_url,
            program_id=self.config.program_id,
        )

    def get_wallet_public_key(self) -> Pubkey:
        return self.wallet.pubkey()

    async def close(self) -> None:
        await self.client.close()

    # ─── Transaction plumbing ───────────────────────────────────

    async def _send(self, ix: Instruction) -> str:
        """Sign with the wallet (fee payer) and submit. Returns the signature."""
        blockhash = (await self.client.get_latest_blockhash()).value.blockhash
        message = Message.new_with_blockhash([ix], self.wallet.pubkey(), blockhash)
        tx = Transaction([self.wallet], message, blockhash)
        resp = await self.client.send_transaction(
            tx, opts=TxOpts(preflight_commitment=self.commitment),
        )
        return str(resp.value)

    async def _confirm_transaction(self, signature: str) -> None:
        """Await confirmation and surface any on-chain execution error.

        Confirmed with err → TransactionError carrying the serialized err.
        Confirmation itself failed (timeout, RPC error) → TransactionError, no payload.
        """
        try:
            latest = await self.client.get_latest_blockhash()
            resp = await self.client.confirm_transaction(
                Signature.from_string(signature),
                self.commitment,
                last_valid_block_height=latest.value.last_valid_block_height,
            )
            status = resp.value[0] if resp.value else None
            err = status.err if status is not None else None
        except Exception as e:
            logger.warning(
                f"Confirmation failed: {e}", extra={"signature": signature},
            )
            raise TransactionError("Failed to confirm transaction", signature) from e

        if err is not None:
            raise TransactionError(
                f"Transaction failed: {_serialize_err(err)}", signature,
            )


def _serialize_err(err) -> str:
    """Compact JSON of an execution error, keeping the variant name.

    solders: TransactionErrorInstructionError(0, Custom(6001)) →
    {"InstructionError":[0,{"Custom":6001}]}; fieldless variants → "AccountInUse".
    """
    if isinstance(err, TransactionErrorFieldless):
        return json.dumps(str(err).rsplit(".", 1)[-1])
    to_json = getattr(err, "to_json", None)
    if callable(to_json):
        variant = type(err).__name__.removeprefix("TransactionError")
        return json.dumps({variant: json.loads(to_json())}, separators=(",", ":"))
    try:
        return json.dumps(err, separators=(",", ":"))
    except TypeError:
        return str(err)
