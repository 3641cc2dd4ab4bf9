"""Counter Program Handle — IDL-driven instruction builder and account decoder.

Invariants:
    - Instruction data starts with sha256("global:<name>")[:8] (Anchor convention)
    - Account data starts with sha256("account:<Name>")[:8]; mismatch raises ValueError
    - Instruction accounts are ordered exactly as the IDL lists them
    - Account fields are Borsh-decoded in IDL order (little-endian, fixed width)

Design Decisions:
    - Reads the bundled IDL at construction: the on-chain layout stays data, not code
    - Only the primitive field types the counter program uses are supported
"""

import hashlib
import json
import struct
from pathlib import Path
from typing import Any

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

_FIXED_TYPES = {
    "u8": "<B", "i8": "<b",
    "u16": "<H", "i16": "<h",
    "u32": "<I", "i32": "<i",
    "u64": "<Q", "i64": "<q",
    "bool": "<?",
}
_WIDE_TYPES = {"u128": (16, False), "i128": (16, True)}
_PUBKEY_TYPES = ("publicKey", "pubkey")


def instruction_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{_snake(name)}".encode()).digest()[:8]


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


def _snake(name: str) -> str:
    """camelCase → snake_case, as Anchor hashes instruction names."""
    out = []
    for ch in name:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out).lstrip("_")


class CounterProgram:
    """Program handle bound to a program id and its interface definition."""

    def __init__(self, idl: dict, program_id: Pubkey):
        self.idl = idl
        self.program_id = program_id
        self._instructions = {ix["name"]: ix for ix in idl.get("instructions", [])}
        self._accounts = {acc["name"]: acc for acc in idl.get("accounts", [])}

    @classmethod
    def from_file(cls, path: Path | str, program_id: Pubkey) -> "CounterProgram":
        idl = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(idl, program_id)

    def instruction(self, name: str, accounts: dict[str, Pubkey]) -> Instruction:
        """Build an argument-less instruction with accounts resolved by IDL name."""
        spec = self._instructions.get(name)
        if spec is None:
            raise ValueError(f"Unknown instruction: {name}")
        metas = []
        for acc in spec["accounts"]:
            pubkey = accounts.get(acc["name"])
            if pubkey is None:
                raise ValueError(f"Missing account '{acc['name']}' for {name}")
            metas.append(AccountMeta(
                pubkey=pubkey,
                is_signer=bool(acc.get("isSigner")),
                is_writable=bool(acc.get("isMut")),
            ))
        return Instruction(self.program_id, instruction_discriminator(name), metas)

    def decode_account(self, name: str, data: bytes) -> dict[str, Any]:
        """Decode raw account data into a dict of field name → value."""
        spec = self._accounts.get(name)
        if spec is None:
            raise ValueError(f"Unknown account type: {name}")
        if data[:8] != account_discriminator(name):
            raise ValueError(f"Invalid account discriminator for {name}")

        offset = 8
        decoded: dict[str, Any] = {}
        for field in spec["type"]["fields"]:
            value, offset = _read_field(field["type"], data, offset)
            decoded[field["name"]] = value
        return decoded


def _read_field(type_name: str, data: bytes, offset: int) -> tuple[Any, int]:
    if type_name in _PUBKEY_TYPES:
        end = offset + 32
        if end > len(data):
            raise ValueError("Account data too short")
        return Pubkey.from_bytes(data[offset:end]), end
    if type_name in _FIXED_TYPES:
        fmt = _FIXED_TYPES[type_name]
        end = offset + struct.calcsize(fmt)
        if end > len(data):
            raise ValueError("Account data too short")
        return struct.unpack_from(fmt, data, offset)[0], end
    if type_name in _WIDE_TYPES:
        size, signed = _WIDE_TYPES[type_name]
        end = offset + size
        if end > len(data):
            raise ValueError("Account data too short")
        return int.from_bytes(data[offset:end], "little", signed=signed), end
    raise ValueError(f"Unsupported field type: {type_name}")
