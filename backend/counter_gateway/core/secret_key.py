"""Wallet Secret Parsing — decodes a wallet secret key from its configured encoding.

Invariants:
    - Strategies tried in order: JSON numeric array, base64, base58 — first success wins
    - A value starting with "[" is only ever parsed as a JSON array
    - All failures raise ConfigurationError naming the supported formats

Design Decisions:
    - base64 before base58: kept for compatibility with existing deployments,
      even though some base58 strings also decode as base64 (see DESIGN.md)
    - Pure functions, no I/O: file reading lives in config.py
"""

import base64
import binascii
import json

import base58

from counter_gateway.core.errors import ConfigurationError

SUPPORTED_FORMATS_MESSAGE = (
    "Failed to parse WALLET_KEYPAIR: supported formats are "
    "JSON array, base64, or base58"
)


def parse_json_array(value: str) -> bytes:
    """Parse "[1, 2, ...]" into bytes. Raises ValueError on any malformed input."""
    parsed = json.loads(value)
    if not isinstance(parsed, list):
        raise ValueError("expected a JSON array")
    if not all(isinstance(n, int) and not isinstance(n, bool) for n in parsed):
        raise ValueError("JSON array must contain integers only")
    return bytes(parsed)


def parse_secret_key(value: str) -> bytes:
    """Decode a wallet secret key from JSON array, base64 or base58."""
    trimmed = value.strip()
    if trimmed.startswith("["):
        try:
            return parse_json_array(trimmed)
        except ValueError as e:
            raise ConfigurationError(
                "Failed to parse WALLET_KEYPAIR JSON array",
            ) from e

    try:
        decoded = base64.b64decode(trimmed, validate=True)
        if len(decoded) > 0:
            return decoded
    except (binascii.Error, ValueError):
        pass  # not base64, try base58

    try:
        decoded = base58.b58decode(trimmed)
    except ValueError as e:
        raise ConfigurationError(SUPPORTED_FORMATS_MESSAGE) from e
    if not decoded:
        raise ConfigurationError(SUPPORTED_FORMATS_MESSAGE)
    return decoded
