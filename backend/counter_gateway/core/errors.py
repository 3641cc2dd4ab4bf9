"""Error Hierarchy — typed exceptions for every failure the gateway surfaces over HTTP.

Invariants:
    - Every error carries a code (str), category (ErrorCategory) and http_status (int)
    - to_response() produces the REST envelope {"error": {"message", "details"?}}
    - SDK/network failures are rewrapped by message concatenation, never nested
    - AccountNotFoundError is never rewrapped once raised

Design Decisions:
    - Single hierarchy with CounterGatewayError base: one FastAPI handler catches all
    - details omitted from the envelope when None (mirrors the client contract)
"""

from dataclasses import dataclass, asdict
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and logging."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFIGURATION = "configuration"
    EXTERNAL_API = "external_api"
    TRANSACTION = "transaction"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """One itemized failure, usually a single invalid field."""
    message: str
    field: str | None = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


class CounterGatewayError(Exception):
    """Base exception for all counter gateway errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
        details: list[ErrorDetail] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.details = details

    def to_response(self) -> dict:
        """Convert to the standardized REST error envelope."""
        error: dict = {"message": self.message}
        if self.details is not None:
            error["details"] = [d.to_dict() for d in self.details]
        return {"error": error}


# ─── Client Errors (400-level) ──────────────────────────────────

class RequestValidationFailed(CounterGatewayError):
    """Request body, query or path params failed schema validation."""
    def __init__(self, message: str, details: list[ErrorDetail] | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400, details,
        )


class AccountNotFoundError(CounterGatewayError):
    """The counter account does not exist on-chain."""
    def __init__(self, account_address: str):
        super().__init__(
            f"Account not found: {account_address}",
            "ACCOUNT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, 404,
        )
        self.account_address = account_address


# ─── Chain Errors (500-level) ───────────────────────────────────

class SolanaError(CounterGatewayError):
    """Generic chain-interaction failure; appends the wrapped cause's message."""
    def __init__(self, message: str, original_error: BaseException | None = None):
        if original_error is not None:
            message = f"{message}: {_describe(original_error)}"
        super().__init__(
            message, "SOLANA_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, 500,
        )


class TransactionError(CounterGatewayError):
    """Transaction failed on-chain or could not be confirmed."""
    def __init__(self, message: str, signature: str | None = None):
        if signature:
            message = f"{message}. Transaction signature: {signature}"
        super().__init__(
            message, "TRANSACTION_ERROR", ErrorCategory.TRANSACTION,
            ErrorSeverity.CRITICAL, 500,
        )
        self.signature = signature


class ConfigurationError(CounterGatewayError):
    """Environment or wallet configuration is invalid. Raised at startup."""
    def __init__(self, message: str):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, 500,
        )


def _describe(error: BaseException) -> str:
    """Message text of an exception, falling back to its type name."""
    if isinstance(error, CounterGatewayError):
        return error.message
    return str(error) or type(error).__name__
