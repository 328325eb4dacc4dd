"""Error Hierarchy — typed, categorized exceptions for all MetaRelay failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Authorization, replay and ledger errors are terminal for the digest that raised them
    - to_response() produces the REST envelope
    - No private keys or raw signatures leaked in messages

Design Decisions:
    - Single hierarchy with MetaRelayError base: FastAPI global handler catches all
    - InvalidSignatureError subclasses AuthorizationError: an unrecoverable signature
      can never authorize, callers that only care about "not authorized" catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    CONFLICT = "conflict"
    LEDGER = "ledger"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    digest: str | None = None
    sender: str | None = None
    relayer: str | None = None
    debug_info: dict[str, Any] | None = None


class MetaRelayError(Exception):
    """Base exception for all MetaRelay errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "digest": self.context.digest,
                    "sender": self.context.sender,
                    "relayer": self.context.relayer,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class IntentValidationError(MetaRelayError):
    """A transfer intent field is malformed or out of range."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class AuthorizationError(MetaRelayError):
    """Recovered signer does not match the claimed sender."""
    def __init__(
        self,
        message: str = "Signature does not match the claimed sender.",
        code: str = "AUTHORIZATION_FAILED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context, 403,
        )


class InvalidSignatureError(AuthorizationError):
    """Signature bytes are malformed and no signer can be recovered."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid signature: {reason}", "INVALID_SIGNATURE", context,
        )
        self.reason = reason


class ReplayError(MetaRelayError):
    """Digest was already executed. Sign a new intent with a different nonce."""
    def __init__(self, digest: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.digest = digest
        super().__init__(
            "Already executed!",
            "ALREADY_EXECUTED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.digest = digest


class LedgerError(MetaRelayError):
    """Token ledger refused the transfer."""
    def __init__(
        self,
        message: str,
        code: str = "LEDGER_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.LEDGER,
            ErrorSeverity.ERROR, context, 422,
        )


class InsufficientBalanceError(LedgerError):
    """Owner balance is below the transfer amount."""
    def __init__(
        self, owner: str, balance: int, amount: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Transfer amount {amount} exceeds balance {balance} of {owner}",
            "INSUFFICIENT_BALANCE", context,
        )
        self.owner = owner
        self.balance = balance
        self.amount = amount


class InsufficientAllowanceError(LedgerError):
    """Spender allowance is below the transfer amount."""
    def __init__(
        self, owner: str, spender: str, allowance: int, amount: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Transfer amount {amount} exceeds allowance {allowance} "
            f"granted by {owner} to {spender}",
            "INSUFFICIENT_ALLOWANCE", context,
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.amount = amount


class ResourceNotFoundError(MetaRelayError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(MetaRelayError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
