"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Address is always an EIP-55 checksum string (normalized at the intent boundary)
    - Digest is always exactly DIGEST_BYTES long
    - uint256 values are bounded 0..UINT256_MAX
    - All valid authorization states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB status column without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Address = NewType("Address", str)
Digest = NewType("Digest", bytes)


# ─── Encoding Widths ─────────────────────────────────────────────

ADDRESS_BYTES: int = 20
DIGEST_BYTES: int = 32
SIGNATURE_BYTES: int = 65
UINT256_MAX: int = 2**256 - 1


# ─── State Enums ─────────────────────────────────────────────────

class AuthorizationStatus(str, Enum):
    """Lifecycle of a consumed authorization. Never returns to unconsumed."""
    CONSUMED = "consumed"
    SETTLED = "settled"
    LEDGER_FAILED = "ledger_failed"
