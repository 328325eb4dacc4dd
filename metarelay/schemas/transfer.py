"""Transfer Schemas — Pydantic models for the relay and ledger API boundaries.

Invariants:
    - Addresses are 0x + 40 hex chars (checksum normalization happens in core)
    - amount/nonce accept JSON ints or decimal strings, bounded 0..2**256-1
    - Responses render uint256 values as decimal strings (JS clients lose precision on ints)

Design Decisions:
    - Uint256 as an Annotated type with a before-validator: one rule, reused by every field
    - Signature kept as hex string: decoding and length checks belong to core/signature.py
"""

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer

from metarelay.core.domain_types import UINT256_MAX


def _parse_uint256(v: object) -> int:
    if isinstance(v, bool):
        raise ValueError("must be an integer, not a boolean")
    if isinstance(v, str):
        v = v.strip()
        if not v.isdigit():
            raise ValueError("must be a non-negative decimal integer")
        v = int(v)
    if not isinstance(v, int):
        raise ValueError("must be an integer")
    if v < 0 or v > UINT256_MAX:
        raise ValueError("must be within 0..2**256-1")
    return v


Uint256 = Annotated[
    int,
    BeforeValidator(_parse_uint256),
    PlainSerializer(lambda v: str(v), return_type=str),
]
HexAddress = Annotated[str, Field(pattern=r"^0x[0-9a-fA-F]{40}$")]


class TransferIntentRequest(BaseModel):
    """Intent fields — enough to compute the digest a signer must sign."""
    sender: HexAddress
    amount: Uint256
    recipient: HexAddress
    token: HexAddress
    nonce: Uint256


class RelayTransferRequest(TransferIntentRequest):
    """Signed intent submitted by a relayer."""
    signature: str = Field(pattern=r"^0x[0-9a-fA-F]+$", max_length=2 + 2 * 65)
    relayer: HexAddress | None = None


class DigestResponse(BaseModel):
    digest: str
    personal_digest: str


class TransferReceiptResponse(BaseModel):
    """Settled meta-transfer."""
    digest: str
    sender: str
    recipient: str
    token: str
    amount: Uint256
    nonce: Uint256
    relayer: str | None
    status: str


class AuthorizationRecordResponse(TransferReceiptResponse):
    """Stored state of a consumed digest (any status)."""
    error_code: str | None = None
    executed_at: str
    settled_at: str | None = None


class AmountRequest(BaseModel):
    """Ledger mutation body (mint)."""
    owner: HexAddress
    amount: Uint256


class ApproveRequest(BaseModel):
    """Ledger allowance body (approve)."""
    owner: HexAddress
    spender: HexAddress
    amount: Uint256


class AmountResponse(BaseModel):
    token: str
    owner: str
    spender: str | None = None
    amount: Uint256


class TransferEventResponse(BaseModel):
    """Transfer(from, to, value) as recorded by the ledger."""
    sender: str
    recipient: str
    amount: Uint256
