"""Transfer Routes — digest query, signed-intent relay, authorization lookup.

Invariants:
    - POST /transfers/digest is read-only: it never touches the executed set
    - POST /transfers returns 201 only when the ledger transfer settled
    - Authorization, replay and ledger failures propagate as MetaRelayError
      (global handler maps them to 403 / 409 / 422)
    - GET /transfers/{digest} reports consumed digests in every status, 404 otherwise

Design Decisions:
    - Routes stay thin: all gates live in MetaTransferExecutor
    - The relayer is whoever the body names (or nobody): identity of the HTTP caller
      never takes part in authorization
"""

import logging
import re

from fastapi import APIRouter, Depends, status

from metarelay.api.dependencies import get_executor
from metarelay.core.compute_digest import digest_hex
from metarelay.core.domain_types import Digest
from metarelay.core.errors import IntentValidationError, ResourceNotFoundError
from metarelay.core.personal_message import to_personal_digest
from metarelay.schemas.transfer import (
    AuthorizationRecordResponse, DigestResponse, RelayTransferRequest,
    TransferIntentRequest, TransferReceiptResponse,
)
from metarelay.services.relay_executor import MetaTransferExecutor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])

_DIGEST_HEX = re.compile(r"^0x[0-9a-fA-F]{64}$")


def parse_digest(value: str) -> Digest:
    """0x-prefixed 32-byte hex -> Digest, or IntentValidationError."""
    if not _DIGEST_HEX.match(value):
        raise IntentValidationError(
            "digest must be 0x followed by 64 hex characters", "digest",
        )
    return Digest(bytes.fromhex(value[2:]))


@router.post("/digest", response_model=DigestResponse)
async def compute_transfer_digest(
    body: TransferIntentRequest,
    executor: MetaTransferExecutor = Depends(get_executor),
):
    """Bytes a signer must sign (as a personal message) to authorize this intent."""
    digest = executor.compute_digest(
        body.sender, body.amount, body.recipient, body.token, body.nonce,
    )
    return DigestResponse(
        digest=digest_hex(digest),
        personal_digest=digest_hex(to_personal_digest(digest)),
    )


@router.post(
    "", response_model=TransferReceiptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def relay_transfer(
    body: RelayTransferRequest,
    executor: MetaTransferExecutor = Depends(get_executor),
):
    """Execute a signed intent on behalf of its signer."""
    receipt = await executor.transfer(
        body.sender, body.amount, body.recipient, body.token, body.nonce,
        body.signature, relayer=body.relayer,
    )
    return TransferReceiptResponse(
        digest=receipt.digest,
        sender=receipt.sender,
        recipient=receipt.recipient,
        token=receipt.token,
        amount=receipt.amount,
        nonce=receipt.nonce,
        relayer=receipt.relayer,
        status=receipt.status.value,
    )


@router.get("/{digest}", response_model=AuthorizationRecordResponse)
async def get_authorization(
    digest: str, executor: MetaTransferExecutor = Depends(get_executor),
):
    """Stored record of a consumed authorization."""
    record = await executor.status(parse_digest(digest))
    if not record:
        raise ResourceNotFoundError("Authorization", digest)
    settled_at = record["settled_at"]
    return AuthorizationRecordResponse(
        **{
            **record,
            "executed_at": record["executed_at"].isoformat(),
            "settled_at": settled_at.isoformat() if settled_at else None,
        },
    )
