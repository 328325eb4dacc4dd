"""Ledger Routes — development surface of the token ledger.

Invariants:
    - Path and body addresses normalized to checksum form before reaching the ledger
    - mint and approve act on behalf of the named owner (no caller authentication:
      this surface stands in for a free-mint test token)

Design Decisions:
    - approve lives here, not in the relay: users grant the executor an allowance
      directly on the token, the relay only ever spends it
"""

import logging

from fastapi import APIRouter, Depends, status

from metarelay.api.dependencies import get_ledger
from metarelay.core.repository_protocols import TokenLedger
from metarelay.core.transfer_intent import normalize_address
from metarelay.schemas.transfer import (
    AmountRequest, AmountResponse, ApproveRequest, TransferEventResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ledger", tags=["ledger"])


@router.get("/{token}/balances/{owner}", response_model=AmountResponse)
async def get_balance(
    token: str, owner: str, ledger: TokenLedger = Depends(get_ledger),
):
    token_address = normalize_address(token, "token")
    owner_address = normalize_address(owner, "owner")
    amount = await ledger.balance_of(token_address, owner_address)
    return AmountResponse(token=token_address, owner=owner_address, amount=amount)


@router.get(
    "/{token}/allowances/{owner}/{spender}", response_model=AmountResponse,
)
async def get_allowance(
    token: str, owner: str, spender: str,
    ledger: TokenLedger = Depends(get_ledger),
):
    token_address = normalize_address(token, "token")
    owner_address = normalize_address(owner, "owner")
    spender_address = normalize_address(spender, "spender")
    amount = await ledger.allowance(token_address, owner_address, spender_address)
    return AmountResponse(
        token=token_address, owner=owner_address,
        spender=spender_address, amount=amount,
    )


@router.post(
    "/{token}/mint", response_model=AmountResponse,
    status_code=status.HTTP_201_CREATED,
)
async def mint(
    token: str, body: AmountRequest, ledger: TokenLedger = Depends(get_ledger),
):
    """Free mint: credit amount to owner. Returns the new balance."""
    token_address = normalize_address(token, "token")
    owner_address = normalize_address(body.owner, "owner")
    await ledger.mint(token_address, owner_address, body.amount)
    balance = await ledger.balance_of(token_address, owner_address)
    return AmountResponse(token=token_address, owner=owner_address, amount=balance)


@router.post("/{token}/approve", response_model=AmountResponse)
async def approve(
    token: str, body: ApproveRequest, ledger: TokenLedger = Depends(get_ledger),
):
    """Set the allowance owner grants spender (overwrites, like ERC-20 approve)."""
    token_address = normalize_address(token, "token")
    owner_address = normalize_address(body.owner, "owner")
    spender_address = normalize_address(body.spender, "spender")
    await ledger.approve(token_address, owner_address, spender_address, body.amount)
    return AmountResponse(
        token=token_address, owner=owner_address,
        spender=spender_address, amount=body.amount,
    )


@router.get("/{token}/transfers", response_model=list[TransferEventResponse])
async def list_transfers(token: str, ledger: TokenLedger = Depends(get_ledger)):
    """Transfer events of one token, oldest first. Mints come from the zero address."""
    events = await ledger.transfer_events(normalize_address(token, "token"))
    return [
        TransferEventResponse(
            sender=e.sender, recipient=e.recipient, amount=e.amount,
        )
        for e in events
    ]
