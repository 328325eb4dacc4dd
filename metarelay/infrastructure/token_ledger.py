"""Token Ledgers — ERC-20 style balances and allowances, in-memory and SQL-backed.

Invariants:
    - transfer_from checks allowance first, then balance; on failure nothing changes
    - An allowance of UINT256_MAX is infinite and never decremented
    - Balances never go negative and never exceed UINT256_MAX
    - Every successful transfer_from or mint appends a Transfer event
    - SQL mutations are serialized: no two read-modify-write cycles overlap

Design Decisions:
    - The real token is an external collaborator; these ledgers stand in for it with
      the same debit/credit/allowance semantics (OpenZeppelin ERC20)
    - mint() mirrors a free-mint faucet token used in development and tests
    - SQL amounts as decimal strings: uint256 overflows every SQL integer type
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from metarelay.core.domain_types import UINT256_MAX, Address
from metarelay.core.errors import (
    InsufficientAllowanceError, InsufficientBalanceError, LedgerError,
)
from metarelay.infrastructure.database import DatabaseSessionManager
from metarelay.models.token_account import TokenAllowance, TokenBalance, TokenTransfer

logger = logging.getLogger(__name__)

ZERO_ADDRESS = Address("0x0000000000000000000000000000000000000000")


@dataclass(frozen=True)
class TransferEvent:
    """ERC-20 Transfer(from, to, value) log entry."""
    token: Address
    sender: Address
    recipient: Address
    amount: int


def _spend_allowance(
    owner: Address, spender: Address, allowance: int, amount: int,
) -> int:
    """Return the allowance left after spending amount (pure)."""
    if allowance < amount:
        raise InsufficientAllowanceError(owner, spender, allowance, amount)
    if allowance == UINT256_MAX:
        return allowance
    return allowance - amount


def _check_credit(balance: int, amount: int) -> int:
    if balance + amount > UINT256_MAX:
        raise LedgerError("Balance overflow", "BALANCE_OVERFLOW")
    return balance + amount


class InMemoryTokenLedger:
    """Dict-backed multi-token ledger."""

    def __init__(self):
        self._balances: dict[tuple[str, str], int] = {}
        self._allowances: dict[tuple[str, str, str], int] = {}
        self.events: list[TransferEvent] = []

    async def balance_of(self, token: Address, owner: Address) -> int:
        return self._balances.get((token, owner), 0)

    async def allowance(
        self, token: Address, owner: Address, spender: Address,
    ) -> int:
        return self._allowances.get((token, owner, spender), 0)

    async def transfer_events(self, token: Address) -> list[TransferEvent]:
        return [e for e in self.events if e.token == token]

    async def approve(
        self, token: Address, owner: Address, spender: Address, amount: int,
    ) -> None:
        self._allowances[(token, owner, spender)] = amount

    async def mint(self, token: Address, owner: Address, amount: int) -> None:
        balance = self._balances.get((token, owner), 0)
        self._balances[(token, owner)] = _check_credit(balance, amount)
        self.events.append(TransferEvent(token, ZERO_ADDRESS, owner, amount))

    async def transfer_from(
        self, token: Address, spender: Address, owner: Address,
        recipient: Address, amount: int,
    ) -> None:
        allowance = self._allowances.get((token, owner, spender), 0)
        remaining = _spend_allowance(owner, spender, allowance, amount)
        balance = self._balances.get((token, owner), 0)
        if balance < amount:
            raise InsufficientBalanceError(owner, balance, amount)

        debited = balance - amount
        if recipient == owner:
            credited = _check_credit(debited, amount)
        else:
            credited = _check_credit(self._balances.get((token, recipient), 0), amount)

        self._allowances[(token, owner, spender)] = remaining
        self._balances[(token, owner)] = debited
        self._balances[(token, recipient)] = credited
        self.events.append(TransferEvent(token, owner, recipient, amount))


class SqlTokenLedger:
    """Ledger persisted in token_balances / token_allowances / token_transfers.

    Mutations are serialized by a per-instance asyncio.Lock (one ledger per process)
    and rows are read FOR UPDATE, so concurrent relays never overwrite each other's
    debits. SQLite ignores FOR UPDATE; the lock covers it there.
    """

    def __init__(self, db: DatabaseSessionManager):
        self._db = db
        self._write_lock = asyncio.Lock()

    async def balance_of(self, token: Address, owner: Address) -> int:
        async with self._db.session() as session:
            row = await session.get(TokenBalance, (token, owner))
            return int(row.amount) if row else 0

    async def allowance(
        self, token: Address, owner: Address, spender: Address,
    ) -> int:
        async with self._db.session() as session:
            row = await session.get(TokenAllowance, (token, owner, spender))
            return int(row.amount) if row else 0

    async def transfer_events(self, token: Address) -> list[TransferEvent]:
        async with self._db.session() as session:
            result = await session.execute(
                select(TokenTransfer)
                .where(TokenTransfer.token == token)
                .order_by(TokenTransfer.id),
            )
            return [
                TransferEvent(
                    Address(row.token), Address(row.sender),
                    Address(row.recipient), int(row.amount),
                )
                for row in result.scalars()
            ]

    async def approve(
        self, token: Address, owner: Address, spender: Address, amount: int,
    ) -> None:
        async with self._write_lock, self._db.session() as session:
            row = await self._allowance_row(session, token, owner, spender)
            if row:
                row.amount = str(amount)
            else:
                session.add(TokenAllowance(
                    token=token, owner=owner, spender=spender, amount=str(amount),
                ))
            await session.commit()
        logger.info(
            "Allowance approved",
            extra={"token": token, "sender": owner, "amount": amount},
        )

    async def mint(self, token: Address, owner: Address, amount: int) -> None:
        async with self._write_lock, self._db.session() as session:
            row = await self._balance_row(session, token, owner)
            balance = int(row.amount) if row else 0
            self._set_balance(
                session, row, token, owner, _check_credit(balance, amount),
            )
            self._record_transfer(session, token, ZERO_ADDRESS, owner, amount)
            await session.commit()
        logger.info(
            "Tokens minted",
            extra={"token": token, "recipient": owner, "amount": amount},
        )

    async def transfer_from(
        self, token: Address, spender: Address, owner: Address,
        recipient: Address, amount: int,
    ) -> None:
        async with self._write_lock, self._db.session() as session:
            allowance_row = await self._allowance_row(session, token, owner, spender)
            allowance = int(allowance_row.amount) if allowance_row else 0
            remaining = _spend_allowance(owner, spender, allowance, amount)
            owner_row = await self._balance_row(session, token, owner)
            balance = int(owner_row.amount) if owner_row else 0
            if balance < amount:
                raise InsufficientBalanceError(owner, balance, amount)

            if allowance_row:
                allowance_row.amount = str(remaining)
            owner_row = self._set_balance(
                session, owner_row, token, owner, balance - amount,
            )
            if recipient == owner:
                recipient_row = owner_row
            else:
                recipient_row = await self._balance_row(session, token, recipient)
            credited = int(recipient_row.amount) if recipient_row else 0
            self._set_balance(
                session, recipient_row, token, recipient,
                _check_credit(credited, amount),
            )
            self._record_transfer(session, token, owner, recipient, amount)
            await session.commit()
        logger.info(
            "Transfer",
            extra={
                "token": token, "sender": owner, "recipient": recipient,
                "spender": spender, "amount": amount,
            },
        )

    async def _balance_row(
        self, session: AsyncSession, token: Address, owner: Address,
    ) -> TokenBalance | None:
        result = await session.execute(
            select(TokenBalance)
            .where(TokenBalance.token == token, TokenBalance.owner == owner)
            .with_for_update(),
        )
        return result.scalar_one_or_none()

    async def _allowance_row(
        self, session: AsyncSession, token: Address, owner: Address,
        spender: Address,
    ) -> TokenAllowance | None:
        result = await session.execute(
            select(TokenAllowance)
            .where(
                TokenAllowance.token == token,
                TokenAllowance.owner == owner,
                TokenAllowance.spender == spender,
            )
            .with_for_update(),
        )
        return result.scalar_one_or_none()

    def _set_balance(
        self, session: AsyncSession, row: TokenBalance | None,
        token: Address, owner: Address, amount: int,
    ) -> TokenBalance:
        if row:
            row.amount = str(amount)
            return row
        row = TokenBalance(token=token, owner=owner, amount=str(amount))
        session.add(row)
        return row

    def _record_transfer(
        self, session: AsyncSession, token: Address, sender: Address,
        recipient: Address, amount: int,
    ) -> None:
        session.add(TokenTransfer(
            token=token, sender=sender, recipient=recipient, amount=str(amount),
        ))
