"""Token Account ORM — balances and allowances for the development token ledger.

Invariants:
    - (token, owner) unique for balances; (token, owner, spender) unique for allowances
    - token_transfers is append-only, ordered by id
    - amount stored as decimal string, always within 0..2**256-1

Design Decisions:
    - Composite primary keys for balances and allowances: every lookup is by the natural key
    - Surrogate autoincrement id for transfers: the same (from, to, value) may repeat
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from metarelay.db.base import Base


class TokenBalance(Base):
    """Balance of one owner in one token contract."""
    __tablename__ = "token_balances"

    token: Mapped[str] = mapped_column(String(42), primary_key=True)
    owner: Mapped[str] = mapped_column(String(42), primary_key=True)
    amount: Mapped[str] = mapped_column(String(78), nullable=False, default="0")


class TokenAllowance(Base):
    """Amount a spender may move out of an owner's balance."""
    __tablename__ = "token_allowances"

    token: Mapped[str] = mapped_column(String(42), primary_key=True)
    owner: Mapped[str] = mapped_column(String(42), primary_key=True)
    spender: Mapped[str] = mapped_column(String(42), primary_key=True)
    amount: Mapped[str] = mapped_column(String(78), nullable=False, default="0")


class TokenTransfer(Base):
    """Transfer(from, to, value) log entry. Mints use the zero address as sender."""
    __tablename__ = "token_transfers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    sender: Mapped[str] = mapped_column(String(42), nullable=False)
    recipient: Mapped[str] = mapped_column(String(42), nullable=False)
    amount: Mapped[str] = mapped_column(String(78), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
