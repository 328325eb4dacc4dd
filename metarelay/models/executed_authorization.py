"""ExecutedAuthorization ORM — the persistent executed-digest set.

Invariants:
    - digest (0x-hex, 66 chars) is the primary key: a second insert of the same
      digest violates the key, which is what makes claim() atomic
    - Rows are never deleted; status only moves consumed -> settled | ledger_failed
    - amount and nonce stored as decimal strings (uint256)

Design Decisions:
    - Intent fields denormalized onto the row: the status endpoint answers
      "what did this digest authorize" without the signer's help
    - relayer recorded for observability only, it never takes part in authorization
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from metarelay.db.base import Base


class ExecutedAuthorization(Base):
    """One consumed (digest) authorization."""
    __tablename__ = "executed_authorizations"

    digest: Mapped[str] = mapped_column(String(66), primary_key=True)
    sender: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    recipient: Mapped[str] = mapped_column(String(42), nullable=False)
    token: Mapped[str] = mapped_column(String(42), nullable=False)
    amount: Mapped[str] = mapped_column(String(78), nullable=False)
    nonce: Mapped[str] = mapped_column(String(78), nullable=False)
    relayer: Mapped[str | None] = mapped_column(String(42), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="consumed",
    )
    error_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    executed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    settled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
