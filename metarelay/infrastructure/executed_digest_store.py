"""Executed Digest Stores — the replay-protection set, SQL-backed and in-memory.

Invariants:
    - claim() is an atomic test-and-set: exactly one caller per digest gets True
    - claim() has committed the row before it returns True
    - Entries are never removed; record_outcome only updates status
    - get() returns plain dicts (the same shape from both stores)

Design Decisions:
    - Primary-key collision as the replay signal in SQL: the database serializes
      concurrent inserts, no SELECT-then-INSERT race
    - In-memory claim contains no await: under asyncio it cannot interleave
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from metarelay.core.compute_digest import digest_hex
from metarelay.core.domain_types import Address, AuthorizationStatus, Digest
from metarelay.core.transfer_intent import TransferIntent
from metarelay.infrastructure.database import DatabaseSessionManager
from metarelay.models.executed_authorization import ExecutedAuthorization

logger = logging.getLogger(__name__)


def _record(
    digest: Digest, intent: TransferIntent, relayer: Address | None,
) -> dict:
    return {
        "digest": digest_hex(digest),
        "sender": intent.sender,
        "recipient": intent.recipient,
        "token": intent.token,
        "amount": intent.amount,
        "nonce": intent.nonce,
        "relayer": relayer,
        "status": AuthorizationStatus.CONSUMED.value,
        "error_code": None,
        "executed_at": datetime.now(timezone.utc),
        "settled_at": None,
    }


class InMemoryExecutedDigestStore:
    """Dict-backed executed set. Lives as long as the process."""

    def __init__(self):
        self._entries: dict[bytes, dict] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def is_executed(self, digest: Digest) -> bool:
        return digest in self._entries

    async def claim(
        self, digest: Digest, intent: TransferIntent, relayer: Address | None,
    ) -> bool:
        if digest in self._entries:
            return False
        self._entries[digest] = _record(digest, intent, relayer)
        return True

    async def record_outcome(
        self, digest: Digest, status: AuthorizationStatus,
        error_code: str | None = None,
    ) -> None:
        entry = self._entries[digest]
        entry["status"] = status.value
        entry["error_code"] = error_code
        entry["settled_at"] = datetime.now(timezone.utc)

    async def get(self, digest: Digest) -> dict | None:
        entry = self._entries.get(digest)
        return dict(entry) if entry else None


class SqlExecutedDigestStore:
    """Executed set persisted in the executed_authorizations table."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def is_executed(self, digest: Digest) -> bool:
        async with self._db.session() as session:
            row = await session.get(ExecutedAuthorization, digest_hex(digest))
            return row is not None

    async def claim(
        self, digest: Digest, intent: TransferIntent, relayer: Address | None,
    ) -> bool:
        data = _record(digest, intent, relayer)
        data["amount"] = str(intent.amount)
        data["nonce"] = str(intent.nonce)
        async with self._db.session() as session:
            session.add(ExecutedAuthorization(**data))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(
                    "Digest already executed",
                    extra={"digest": data["digest"]},
                )
                return False
        return True

    async def record_outcome(
        self, digest: Digest, status: AuthorizationStatus,
        error_code: str | None = None,
    ) -> None:
        async with self._db.session() as session:
            row = await session.get(ExecutedAuthorization, digest_hex(digest))
            row.status = status.value
            row.error_code = error_code
            row.settled_at = datetime.now(timezone.utc)
            await session.commit()

    async def get(self, digest: Digest) -> dict | None:
        async with self._db.session() as session:
            result = await session.execute(
                select(ExecutedAuthorization).where(
                    ExecutedAuthorization.digest == digest_hex(digest),
                ),
            )
            row = result.scalar_one_or_none()
            if not row:
                return None
            return {
                "digest": row.digest,
                "sender": row.sender,
                "recipient": row.recipient,
                "token": row.token,
                "amount": int(row.amount),
                "nonce": int(row.nonce),
                "relayer": row.relayer,
                "status": row.status,
                "error_code": row.error_code,
                "executed_at": row.executed_at,
                "settled_at": row.settled_at,
            }
