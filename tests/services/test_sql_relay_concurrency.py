"""Concurrent Relays on SQL — verifies the ledger serializes debits across sessions.

Invariants:
    - N distinct authorizations relayed at once move exactly N * amount
    - Every settled transfer leaves exactly one Transfer row
    - The same authorization relayed at once settles exactly once

Design Decisions:
    - File-backed SQLite so each session holds its own connection
      (the :memory: database shares one connection and hides interleaving)
"""

import asyncio

import pytest

from metarelay.core.domain_types import UINT256_MAX
from metarelay.core.errors import ReplayError
from metarelay.infrastructure.signature_scheme import sign_personal_digest
from tests.identities import EXECUTOR, RECIPIENT, SENDER, SENDER_KEY, TOKEN


@pytest.fixture
async def funded_sql(file_sql_ledger):
    await file_sql_ledger.mint(TOKEN, SENDER, 10000)
    await file_sql_ledger.approve(TOKEN, SENDER, EXECUTOR, UINT256_MAX)
    return file_sql_ledger


def _signature(executor, amount: int, nonce: int) -> bytes:
    digest = executor.compute_digest(SENDER, amount, RECIPIENT, TOKEN, nonce)
    return sign_personal_digest(SENDER_KEY, digest)


async def test_concurrent_nonces_debit_exactly(file_sql_executor, funded_sql):
    results = await asyncio.gather(*[
        file_sql_executor.transfer(
            SENDER, 10, RECIPIENT, TOKEN, nonce,
            _signature(file_sql_executor, 10, nonce),
        )
        for nonce in range(1, 6)
    ])
    assert len(results) == 5
    assert await funded_sql.balance_of(TOKEN, SENDER) == 9950
    assert await funded_sql.balance_of(TOKEN, RECIPIENT) == 50

    events = await funded_sql.transfer_events(TOKEN)
    transfers = [e for e in events if e.sender == SENDER]
    assert len(transfers) == 5
    assert all(e.recipient == RECIPIENT and e.amount == 10 for e in transfers)


async def test_concurrent_transfer_from_conserves_supply(funded_sql):
    await asyncio.gather(*[
        funded_sql.transfer_from(TOKEN, EXECUTOR, SENDER, RECIPIENT, 7)
        for _ in range(20)
    ])
    sender = await funded_sql.balance_of(TOKEN, SENDER)
    recipient = await funded_sql.balance_of(TOKEN, RECIPIENT)
    assert sender == 10000 - 140
    assert sender + recipient == 10000


async def test_concurrent_finite_allowance_never_overspent(file_sql_ledger):
    await file_sql_ledger.mint(TOKEN, SENDER, 10000)
    await file_sql_ledger.approve(TOKEN, SENDER, EXECUTOR, 30)
    results = await asyncio.gather(
        *[
            file_sql_ledger.transfer_from(TOKEN, EXECUTOR, SENDER, RECIPIENT, 10)
            for _ in range(5)
        ],
        return_exceptions=True,
    )
    assert sum(1 for r in results if r is None) == 3
    assert await file_sql_ledger.allowance(TOKEN, SENDER, EXECUTOR) == 0
    assert await file_sql_ledger.balance_of(TOKEN, RECIPIENT) == 30


async def test_concurrent_duplicates_settle_once(file_sql_executor, funded_sql):
    signature = _signature(file_sql_executor, 10, 1)
    results = await asyncio.gather(
        *[
            file_sql_executor.transfer(SENDER, 10, RECIPIENT, TOKEN, 1, signature)
            for _ in range(5)
        ],
        return_exceptions=True,
    )
    assert sum(1 for r in results if isinstance(r, ReplayError)) == 4
    assert await funded_sql.balance_of(TOKEN, RECIPIENT) == 10
