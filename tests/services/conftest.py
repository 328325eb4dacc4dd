"""Service test fixtures — executors over fakes, SQL-backed adapters, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database and fresh in-memory stores
    - get_executor / get_ledger overridden to use the test database
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for adapter and route tests
    - Route tests use the real secp256k1 scheme; executor unit tests use FakeSignatureScheme
"""

import pytest
from httpx import ASGITransport, AsyncClient

from metarelay.api.dependencies import get_executor, get_ledger
from metarelay.db.base import Base
from metarelay.infrastructure.database import DatabaseSessionManager
from metarelay.infrastructure.executed_digest_store import (
    InMemoryExecutedDigestStore, SqlExecutedDigestStore,
)
from metarelay.infrastructure.signature_scheme import Secp256k1SignatureScheme
from metarelay.infrastructure.token_ledger import InMemoryTokenLedger, SqlTokenLedger
from metarelay.main import app
from metarelay.services.relay_executor import MetaTransferExecutor
import metarelay.infrastructure.database as db_module
import metarelay.models  # noqa: F401
from tests.identities import EXECUTOR
from tests.services.fake_signer import FakeSignatureScheme


@pytest.fixture
def store():
    return InMemoryExecutedDigestStore()


@pytest.fixture
def ledger():
    return InMemoryTokenLedger()


@pytest.fixture
def fake_scheme():
    return FakeSignatureScheme()


@pytest.fixture
def executor(store, ledger, fake_scheme):
    return MetaTransferExecutor(store, ledger, fake_scheme, EXECUTOR)


@pytest.fixture
async def test_db_manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await manager.dispose()


@pytest.fixture
def sql_store(test_db_manager):
    return SqlExecutedDigestStore(test_db_manager)


@pytest.fixture
def sql_ledger(test_db_manager):
    return SqlTokenLedger(test_db_manager)


@pytest.fixture
def sql_executor(sql_store, sql_ledger):
    return MetaTransferExecutor(
        sql_store, sql_ledger, Secp256k1SignatureScheme(), EXECUTOR,
    )


@pytest.fixture
async def client(test_db_manager, sql_executor, sql_ledger):
    """FastAPI test client with relay dependencies overridden."""
    app.dependency_overrides[get_executor] = lambda: sql_executor
    app.dependency_overrides[get_ledger] = lambda: sql_ledger

    original_manager = db_module.db_manager
    db_module.db_manager = test_db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def file_db_manager(tmp_path):
    """File-backed SQLite: every session gets its own connection, so races are real."""
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'relay.db'}")
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def file_sql_store(file_db_manager):
    return SqlExecutedDigestStore(file_db_manager)


@pytest.fixture
def file_sql_ledger(file_db_manager):
    return SqlTokenLedger(file_db_manager)


@pytest.fixture
def file_sql_executor(file_sql_store, file_sql_ledger):
    return MetaTransferExecutor(
        file_sql_store, file_sql_ledger, Secp256k1SignatureScheme(), EXECUTOR,
    )
