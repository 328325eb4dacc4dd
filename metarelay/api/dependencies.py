"""Route Dependencies — executor and ledger singletons for FastAPI injection.

Invariants:
    - Exactly one MetaTransferExecutor per process: its claim lock serializes every
      replay check, two executors would each hold their own lock
    - init_relay() runs after init_db() (stores and ledgers need the session manager)

Design Decisions:
    - Module-level singletons initialized in lifespan, same as db_manager
    - Tests override get_executor / get_ledger via app.dependency_overrides
"""

from metarelay.infrastructure.database import DatabaseSessionManager
from metarelay.infrastructure.executed_digest_store import SqlExecutedDigestStore
from metarelay.infrastructure.signature_scheme import Secp256k1SignatureScheme
from metarelay.infrastructure.token_ledger import SqlTokenLedger
from metarelay.services.relay_executor import MetaTransferExecutor

# Singletons (initialized on startup)
executor: MetaTransferExecutor | None = None
ledger: SqlTokenLedger | None = None


def init_relay(
    db: DatabaseSessionManager, executor_address: str, digest_domain: str,
) -> MetaTransferExecutor:
    global executor, ledger
    ledger = SqlTokenLedger(db)
    executor = MetaTransferExecutor(
        store=SqlExecutedDigestStore(db),
        ledger=ledger,
        signature_scheme=Secp256k1SignatureScheme(),
        address=executor_address,
        domain_name=digest_domain,
    )
    return executor


def get_executor() -> MetaTransferExecutor:
    if not executor:
        raise RuntimeError("Relay executor not initialized")
    return executor


def get_ledger() -> SqlTokenLedger:
    if not ledger:
        raise RuntimeError("Token ledger not initialized")
    return ledger
