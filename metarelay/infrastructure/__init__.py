"""Infrastructure Layer — IO adapters and cross-cutting concerns.

Invariants:
    - Adapters implement the Protocols in core/repository_protocols.py
    - All SQLAlchemy exceptions surface as DatabaseError, ledger refusals as LedgerError

Design Decisions:
    - SQL and in-memory variants side by side: the executor never knows which it got
"""
