"""Services Layer — async orchestration of core logic around IO adapters.

Invariants:
    - Services depend on core Protocols, never on concrete infrastructure classes
    - Every state change goes through MetaTransferExecutor

Design Decisions:
    - Executor is stateless aside from injected references
"""
