"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - ExecutedDigestStore.claim is an atomic test-and-set; entries are never removed
    - TokenLedger.transfer_from raises LedgerError subclasses, never returns False
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in store/ledger Protocols: implementations do IO
    - SignatureScheme is sync: recovery is CPU-only, and a deterministic fake
      can stand in for secp256k1 in executor tests
"""

from typing import Protocol

from metarelay.core.domain_types import Address, AuthorizationStatus, Digest
from metarelay.core.transfer_intent import TransferIntent


class SignatureScheme(Protocol):
    """Recovers the identity that signed a (personal-message) digest."""
    def recover(self, signed_digest: bytes, signature: str | bytes) -> Address: ...


class ExecutedDigestStore(Protocol):
    """Contract for the executed-authorization set — implemented by shell."""
    async def is_executed(self, digest: Digest) -> bool: ...
    async def claim(
        self, digest: Digest, intent: TransferIntent, relayer: Address | None,
    ) -> bool: ...
    async def record_outcome(
        self, digest: Digest, status: AuthorizationStatus,
        error_code: str | None = None,
    ) -> None: ...
    async def get(self, digest: Digest) -> dict | None: ...


class TokenLedger(Protocol):
    """Contract for the fungible-token ledger — implemented by shell."""
    async def balance_of(self, token: Address, owner: Address) -> int: ...
    async def allowance(
        self, token: Address, owner: Address, spender: Address,
    ) -> int: ...
    async def transfer_from(
        self, token: Address, spender: Address, owner: Address,
        recipient: Address, amount: int,
    ) -> None: ...
    async def approve(
        self, token: Address, owner: Address, spender: Address, amount: int,
    ) -> None: ...
    async def mint(self, token: Address, owner: Address, amount: int) -> None: ...
    async def transfer_events(self, token: Address) -> list: ...