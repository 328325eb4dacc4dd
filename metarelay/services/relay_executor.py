"""Meta-Transfer Executor — verifies a signed intent, consumes it once, moves tokens.

Invariants:
    - Gates run in order and fail fast: validate -> digest -> personal digest ->
      recover -> signer == sender -> claim digest -> ledger transfer
    - Nothing is written before the signer check passes
    - The digest is committed as consumed BEFORE the ledger call; a reentrant
      transfer during the ledger call sees it consumed and gets ReplayError
    - A failed ledger transfer, whatever the exception, does NOT release the digest
      (status ledger_failed); a failure to record that status never masks the ledger error
    - Relayer identity is recorded, never consulted for authorization

Design Decisions:
    - Executor holds references only (store, ledger, scheme): all persistent state lives
      in the injected ExecutedDigestStore, tests swap in fakes
    - asyncio.Lock around claim only, not around the ledger call: the lock must not be
      held across a potentially reentrant collaborator (asyncio.Lock is not reentrant)
    - Burn-on-ledger-failure kept deliberately: executing an authorization at most once
      outranks retrying it; users sign a new nonce instead
"""

import asyncio
import logging
from dataclasses import dataclass

from metarelay.core.compute_digest import (
    DEFAULT_DOMAIN_NAME, digest_hex, digest_intent, domain_separator,
)
from metarelay.core.domain_types import Address, AuthorizationStatus, Digest
from metarelay.core.errors import (
    AuthorizationError, ErrorContext, MetaRelayError, ReplayError,
)
from metarelay.core.personal_message import to_personal_digest
from metarelay.core.repository_protocols import (
    ExecutedDigestStore, SignatureScheme, TokenLedger,
)
from metarelay.core.transfer_intent import build_intent, normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferReceipt:
    """Result of a settled meta-transfer."""
    digest: str
    sender: Address
    recipient: Address
    token: Address
    amount: int
    nonce: int
    relayer: Address | None
    status: AuthorizationStatus


class MetaTransferExecutor:
    """Executes signed transfer intents on behalf of their signers."""

    def __init__(
        self,
        store: ExecutedDigestStore,
        ledger: TokenLedger,
        signature_scheme: SignatureScheme,
        address: str,
        domain_name: str = DEFAULT_DOMAIN_NAME,
    ):
        self._store = store
        self._ledger = ledger
        self._scheme = signature_scheme
        self.domain_name = domain_name
        self._domain = domain_separator(domain_name)
        self._claim_lock = asyncio.Lock()
        # The spender users approve on the token ledger
        self.address = normalize_address(address, "executor_address")

    @property
    def domain(self) -> bytes:
        return self._domain

    def compute_digest(
        self,
        sender: str | bytes,
        amount: int,
        recipient: str | bytes,
        token: str | bytes,
        nonce: int,
    ) -> Digest:
        """Digest a signer must sign for this executor. Read-only."""
        intent = build_intent(sender, amount, recipient, token, nonce)
        return digest_intent(intent, self._domain)

    async def transfer(
        self,
        sender: str | bytes,
        amount: int,
        recipient: str | bytes,
        token: str | bytes,
        nonce: int,
        signature: str | bytes,
        relayer: str | bytes | None = None,
    ) -> TransferReceipt:
        """Relay one signed intent. Raises AuthorizationError, ReplayError or LedgerError."""
        intent = build_intent(sender, amount, recipient, token, nonce)
        relayer_address = (
            normalize_address(relayer, "relayer") if relayer is not None else None
        )
        digest = digest_intent(intent, self._domain)
        hex_digest = digest_hex(digest)
        log_extra = {
            "digest": hex_digest,
            "sender": intent.sender,
            "recipient": intent.recipient,
            "token": intent.token,
            "nonce": intent.nonce,
            "relayer": relayer_address,
        }
        context = ErrorContext(
            digest=hex_digest, sender=intent.sender, relayer=relayer_address,
        )

        signed_digest = to_personal_digest(digest)
        try:
            recovered = self._scheme.recover(signed_digest, signature)
        except AuthorizationError as e:
            e.context = context
            logger.warning(
                f"Rejected transfer: {e.message}",
                extra={**log_extra, "error_code": e.code},
            )
            raise
        if recovered != intent.sender:
            logger.warning(
                "Rejected transfer: signer mismatch",
                extra={**log_extra, "error_code": "AUTHORIZATION_FAILED"},
            )
            raise AuthorizationError(context=context)

        async with self._claim_lock:
            claimed = await self._store.claim(digest, intent, relayer_address)
        if not claimed:
            logger.warning(
                "Rejected transfer: already executed",
                extra={**log_extra, "error_code": "ALREADY_EXECUTED"},
            )
            raise ReplayError(hex_digest, context)

        try:
            await self._ledger.transfer_from(
                intent.token, self.address, intent.sender,
                intent.recipient, intent.amount,
            )
        except Exception as e:
            if isinstance(e, MetaRelayError):
                e.context = context
                error_code = e.code
            else:
                error_code = "INTERNAL_ERROR"
            logger.error(
                f"Ledger transfer failed, authorization consumed: {e}",
                extra={**log_extra, "error_code": error_code},
            )
            await self._record_failure(digest, error_code, log_extra)
            raise

        await self._store.record_outcome(digest, AuthorizationStatus.SETTLED)
        logger.info(
            "Meta-transfer settled",
            extra={**log_extra, "amount": intent.amount, "status": "settled"},
        )
        return TransferReceipt(
            digest=hex_digest,
            sender=intent.sender,
            recipient=intent.recipient,
            token=intent.token,
            amount=intent.amount,
            nonce=intent.nonce,
            relayer=relayer_address,
            status=AuthorizationStatus.SETTLED,
        )

    async def status(self, digest: Digest) -> dict | None:
        """Stored record of a consumed authorization, or None."""
        return await self._store.get(digest)

    async def is_executed(self, digest: Digest) -> bool:
        return await self._store.is_executed(digest)

    async def _record_failure(
        self, digest: Digest, error_code: str, log_extra: dict,
    ) -> None:
        """Mark the digest ledger_failed. The ledger error stays the one raised."""
        try:
            await self._store.record_outcome(
                digest, AuthorizationStatus.LEDGER_FAILED, error_code,
            )
        except Exception:
            logger.exception(
                "Could not record ledger failure, digest stays consumed",
                extra={**log_extra, "error_code": error_code},
            )
