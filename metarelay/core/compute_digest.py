"""Digest Builder — deterministic keccak-256 digest of a transfer intent.

Invariants:
    - compute_digest is PURE: same tuple -> same 32 bytes, across calls and processes
    - Encoding is fixed width: domain(32) | sender(20) | amount(32) | recipient(20) | token(20) | nonce(32)
    - Changing any single field changes the digest

Design Decisions:
    - abi.encodePacked layout via eth_abi: signers in any Ethereum toolchain can rebuild
      the exact bytes (ethers solidityKeccak256 with the same types)
    - Domain prefix is keccak256(name): fixed width keeps the packed encoding unambiguous
      and separates deployments configured with different names
"""

from eth_abi.packed import encode_packed
from eth_utils import keccak

from metarelay.core.domain_types import Digest
from metarelay.core.transfer_intent import TransferIntent, build_intent

DEFAULT_DOMAIN_NAME = "MetaTokenTransfer"

_PACKED_TYPES = ["bytes32", "address", "uint256", "address", "address", "uint256"]


def domain_separator(name: str = DEFAULT_DOMAIN_NAME) -> bytes:
    """32-byte domain prefix for the given deployment name."""
    return keccak(text=name)


DEFAULT_DOMAIN: bytes = domain_separator()


def encode_intent(intent: TransferIntent, domain: bytes = DEFAULT_DOMAIN) -> bytes:
    """Canonical packed encoding hashed by digest_intent."""
    return encode_packed(
        _PACKED_TYPES,
        [
            domain, intent.sender, intent.amount,
            intent.recipient, intent.token, intent.nonce,
        ],
    )


def digest_intent(intent: TransferIntent, domain: bytes = DEFAULT_DOMAIN) -> Digest:
    return Digest(keccak(encode_intent(intent, domain)))


def compute_digest(
    sender: str | bytes,
    amount: int,
    recipient: str | bytes,
    token: str | bytes,
    nonce: int,
    domain: bytes = DEFAULT_DOMAIN,
) -> Digest:
    """Digest the signer must sign (after the personal-message transform)."""
    intent = build_intent(sender, amount, recipient, token, nonce)
    return digest_intent(intent, domain)


def digest_hex(digest: bytes) -> str:
    return "0x" + digest.hex()
