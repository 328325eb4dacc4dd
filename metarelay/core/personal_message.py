"""Personal-Message Transform — EIP-191 (version 0x45) hash of a digest.

Invariants:
    - to_personal_digest is PURE
    - Prefix is "\x19Ethereum Signed Message:\n" + decimal byte length of the payload

Design Decisions:
    - Applied by the verifier, not the signer: wallets prefix personal messages
      themselves, so the executor must recompute the same prefixed hash to recover
"""

from eth_utils import keccak

PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n"


def to_personal_digest(digest: bytes) -> bytes:
    """Hash that a wallet actually signs for signMessage(digest)."""
    return keccak(PERSONAL_MESSAGE_PREFIX + str(len(digest)).encode() + digest)
