"""Deterministic fake signature scheme — stands in for secp256k1 in executor tests.

A fake signature is signed_digest (32 bytes) followed by the signer address (20 bytes).
recover() returns the embedded address when the digest matches, and an unrelated
address otherwise, the same way ECDSA recovery yields a stranger for a wrong message.
"""

from eth_utils import keccak, to_checksum_address

from metarelay.core.domain_types import Address
from metarelay.core.errors import InvalidSignatureError
from metarelay.core.personal_message import to_personal_digest

FAKE_SIGNATURE_BYTES = 52


class FakeSignatureScheme:
    def __init__(self):
        self.recover_calls = 0

    def recover(self, signed_digest: bytes, signature: str | bytes) -> Address:
        self.recover_calls += 1
        if isinstance(signature, str):
            signature = bytes.fromhex(signature.removeprefix("0x"))
        if len(signature) != FAKE_SIGNATURE_BYTES:
            raise InvalidSignatureError("fake signature has wrong length")
        if signature[:32] != signed_digest:
            return Address(to_checksum_address(keccak(signature)[-20:]))
        return Address(to_checksum_address(signature[32:]))


def fake_sign(signer: str, digest: bytes) -> bytes:
    """What a wallet owned by signer would produce for signMessage(digest)."""
    return to_personal_digest(digest) + bytes.fromhex(signer[2:])
