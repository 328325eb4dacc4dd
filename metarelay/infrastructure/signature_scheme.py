"""Secp256k1 Signature Scheme — recover Ethereum signers, sign personal messages.

Invariants:
    - recover() returns an EIP-55 checksum address or raises InvalidSignatureError
    - sign_personal_digest(key, digest) produces a signature that recover() maps back to
      the key's address when given to_personal_digest(digest)

Design Decisions:
    - eth_keys for recovery from a pre-hashed digest: the executor applies the
      personal-message transform itself, so recovery must take the final hash
    - eth_account for signing: same prefixing as wallet signMessage(bytes)
"""

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from metarelay.core.domain_types import Address
from metarelay.core.errors import InvalidSignatureError
from metarelay.core.signature import decode_signature


class Secp256k1SignatureScheme:
    """ECDSA public-key recovery over secp256k1."""

    def recover(self, signed_digest: bytes, signature: str | bytes) -> Address:
        v, r, s = decode_signature(signature)
        try:
            sig = keys.Signature(vrs=(v - 27, r, s))
            public_key = sig.recover_public_key_from_msg_hash(signed_digest)
        except (BadSignature, ValidationError) as e:
            raise InvalidSignatureError(str(e))
        return Address(public_key.to_checksum_address())


def sign_personal_digest(private_key: str | bytes, digest: bytes) -> bytes:
    """Off-path user action: sign a 32-byte digest as a personal message."""
    signed = Account.sign_message(encode_defunct(primitive=digest), private_key)
    return bytes(signed.signature)
