"""Signature Decoding — parse and sanity-check 65-byte r|s|v ECDSA signatures.

Invariants:
    - decode_signature is PURE: returns (v, r, s) with v in {27, 28}, or raises
    - s must be in the lower half of the secp256k1 order (no malleable twins)
    - r and s are non-zero

Design Decisions:
    - Same acceptance rules as OpenZeppelin ECDSA.recover, so a signature valid
      on-chain is valid here and vice versa
    - v in {0, 1} normalized to {27, 28}: some signers emit the raw recovery id
"""

from eth_utils import is_hex, to_bytes

from metarelay.core.domain_types import SIGNATURE_BYTES
from metarelay.core.errors import InvalidSignatureError

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2


def signature_bytes(signature: str | bytes) -> bytes:
    """Accept raw bytes or a 0x-hex string."""
    if isinstance(signature, (bytes, bytearray)):
        return bytes(signature)
    if isinstance(signature, str) and is_hex(signature):
        return to_bytes(hexstr=signature)
    raise InvalidSignatureError("expected bytes or a hex string")


def decode_signature(signature: str | bytes) -> tuple[int, int, int]:
    raw = signature_bytes(signature)
    if len(raw) != SIGNATURE_BYTES:
        raise InvalidSignatureError(
            f"expected {SIGNATURE_BYTES} bytes, got {len(raw)}",
        )

    r = int.from_bytes(raw[0:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    v = raw[64]
    if v < 27:
        v += 27

    if v not in (27, 28):
        raise InvalidSignatureError(f"invalid recovery byte v={raw[64]}")
    if r == 0 or s == 0:
        raise InvalidSignatureError("zero r or s")
    if s > SECP256K1_HALF_N:
        raise InvalidSignatureError("s value in upper half of curve order")
    return v, r, s
