"""Transfer Intent — immutable value describing a requested token transfer.

Invariants:
    - TransferIntent is frozen: constructed per call, never mutated, never persisted directly
    - Addresses are EIP-55 checksum strings after build_intent()
    - amount and nonce are ints within 0..UINT256_MAX (bool rejected)

Design Decisions:
    - Validation at construction (build_intent) so digest encoding has no failure modes
    - Raw 20-byte values accepted alongside hex strings: signers working with
      bytes and relayers working with JSON both reach the same canonical form
"""

from dataclasses import dataclass

from eth_utils import is_hex_address, to_checksum_address

from metarelay.core.domain_types import ADDRESS_BYTES, UINT256_MAX, Address
from metarelay.core.errors import IntentValidationError


@dataclass(frozen=True)
class TransferIntent:
    """Who moves how much of which token to whom, under which nonce."""
    sender: Address
    amount: int
    recipient: Address
    token: Address
    nonce: int


def normalize_address(value: str | bytes, field: str) -> Address:
    """Return the checksum form of a 20-byte address or raise IntentValidationError."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_BYTES:
            raise IntentValidationError(
                f"{field} must be {ADDRESS_BYTES} bytes, got {len(value)}", field,
            )
        return Address(to_checksum_address(bytes(value)))
    if not isinstance(value, str) or not is_hex_address(value):
        raise IntentValidationError(
            f"{field} must be a 0x-prefixed 20-byte hex address", field,
        )
    return Address(to_checksum_address(value))


def check_uint256(value: object, field: str) -> int:
    """Reject anything that is not an int in the uint256 range."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise IntentValidationError(f"{field} must be an integer", field)
    if value < 0 or value > UINT256_MAX:
        raise IntentValidationError(
            f"{field} must be within 0..2**256-1, got {value}", field,
        )
    return value


def build_intent(
    sender: str | bytes,
    amount: int,
    recipient: str | bytes,
    token: str | bytes,
    nonce: int,
) -> TransferIntent:
    """Validate raw fields and return a canonical TransferIntent."""
    return TransferIntent(
        sender=normalize_address(sender, "sender"),
        amount=check_uint256(amount, "amount"),
        recipient=normalize_address(recipient, "recipient"),
        token=normalize_address(token, "token"),
        nonce=check_uint256(nonce, "nonce"),
    )
