"""Digest Builder — verifies determinism, sensitivity and the packed layout.

Tests:
    - Same tuple -> same 32 bytes (determinism)
    - Any single-field change -> different digest (boundary values)
    - Layout equals domain | sender | uint256 | recipient | token | uint256, keccak-256
    - Domain separation: different deployment names never share digests
"""

import pytest
from eth_utils import keccak

from metarelay.core.compute_digest import (
    DEFAULT_DOMAIN, DEFAULT_DOMAIN_NAME, compute_digest, digest_hex,
    digest_intent, domain_separator, encode_intent,
)
from metarelay.core.domain_types import UINT256_MAX
from metarelay.core.errors import IntentValidationError
from metarelay.core.transfer_intent import build_intent
from tests.identities import OTHER_RECIPIENT, RECIPIENT, SENDER, TOKEN


def _manual_encoding(sender, amount, recipient, token, nonce, domain=DEFAULT_DOMAIN):
    return (
        domain
        + bytes.fromhex(sender[2:])
        + amount.to_bytes(32, "big")
        + bytes.fromhex(recipient[2:])
        + bytes.fromhex(token[2:])
        + nonce.to_bytes(32, "big")
    )


def test_digest_is_32_bytes():
    assert len(compute_digest(SENDER, 10, RECIPIENT, TOKEN, 1)) == 32


def test_digest_is_deterministic():
    first = compute_digest(SENDER, 10, RECIPIENT, TOKEN, 1)
    second = compute_digest(SENDER, 10, RECIPIENT, TOKEN, 1)
    assert first == second


def test_address_case_does_not_change_digest():
    assert compute_digest(SENDER.lower(), 10, RECIPIENT, TOKEN, 1) == compute_digest(
        SENDER, 10, RECIPIENT, TOKEN, 1,
    )


def test_encoding_is_fixed_width_packed_layout():
    intent = build_intent(SENDER, 10, RECIPIENT, TOKEN, 1)
    encoded = encode_intent(intent)
    assert len(encoded) == 32 + 20 + 32 + 20 + 20 + 32
    assert encoded == _manual_encoding(SENDER, 10, RECIPIENT, TOKEN, 1)


def test_digest_is_keccak_of_encoding():
    expected = keccak(_manual_encoding(SENDER, 10, RECIPIENT, TOKEN, 1))
    assert compute_digest(SENDER, 10, RECIPIENT, TOKEN, 1) == expected


def test_digest_intent_matches_compute_digest():
    intent = build_intent(SENDER, 10, RECIPIENT, TOKEN, 1)
    assert digest_intent(intent) == compute_digest(SENDER, 10, RECIPIENT, TOKEN, 1)


@pytest.mark.parametrize("base,changed", [
    ((SENDER, 10, RECIPIENT, TOKEN, 0), (SENDER, 10, RECIPIENT, TOKEN, 1)),
    ((SENDER, 0, RECIPIENT, TOKEN, 1), (SENDER, UINT256_MAX, RECIPIENT, TOKEN, 1)),
    ((SENDER, 10, RECIPIENT, TOKEN, 1), (SENDER, 10, OTHER_RECIPIENT, TOKEN, 1)),
    ((SENDER, 10, RECIPIENT, TOKEN, 1), (RECIPIENT, 10, RECIPIENT, TOKEN, 1)),
    ((SENDER, 10, RECIPIENT, TOKEN, 1), (SENDER, 10, RECIPIENT, OTHER_RECIPIENT, 1)),
])
def test_single_field_change_changes_digest(base, changed):
    assert compute_digest(*base) != compute_digest(*changed)


def test_swapping_amount_and_nonce_changes_digest():
    assert compute_digest(SENDER, 1, RECIPIENT, TOKEN, 2) != compute_digest(
        SENDER, 2, RECIPIENT, TOKEN, 1,
    )


def test_domain_separator_is_keccak_of_name():
    assert domain_separator(DEFAULT_DOMAIN_NAME) == keccak(text="MetaTokenTransfer")
    assert DEFAULT_DOMAIN == domain_separator()


def test_different_domains_produce_different_digests():
    other = domain_separator("StagingTransfer")
    assert compute_digest(SENDER, 10, RECIPIENT, TOKEN, 1, domain=other) != (
        compute_digest(SENDER, 10, RECIPIENT, TOKEN, 1)
    )


def test_invalid_intent_rejected_before_hashing():
    with pytest.raises(IntentValidationError):
        compute_digest(SENDER, -1, RECIPIENT, TOKEN, 1)


def test_digest_hex_is_prefixed_lowercase():
    rendered = digest_hex(b"\xab" * 32)
    assert rendered == "0x" + "ab" * 32
    assert len(rendered) == 66
