import eth_utils as eth
import pytest

from distributor.models import SignatureAuthorization
from distributor.signature import (
    SECP256K1_N,
    address_of,
    is_valid_signature,
    recover_signer,
    sign_message_hash,
)

DIGEST = eth.keccak(text="claim")


def test_recover_own_signature(keys, ADDRESSES):
    auth = sign_message_hash(keys[0], DIGEST)

    assert auth.v in (27, 28)
    assert recover_signer(DIGEST, auth) == ADDRESSES[0]
    assert is_valid_signature(ADDRESSES[0], DIGEST, auth)
    assert is_valid_signature(ADDRESSES[0].lower(), DIGEST, auth)


def test_signature_does_not_match_other_account_or_hash(keys, ADDRESSES):
    auth = sign_message_hash(keys[0], DIGEST)

    assert not is_valid_signature(ADDRESSES[1], DIGEST, auth)
    assert not is_valid_signature(ADDRESSES[0], eth.keccak(text="other"), auth)


def test_address_of(keys, ADDRESSES):
    assert address_of(keys[0]) == ADDRESSES[0]
    assert eth.is_checksum_address(ADDRESSES[0])


@pytest.mark.parametrize("v", [0, 1, 26, 29, 255])
def test_bad_recovery_byte(keys, v):
    auth = sign_message_hash(keys[0], DIGEST)
    bad = SignatureAuthorization(v=v, r=auth.r, s=auth.s)

    assert recover_signer(DIGEST, bad) is None


def test_high_s_is_rejected(keys, ADDRESSES):
    # (r, N - s) with the opposite parity is the same signature, malleated
    auth = sign_message_hash(keys[0], DIGEST)
    high_s = SECP256K1_N - eth.big_endian_to_int(auth.s)
    malleated = SignatureAuthorization(
        v=55 - auth.v,
        r=auth.r,
        s=eth.int_to_big_endian(high_s).rjust(32, b"\x00"),
    )

    assert recover_signer(DIGEST, malleated) is None
    assert not is_valid_signature(ADDRESSES[0], DIGEST, malleated)


@pytest.mark.parametrize(
    "r, s",
    [
        (0, 1),
        (1, 0),
        (SECP256K1_N, 1),
    ],
)
def test_out_of_range_words(r, s):
    bad = SignatureAuthorization(
        v=27,
        r=eth.int_to_big_endian(r).rjust(32, b"\x00"),
        s=eth.int_to_big_endian(s).rjust(32, b"\x00"),
    )
    assert recover_signer(DIGEST, bad) is None


def test_garbage_signature_never_matches(ADDRESSES):
    garbage = SignatureAuthorization(v=27, r=b"\x11" * 32, s=b"\x22" * 32)

    assert not is_valid_signature(ADDRESSES[0], DIGEST, garbage)
