import logging
from typing import Optional

import eth_utils as eth
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from distributor.models import EthereumAddress, SignatureAuthorization

logger = logging.getLogger(__name__)

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
# upper bound for `s` on signatures ethereum accepts (EIP-2)
SECP256K1_HALF_N = SECP256K1_N // 2


def recover_signer(
    message_hash: bytes, auth: SignatureAuthorization
) -> Optional[EthereumAddress]:
    """
    Recover the checksummed address that produced `auth` over `message_hash`.
    Returns None for any malformed or unrecoverable signature rather than raising,
    so every bad signature looks the same to the caller.
    """
    r = eth.big_endian_to_int(auth.r)
    s = eth.big_endian_to_int(auth.s)

    if auth.v not in (27, 28):
        return None
    if r == 0 or r >= SECP256K1_N:
        return None
    if s == 0 or s > SECP256K1_HALF_N:
        return None

    try:
        signature = keys.Signature(vrs=(auth.v - 27, r, s))
        public_key = signature.recover_public_key_from_msg_hash(message_hash)
    except (BadSignature, ValidationError) as e:
        logger.debug("signature recovery failed: %s", e)
        return None

    return public_key.to_checksum_address()


def is_valid_signature(
    account: EthereumAddress, message_hash: bytes, auth: SignatureAuthorization
) -> bool:
    return recover_signer(message_hash, auth) == eth.to_checksum_address(account)


def sign_message_hash(private_key: str, message_hash: bytes) -> SignatureAuthorization:
    """Off-chain signing helper, produces the (v, r, s) a relayer submits"""
    key = keys.PrivateKey(eth.to_bytes(hexstr=private_key))
    signature = key.sign_msg_hash(message_hash)
    return SignatureAuthorization(
        v=signature.v + 27,
        r=eth.int_to_big_endian(signature.r).rjust(32, b"\x00"),
        s=eth.int_to_big_endian(signature.s).rjust(32, b"\x00"),
    )


def address_of(private_key: str) -> EthereumAddress:
    return keys.PrivateKey(eth.to_bytes(hexstr=private_key)).public_key.to_checksum_address()
