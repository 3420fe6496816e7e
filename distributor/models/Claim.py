from __future__ import annotations

from typing import Union

import eth_utils as eth
from pydantic import BaseModel, field_validator

from distributor.models.types import EthereumAddress, HexOrBytes, UINT256_MAX


def checksum(address: str) -> EthereumAddress:
    """Shared address validator, raises ValueError for anything that isn't 20 bytes of hex"""
    if not isinstance(address, str) or not eth.is_hex_address(address):
        raise ValueError(f"Invalid ethereum address: {address!r}")
    return eth.to_checksum_address(address)


def to_bytes32(value: HexOrBytes) -> bytes:
    """Accept 0x-prefixed hex or raw bytes, insist on exactly 32 bytes"""
    raw = eth.to_bytes(hexstr=value) if isinstance(value, str) else bytes(value)
    if len(raw) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(raw)}")
    return raw


def to_uint256(value: Union[int, str]) -> int:
    amount = int(value)
    if amount < 0 or amount > UINT256_MAX:
        raise ValueError(f"Amount {value} does not fit in a uint256")
    return amount


class ClaimMessage(BaseModel):
    """
    The (account, amount) pair that is both the merkle leaf payload and the signed payload.
    Always rebuilt from caller arguments and hashed locally, never accepted pre-hashed.
    """

    model_config = {"frozen": True}

    account: EthereumAddress
    amount: int

    @field_validator("account", mode="before")
    @classmethod
    def checksum_account(cls, addr: str) -> EthereumAddress:
        return checksum(addr)

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, amount: Union[int, str]) -> int:
        return to_uint256(amount)


class SignatureAuthorization(BaseModel):
    """
    ECDSA signature over the typed message hash of a claim.
    `v` is the ethereum recovery byte (27 or 28 for a well formed signature).
    Range checks live in the signature verifier: a malformed signature is a failed claim,
    not a validation error.
    """

    model_config = {"frozen": True}

    v: int
    r: bytes
    s: bytes

    @field_validator("r", "s", mode="before")
    @classmethod
    def check_word(cls, word: HexOrBytes) -> bytes:
        return to_bytes32(word)

    @field_validator("v", mode="before")
    @classmethod
    def check_byte(cls, v: int) -> int:
        v = int(v)
        if v < 0 or v > 255:
            raise ValueError(f"v must be a single byte, got {v}")
        return v

    @staticmethod
    def from_bytes(signature: HexOrBytes) -> SignatureAuthorization:
        """Split a 65 byte `r || s || v` signature"""
        raw = (
            eth.to_bytes(hexstr=signature)
            if isinstance(signature, str)
            else bytes(signature)
        )
        if len(raw) != 65:
            raise ValueError(f"Expected a 65 byte signature, got {len(raw)}")
        return SignatureAuthorization(v=raw[64], r=raw[:32], s=raw[32:64])

    def to_bytes(self) -> bytes:
        return self.r + self.s + bytes([self.v])

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()


class ClaimSettled(BaseModel):
    """Emitted exactly once for every successful claim"""

    model_config = {"frozen": True}

    account: EthereumAddress
    amount: int
