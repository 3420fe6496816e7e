"""
EIP-712 hashing for claim messages.

    finalHash = keccak256(0x19 || 0x01 || domainSeparator || structHash)

The domain separator binds a signature to one distributor (name, version, chain, contract),
the type hash binds it to the claim schema.
"""

import eth_utils as eth
from eth_abi import encode

from distributor.models import ClaimMessage, DomainConfig

DOMAIN_TYPE = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
CLAIM_TYPE = "Claim(address account,uint256 amount)"

DOMAIN_TYPEHASH = eth.keccak(text=DOMAIN_TYPE)
CLAIM_TYPEHASH = eth.keccak(text=CLAIM_TYPE)

EIP191_PREFIX = b"\x19\x01"


def domain_separator(domain: DomainConfig) -> bytes:
    return eth.keccak(
        encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                DOMAIN_TYPEHASH,
                eth.keccak(text=domain.name),
                eth.keccak(text=domain.version),
                domain.chain_id,
                domain.verifying_contract,
            ],
        )
    )


def struct_hash(message: ClaimMessage) -> bytes:
    return eth.keccak(
        encode(
            ["bytes32", "address", "uint256"],
            [CLAIM_TYPEHASH, message.account, message.amount],
        )
    )


class MessageHasher:
    """Computes the domain separator once and hashes claim messages against it"""

    def __init__(self, domain: DomainConfig):
        self._domain = domain
        self._separator = domain_separator(domain)

    @property
    def domain(self) -> DomainConfig:
        return self._domain

    @property
    def separator(self) -> bytes:
        return self._separator

    def hash_message(self, message: ClaimMessage) -> bytes:
        return eth.keccak(EIP191_PREFIX + self._separator + struct_hash(message))

    def get_message_hash(self, account: str, amount: int) -> bytes:
        return self.hash_message(ClaimMessage(account=account, amount=amount))
