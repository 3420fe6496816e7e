"""
Merkle membership checks for the claim tree.

Leaves are `keccak256(keccak256(abi.encode(account, amount)))`. The second pass means
a leaf can never be a 64 byte preimage, so an internal node can't be passed off as a leaf.
Pairs are sorted before hashing, so proofs carry no left/right flags.
"""

from typing import Sequence

import eth_utils as eth
from eth_abi import encode

Bytes32 = bytes


def encode_leaf(account: str, amount: int) -> bytes:
    """abi.encode(address, uint256), 64 bytes"""
    return encode(["address", "uint256"], [eth.to_canonical_address(account), amount])


def leaf_hash(account: str, amount: int) -> Bytes32:
    return eth.keccak(eth.keccak(encode_leaf(account, amount)))


def hash_pair(a: Bytes32, b: Bytes32) -> Bytes32:
    return eth.keccak(a + b) if a < b else eth.keccak(b + a)


def process_proof(proof: Sequence[Bytes32], leaf: Bytes32) -> Bytes32:
    """Walk from the leaf to the root implied by `proof`"""
    computed = leaf
    for sibling in proof:
        computed = hash_pair(computed, sibling)
    return computed


def verify_proof(proof: Sequence[Bytes32], root: Bytes32, leaf: Bytes32) -> bool:
    # an empty proof only proves a single leaf tree
    return process_proof(proof, leaf) == root
