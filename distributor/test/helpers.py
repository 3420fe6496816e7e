"""
Test-only merkle tree builder, mirroring what the offline distribution tool produces.
Odd nodes are carried up a level unchanged, so they contribute no sibling to the proof.
"""

from distributor.merkle import hash_pair, leaf_hash
from distributor.models import MerkleDistribution

# not in any tree
OUTSIDER = "0xdeA708968f8dd520f5e2F0aB6785F28c98521ca8"


def build_layers(leaves: list[bytes]) -> list[list[bytes]]:
    layers = [leaves[:]]
    while len(layers[-1]) > 1:
        cur = layers[-1]
        nxt = []
        for i in range(0, len(cur), 2):
            if i + 1 < len(cur):
                nxt.append(hash_pair(cur[i], cur[i + 1]))
            else:
                nxt.append(cur[i])
        layers.append(nxt)
    return layers


def proof_for(layers: list[list[bytes]], idx: int) -> list[bytes]:
    proof = []
    for layer in layers[:-1]:
        sib = idx ^ 1
        if sib < len(layer):
            proof.append(layer[sib])
        idx //= 2
    return proof


def build_tree(allocations: dict[str, int]) -> tuple[bytes, dict[str, list[bytes]]]:
    """Returns the root and a proof per account"""
    accounts = list(allocations.keys())
    leaves = [leaf_hash(a, allocations[a]) for a in accounts]
    layers = build_layers(leaves)
    proofs = {a: proof_for(layers, i) for i, a in enumerate(accounts)}
    return layers[-1][0], proofs


def build_distribution(allocations: dict[str, int]) -> MerkleDistribution:
    root, proofs = build_tree(allocations)
    return MerkleDistribution(
        merkleRoot="0x" + root.hex(),
        tokenTotal=str(sum(allocations.values())),
        claims={
            a: {"amount": str(amount), "proof": ["0x" + p.hex() for p in proofs[a]]}
            for a, amount in allocations.items()
        },
    )
