import pytest

from distributor.models import ClaimProof, MerkleDistribution
from distributor.test.helpers import OUTSIDER, build_distribution


def test_distribution_verifies(tree: MerkleDistribution, allocations):
    assert tree.verify()
    assert tree.invalid_claims() == []
    assert tree.tokenTotal == str(sum(allocations.values()))


def test_claim_for_is_case_insensitive(tree: MerkleDistribution, ADDRESSES):
    assert tree.claim_for(ADDRESSES[0].lower()) == tree.claim_for(ADDRESSES[0])
    assert tree.claim_for(ADDRESSES[0]).amount == "100"

    with pytest.raises(KeyError):
        tree.claim_for(OUTSIDER)


def test_inflated_amount_is_caught(tree: MerkleDistribution, ADDRESSES):
    dct = tree.model_dump()
    dct["claims"][ADDRESSES[1]]["amount"] = "5000"

    tampered = MerkleDistribution(**dct)
    assert not tampered.verify()
    assert tampered.invalid_claims() == [ADDRESSES[1]]


def test_recipients_are_checksummed(allocations, ADDRESSES):
    tree = build_distribution(allocations)
    dct = tree.model_dump()
    dct["claims"] = {a.lower(): c for a, c in dct["claims"].items()}

    assert list(MerkleDistribution(**dct).claims) == list(allocations)


def test_round_trips_through_json(tree: MerkleDistribution):
    assert MerkleDistribution.model_validate_json(tree.model_dump_json()) == tree


@pytest.mark.parametrize(
    "claim",
    [
        {"amount": "-1", "proof": []},
        {"amount": "1", "proof": ["0x1234"]},
    ],
)
def test_claim_proof_validation(claim):
    with pytest.raises(ValueError):
        ClaimProof(**claim)
