import json

import pytest

from distributor.distributor import MerkleDistributor
from distributor.models import ClaimSettled, DomainConfig, MerkleDistribution
from distributor.signature import address_of
from distributor.test.helpers import build_distribution
from distributor.token import InMemoryToken

# well known development keys, never hold real funds with these
PRIVATE_KEYS = [
    "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
    "0x7c852118294e51e653712a81e05800f419141751be58f605c371e15141b007a6",
]

VERIFYING_CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


@pytest.fixture
def keys() -> list[str]:
    return PRIVATE_KEYS


@pytest.fixture
def ADDRESSES(keys) -> list[str]:
    return [address_of(k) for k in keys]


@pytest.fixture
def domain() -> DomainConfig:
    return DomainConfig(
        name="MerkleDistributor",
        version="1",
        chain_id=1,
        verifying_contract=VERIFYING_CONTRACT,
    )


@pytest.fixture
def allocations(ADDRESSES) -> dict[str, int]:
    return {
        ADDRESSES[0]: 100,
        ADDRESSES[1]: 50,
        ADDRESSES[2]: 10**18,
    }


@pytest.fixture
def tree(allocations) -> MerkleDistribution:
    return build_distribution(allocations)


@pytest.fixture
def token() -> InMemoryToken:
    return InMemoryToken(supply=10**24)


@pytest.fixture
def distributor(tree, token, domain) -> MerkleDistributor:
    return MerkleDistributor(tree.merkleRoot, token, domain)


@pytest.fixture
def settled(distributor) -> list[ClaimSettled]:
    """Every ClaimSettled the distributor publishes, in order"""
    events: list[ClaimSettled] = []
    distributor.subscribe(events.append)
    return events


@pytest.fixture
def config_file(tmp_path, tree, domain):
    path = tmp_path / "distributor.json"
    with open(path, "w") as f:
        json.dump(
            {
                "domain": domain.model_dump(),
                "merkle_root": tree.merkleRoot,
                "token": "0x1083D743A1E53805a95249fEf7310D75029f7Cd6",
            },
            f,
        )
    return str(path)


@pytest.fixture
def distribution_file(tmp_path, tree):
    path = tmp_path / "merkle-tree.json"
    path.write_text(tree.model_dump_json(indent=4))
    return str(path)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's .env from leaking into config tests"""
    for var in [
        "DISTRIBUTOR_NAME",
        "DISTRIBUTOR_VERSION",
        "CHAIN_ID",
        "VERIFYING_CONTRACT",
        "TOKEN_ADDRESS",
        "REGISTRY_PATH",
        "RPC_URL",
        "SENDER_PRIVATE_KEY",
        "SIGNER_PRIVATE_KEY",
    ]:
        monkeypatch.delenv(var, raising=False)
