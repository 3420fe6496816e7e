import json
from pathlib import Path
from typing import Any

from distributor.env import DOMAIN, SETTLEMENT, env_var, optional_env_var
from distributor.errors import BadConfigException
from distributor.models import DistributorConfig, DomainConfig, MerkleDistribution


def domain_from_env() -> DomainConfig:
    """Builds the signing domain purely from environment variables"""
    return DomainConfig(
        name=env_var(DOMAIN.NAME),
        version=optional_env_var(DOMAIN.VERSION, "1"),
        chain_id=int(optional_env_var(DOMAIN.CHAIN_ID, "1")),
        verifying_contract=env_var(DOMAIN.VERIFYING_CONTRACT),
    )


def _env_overrides() -> dict[str, Any]:
    """Values set in the environment win over the ones in the config file"""
    domain: dict[str, Any] = {}
    for key, accessor in [
        ("name", DOMAIN.NAME),
        ("version", DOMAIN.VERSION),
        ("chain_id", DOMAIN.CHAIN_ID),
        ("verifying_contract", DOMAIN.VERIFYING_CONTRACT),
    ]:
        value = optional_env_var(accessor)
        if value:
            domain[key] = value

    overrides: dict[str, Any] = {"domain": domain}
    token = optional_env_var(SETTLEMENT.TOKEN_ADDRESS)
    if token:
        overrides["token"] = token
    registry = optional_env_var(SETTLEMENT.REGISTRY_PATH)
    if registry:
        overrides["registry_path"] = registry
    return overrides


def load_conf(path: str) -> DistributorConfig:
    """Loads a distributor config from a json file, overlaid with the environment"""
    with open(path) as f:
        raw = json.load(f)

    overrides = _env_overrides()
    raw["domain"] = {**raw.get("domain", {}), **overrides.pop("domain")}
    raw.update(overrides)

    return DistributorConfig(**raw)


def load_distribution(path: str) -> MerkleDistribution:
    return MerkleDistribution.model_validate_json(Path(path).read_text())


def load_conf_and_distribution(
    config_path: str, distribution_path: str
) -> tuple[DistributorConfig, MerkleDistribution]:
    """Loads both files and insists they commit to the same root"""
    conf = load_conf(config_path)
    distribution = load_distribution(distribution_path)
    if conf.root_bytes != distribution.root_bytes:
        raise BadConfigException(
            f"Distribution root {distribution.merkleRoot} does not match configured root {conf.merkle_root}"
        )
    return conf, distribution
