from typing import Optional

from pydantic import BaseModel, field_validator

from distributor.errors import BadConfigException
from distributor.models.Claim import checksum, to_bytes32
from distributor.models.types import Bytes32Hex, EthereumAddress


class DomainConfig(BaseModel):
    """
    Parameters of the EIP-712 domain a claim signature is bound to.
    Two distributors sharing these values produce identical message hashes,
    so `verifying_contract` should be unique per deployment.
    """

    name: str
    version: str = "1"
    chain_id: int = 1
    verifying_contract: EthereumAddress

    @field_validator("verifying_contract", mode="before")
    @classmethod
    def checksum_contract(cls, addr: str) -> EthereumAddress:
        return checksum(addr)

    @field_validator("chain_id")
    @classmethod
    def validate_chain_id(cls, chain_id: int) -> int:
        if chain_id <= 0:
            raise BadConfigException("Chain id must be positive")
        return chain_id

    @field_validator("name")
    @classmethod
    def validate_name(cls, name: str) -> str:
        if not name:
            raise BadConfigException("Domain name cannot be empty")
        return name


class DistributorConfig(BaseModel):
    """
    Everything needed to stand up a distributor for one merkle root
    :param `merkle_root`: 0x prefixed 32 byte root, fixed for the lifetime of the distributor
    :param `token`: address of the ERC20 paid out, only used for on-chain settlement
    :param `registry_path`: TinyDB file tracking claimed accounts, in-memory if omitted
    """

    domain: DomainConfig
    merkle_root: Bytes32Hex
    token: Optional[EthereumAddress] = None
    registry_path: Optional[str] = None

    @field_validator("merkle_root")
    @classmethod
    def validate_root(cls, root: str) -> Bytes32Hex:
        try:
            return "0x" + to_bytes32(root).hex()
        except ValueError as e:
            raise BadConfigException(f"Merkle root is not 32 bytes of hex: {e}")

    @field_validator("token", mode="before")
    @classmethod
    def checksum_token(cls, addr: Optional[str]) -> Optional[EthereumAddress]:
        return checksum(addr) if addr else None

    @property
    def root_bytes(self) -> bytes:
        return to_bytes32(self.merkle_root)
