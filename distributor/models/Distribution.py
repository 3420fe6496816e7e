from __future__ import annotations

from pydantic import BaseModel, field_validator

from distributor.merkle import leaf_hash, verify_proof
from distributor.models.Claim import checksum, to_bytes32, to_uint256
from distributor.models.types import BigNumber, Bytes32Hex, EthereumAddress


class ClaimProof(BaseModel):
    """
    A single recipient's entry in the distribution file
    :param `amount`: uint256 encoded as a decimal string to survive JSON
    :param `proof`: sibling hashes from the leaf up to the root
    """

    amount: BigNumber
    proof: list[Bytes32Hex] = []

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, amount) -> BigNumber:
        return str(to_uint256(amount))

    @field_validator("proof")
    @classmethod
    def validate_proof(cls, proof: list[str]) -> list[Bytes32Hex]:
        return ["0x" + to_bytes32(p).hex() for p in proof]

    @property
    def proof_bytes(self) -> list[bytes]:
        return [to_bytes32(p) for p in self.proof]


class MerkleDistribution(BaseModel):
    """
    Output of the offline tree builder. Only the root is trusted by the distributor,
    the claims are untrusted input that must each prove themselves against it.
    """

    merkleRoot: Bytes32Hex
    tokenTotal: BigNumber = "0"
    claims: dict[EthereumAddress, ClaimProof]

    @field_validator("merkleRoot")
    @classmethod
    def validate_root(cls, root: str) -> Bytes32Hex:
        return "0x" + to_bytes32(root).hex()

    @field_validator("claims", mode="before")
    @classmethod
    def checksum_recipients(cls, claims: dict) -> dict:
        return {checksum(addr): c for addr, c in claims.items()}

    @property
    def root_bytes(self) -> bytes:
        return to_bytes32(self.merkleRoot)

    def claim_for(self, account: str) -> ClaimProof:
        """Raises KeyError if the account isn't in the file"""
        return self.claims[checksum(account)]

    def invalid_claims(self) -> list[EthereumAddress]:
        """Every recipient whose proof does not verify against `merkleRoot`"""
        root = self.root_bytes
        return [
            account
            for account, c in self.claims.items()
            if not verify_proof(c.proof_bytes, root, leaf_hash(account, int(c.amount)))
        ]

    def verify(self) -> bool:
        return len(self.invalid_claims()) == 0
