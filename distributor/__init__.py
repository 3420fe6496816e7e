from distributor.distributor import MerkleDistributor
from distributor.errors import (
    AlreadyClaimedError,
    ClaimError,
    InvalidProofError,
    InvalidSignatureError,
    TransferFailedError,
    TransferPendingError,
)
from distributor.registry import ClaimRegistry, InMemoryClaimRegistry, TinyDBClaimRegistry
from distributor.token import InMemoryToken, TransferCapability, Web3Token
