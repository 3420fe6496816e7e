from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Sequence

from distributor.errors import (
    AlreadyClaimedError,
    InvalidProofError,
    InvalidSignatureError,
    TransferFailedError,
    TransferPendingError,
)
from distributor.merkle import leaf_hash, verify_proof
from distributor.models import (
    ClaimMessage,
    ClaimSettled,
    DistributorConfig,
    DomainConfig,
    EthereumAddress,
    HexOrBytes,
    SignatureAuthorization,
    to_bytes32,
)
from distributor.registry import ClaimRegistry, InMemoryClaimRegistry, TinyDBClaimRegistry
from distributor.signature import is_valid_signature
from distributor.token import TransferCapability
from distributor.typed_message import MessageHasher

logger = logging.getLogger(__name__)

Authorize = Callable[[ClaimMessage], None]
Listener = Callable[[ClaimSettled], None]


class MerkleDistributor:
    """
    Settles one-time claims of (account, amount) pairs committed to by a merkle root.

    `claim` lets anyone relay a claim carrying the account's EIP-712 signature,
    `claim_direct` pays the caller. Both run the same pipeline:

        already claimed? -> [signature valid?] -> proof valid? -> mark -> emit -> transfer

    The first failing gate raises and nothing is changed. A failed transfer rolls the mark
    back and drops the event. A transfer that was sent but not confirmed keeps the mark
    and drops the event. The whole pipeline runs under a re-entrant lock; a claim made
    from inside another claim's transfer settles on its own, independently of the outer one.
    """

    def __init__(
        self,
        merkle_root: HexOrBytes,
        token: TransferCapability,
        domain: DomainConfig,
        registry: Optional[ClaimRegistry] = None,
    ):
        self._root = to_bytes32(merkle_root)
        self._token = token
        self._hasher = MessageHasher(domain)
        self._registry = registry if registry is not None else InMemoryClaimRegistry()
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    @staticmethod
    def from_config(
        config: DistributorConfig, token: TransferCapability
    ) -> MerkleDistributor:
        registry = (
            TinyDBClaimRegistry(config.registry_path)
            if config.registry_path
            else InMemoryClaimRegistry()
        )
        return MerkleDistributor(config.root_bytes, token, config.domain, registry)

    # read only accessors

    @property
    def merkle_root(self) -> bytes:
        return self._root

    @property
    def token(self) -> TransferCapability:
        return self._token

    @property
    def domain(self) -> DomainConfig:
        return self._hasher.domain

    def get_merkle_root(self) -> bytes:
        return self.merkle_root

    def get_token(self) -> TransferCapability:
        return self.token

    def get_message_hash(self, account: EthereumAddress, amount: int) -> bytes:
        """The exact 32 bytes an account signs to authorize a relayed claim"""
        return self._hasher.get_message_hash(account, amount)

    def is_claimed(self, account: EthereumAddress) -> bool:
        return self._registry.is_claimed(account)

    def subscribe(self, listener: Listener) -> None:
        """Register a callback for `ClaimSettled`, called once per committed claim"""
        self._listeners.append(listener)

    # entry points

    def claim(
        self,
        account: EthereumAddress,
        amount: int,
        merkle_proof: Sequence[HexOrBytes],
        v: int,
        r: HexOrBytes,
        s: HexOrBytes,
    ) -> None:
        """Settle a claim for `account` on its behalf, authorized by its signature"""
        message = ClaimMessage(account=account, amount=amount)
        auth = SignatureAuthorization(v=v, r=r, s=s)
        proof = [to_bytes32(p) for p in merkle_proof]

        self._verify_and_settle(message, proof, self._signed_by_account(auth))

    def claim_direct(
        self,
        caller: EthereumAddress,
        amount: int,
        merkle_proof: Sequence[HexOrBytes],
    ) -> None:
        """Settle the caller's own claim. The caller is the account, there is no way to name another"""
        message = ClaimMessage(account=caller, amount=amount)
        proof = [to_bytes32(p) for p in merkle_proof]

        self._verify_and_settle(message, proof)

    # pipeline

    def _signed_by_account(self, auth: SignatureAuthorization) -> Authorize:
        def authorize(message: ClaimMessage) -> None:
            message_hash = self._hasher.hash_message(message)
            if not is_valid_signature(message.account, message_hash, auth):
                raise InvalidSignatureError(message.account)

        return authorize

    def _verify_and_settle(
        self,
        message: ClaimMessage,
        proof: list[bytes],
        authorize: Optional[Authorize] = None,
    ) -> None:
        with self._lock:
            account = message.account

            if self._registry.is_claimed(account):
                logger.debug("rejecting %s: already claimed", account)
                raise AlreadyClaimedError(account)

            if authorize is not None:
                authorize(message)

            if not verify_proof(proof, self._root, leaf_hash(account, message.amount)):
                logger.debug("rejecting %s: proof does not match root", account)
                raise InvalidProofError(account)

            with self._settlement(message):
                self._transfer(message)

    def _transfer(self, message: ClaimMessage) -> None:
        try:
            ok = self._token.transfer(message.account, message.amount)
        except TransferPendingError:
            raise
        except Exception as e:
            raise TransferFailedError(message.account) from e
        if not ok:
            raise TransferFailedError(message.account)

    @contextmanager
    def _settlement(self, message: ClaimMessage) -> Iterator[None]:
        """
        Mark the account, run the transfer, then publish. Only this claim's own mark is
        ever rolled back: a claim settled from inside the transfer paid out for real and
        stays committed whatever happens to this one.
        """
        account = message.account
        self._registry.mark_claimed(account)
        event = ClaimSettled(account=account, amount=message.amount)
        try:
            yield
        except TransferPendingError:
            logger.warning("transfer to %s is unconfirmed, keeping the claim marked", account)
            raise
        except BaseException:
            logger.warning("rolling back claim of %s", account)
            self._registry._unmark(account)
            raise

        logger.info("claim settled: %s received %s", event.account, event.amount)
        self._publish(event)

    def _publish(self, event: ClaimSettled) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                # the claim is already committed, a broken observer can't undo it
                logger.exception("ClaimSettled listener %r failed", listener)
