"""
Per-account claimed flags.

A registry is write-once per account: `mark_claimed` flips an account from unclaimed to claimed
and is refused if the flag is already set. `_unmark` only exists so the distributor can roll
back the mark of a claim whose transfer was refused, and must not be called from anywhere else.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

import eth_utils as eth
from tinydb import TinyDB, where

from distributor.errors import AlreadyClaimedError
from distributor.models import EthereumAddress


class ClaimRegistry(ABC):
    @abstractmethod
    def is_claimed(self, account: EthereumAddress) -> bool:
        ...

    @abstractmethod
    def _set(self, account: EthereumAddress) -> None:
        ...

    @abstractmethod
    def _unset(self, account: EthereumAddress) -> None:
        ...

    def mark_claimed(self, account: EthereumAddress) -> None:
        account = eth.to_checksum_address(account)
        if self.is_claimed(account):
            raise AlreadyClaimedError(account)
        self._set(account)

    def _unmark(self, account: EthereumAddress) -> None:
        self._unset(eth.to_checksum_address(account))


class InMemoryClaimRegistry(ClaimRegistry):
    def __init__(self):
        self._claimed: set[EthereumAddress] = set()

    def is_claimed(self, account: EthereumAddress) -> bool:
        return eth.to_checksum_address(account) in self._claimed

    def _set(self, account: EthereumAddress) -> None:
        self._claimed.add(account)

    def _unset(self, account: EthereumAddress) -> None:
        self._claimed.discard(account)

    def __len__(self) -> int:
        return len(self._claimed)


class TinyDBClaimRegistry(ClaimRegistry):
    """
    Persists claimed accounts to a TinyDB json file, one document per account
    in the `claimed` table.
    """

    TABLE = "claimed"

    def __init__(self, path: str, db: Optional[TinyDB] = None):
        self.path = path
        if db is None:
            # check if the directory exists
            create_dirs = not os.path.exists(os.path.dirname(path) or ".")
            db = TinyDB(path, indent=4, create_dirs=create_dirs)
        self.db = db
        self.table = self.db.table(self.TABLE)

    def is_claimed(self, account: EthereumAddress) -> bool:
        account = eth.to_checksum_address(account)
        return self.table.contains(where("account") == account)

    def _set(self, account: EthereumAddress) -> None:
        self.table.insert({"account": account})

    def _unset(self, account: EthereumAddress) -> None:
        self.table.remove(where("account") == account)

    def claimed_accounts(self) -> list[EthereumAddress]:
        return [doc["account"] for doc in self.table.all()]

    def __len__(self) -> int:
        return len(self.table)

    def close(self) -> None:
        self.db.close()
