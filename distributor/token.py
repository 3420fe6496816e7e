"""
Transfer capabilities the distributor pays out through.

The distributor only ever calls `transfer(to, amount)` and treats a False return,
or any exception, as a failed settlement. The one exception is `TransferPendingError`:
the transfer left this process and may still land, so the claim is kept.
"""

import logging
from typing import Optional, Protocol

import eth_utils as eth
from web3 import Web3

from distributor.errors import TransferPendingError
from distributor.models import EthereumAddress

logger = logging.getLogger(__name__)

ERC20_TRANSFER_ABI = [
    {
        "constant": False,
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    },
]


class TransferCapability(Protocol):
    def transfer(self, to: EthereumAddress, amount: int) -> bool:
        ...


class InMemoryToken:
    """
    Minimal ledger holding the distributor's funded balance and what has been paid out.
    Transfers beyond the remaining balance fail and leave the ledger untouched.
    """

    def __init__(self, supply: int, symbol: str = "TOKEN"):
        self.symbol = symbol
        self.available = supply
        self.balances: dict[EthereumAddress, int] = {}

    def balance_of(self, account: EthereumAddress) -> int:
        return self.balances.get(eth.to_checksum_address(account), 0)

    def transfer(self, to: EthereumAddress, amount: int) -> bool:
        if amount > self.available:
            logger.warning(
                "%s transfer of %s to %s exceeds balance %s",
                self.symbol,
                amount,
                to,
                self.available,
            )
            return False
        to = eth.to_checksum_address(to)
        self.available -= amount
        self.balances[to] = self.balances.get(to, 0) + amount
        return True


class Web3Token:
    """
    ERC20 held by a hot wallet. Each transfer is signed locally, sent and waited on,
    succeeding only if the transaction receipt reports status 1. Once the transaction
    is broadcast, a receipt that never arrives is reported as pending, not failed.
    """

    def __init__(
        self,
        w3: Web3,
        address: EthereumAddress,
        sender_key: str,
        timeout: Optional[int] = 120,
    ):
        self.w3 = w3
        self.address = eth.to_checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=ERC20_TRANSFER_ABI)
        self.account = w3.eth.account.from_key(sender_key)
        self.timeout = timeout

    @staticmethod
    def from_rpc(rpc_url: str, address: EthereumAddress, sender_key: str) -> "Web3Token":
        return Web3Token(Web3(Web3.HTTPProvider(rpc_url)), address, sender_key)

    def balance_of(self, account: EthereumAddress) -> int:
        return self.contract.functions.balanceOf(eth.to_checksum_address(account)).call()

    def transfer(self, to: EthereumAddress, amount: int) -> bool:
        tx = self.contract.functions.transfer(
            eth.to_checksum_address(to), amount
        ).build_transaction(
            {
                "from": self.account.address,
                "nonce": self.w3.eth.get_transaction_count(self.account.address),
            }
        )
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        except Exception as e:
            logger.error("transfer %s -> %s: tx %s sent but unconfirmed: %s", amount, to, tx_hash.hex(), e)
            raise TransferPendingError(eth.to_checksum_address(to), tx_hash.hex()) from e
        logger.info("transfer %s -> %s: tx %s status %s", amount, to, tx_hash.hex(), receipt["status"])
        return receipt["status"] == 1
