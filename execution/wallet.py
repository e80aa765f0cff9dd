# PATH: execution/wallet.py
"""
Wallets that sign and broadcast pre-assembled transactions.

WALLET CONTRACT:
================
send_transaction(tx) accepts
  {to, data, gasLimit, gasPrice, value, chainId[, nonce]}
and returns a SubmittedTransaction once a node accepted the raw transaction.
Receipts are not awaited.
================
"""

import os
from typing import Any, Dict, Protocol

from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3

from chains.providers import RPCProvider
from core.exceptions import ConfigError
from core.logging import get_logger
from core.models import SubmittedTransaction, checksum_address

logger = get_logger(__name__)

load_dotenv()

PRIVATE_KEY_ENV = "WALLET_PRIVATE_KEY"


class Wallet(Protocol):
    """Anything that can sign and submit a transaction."""

    @property
    def address(self) -> str:
        ...

    async def send_transaction(self, tx: Dict[str, Any]) -> SubmittedTransaction:
        ...


class LocalWallet:
    """
    Wallet backed by a local private key.

    Signs legacy (gasPrice) transactions with eth_account and broadcasts
    them through the chain's RPC provider.
    """

    def __init__(self, private_key: str, provider: RPCProvider):
        self._account = Account.from_key(private_key)
        self.provider = provider

    @classmethod
    def from_env(cls, provider: RPCProvider, env_var: str = PRIVATE_KEY_ENV) -> "LocalWallet":
        """
        Build a wallet from a private key in the environment.

        Raises:
            ConfigError: If the variable is unset
        """
        private_key = os.getenv(env_var, "").strip()
        if not private_key:
            raise ConfigError(
                f"{env_var} is not set",
                details={"env_var": env_var},
            )
        return cls(private_key, provider)

    @property
    def address(self) -> str:
        return self._account.address

    async def send_transaction(self, tx: Dict[str, Any]) -> SubmittedTransaction:
        nonce = tx.get("nonce")
        if nonce is None:
            nonce = await self.provider.get_transaction_count(self.address)

        unsigned = {
            "to": checksum_address(tx["to"]),
            "data": tx.get("data") or "0x",
            "gas": int(tx["gasLimit"]),
            "gasPrice": int(tx["gasPrice"]),
            "value": int(tx.get("value") or 0),
            "nonce": int(nonce),
            "chainId": int(tx["chainId"]),
        }

        signed = self._account.sign_transaction(unsigned)
        tx_hash = await self.provider.send_raw_transaction(Web3.to_hex(signed.raw_transaction))

        logger.info(
            f"Transaction sent: {tx_hash}",
            extra={"context": {
                "from": self.address,
                "to": unsigned["to"],
                "nonce": unsigned["nonce"],
                "chain_id": unsigned["chainId"],
            }},
        )

        return SubmittedTransaction(
            hash=tx_hash,
            chain_id=unsigned["chainId"],
            to=unsigned["to"],
            nonce=unsigned["nonce"],
            gas=unsigned["gas"],
            gas_price=unsigned["gasPrice"],
            value=unsigned["value"],
            data=unsigned["data"],
            metadata={"from": self.address},
        )
