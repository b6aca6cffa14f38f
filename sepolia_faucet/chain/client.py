"""
Chain client — thin adapter over web3.py for the faucet's signing account.

Provides balance reads, gas price, network identity, sign-and-broadcast of a
plain ETH transfer, and a bounded wait for one confirmation. Transaction
encoding and signing are done by eth-account; JSON-RPC transport by the
web3 HTTPProvider. Every lower-level failure is re-raised as ChainClientError
with kind "network", "insufficient_funds" or "unknown".
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted

from sepolia_faucet.core.exceptions import ChainClientError
from sepolia_faucet.faucet_logging import get_logger

logger = get_logger(__name__)

# Gas limit for a plain value transfer (no calldata)
TRANSFER_GAS_LIMIT = 21_000
# Receipt polling interval while waiting for confirmation (seconds)
RECEIPT_POLL_LATENCY_SEC = 2.0

NETWORK_NAMES = {
    1: "mainnet",
    5: "goerli",
    17000: "holesky",
    11155111: "sepolia",
}


@dataclass(frozen=True)
class NetworkInfo:
    name: str
    chain_id: int


def classify_error(exc: BaseException) -> str:
    """Map a web3/requests exception to a ChainClientError kind."""
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return ChainClientError.NETWORK
    if "insufficient funds" in str(exc).lower():
        return ChainClientError.INSUFFICIENT_FUNDS
    return ChainClientError.UNKNOWN


def _wrap(exc: Exception, operation: str) -> ChainClientError:
    kind = classify_error(exc)
    logger.warning("chain_call_failed", operation=operation, kind=kind, error=str(exc))
    return ChainClientError(kind, detail=str(exc))


def format_units(value: int, unit: str = "ether") -> str:
    """Render a wei amount as decimal text in the given unit; always has a fractional part ("10.0")."""
    amount = Decimal(Web3.from_wei(int(value), unit))
    text = format(amount.normalize(), "f")
    return text if "." in text else f"{text}.0"


def parse_ether(value: Decimal | str) -> int:
    """ETH amount to wei."""
    return int(Web3.to_wei(Decimal(value), "ether"))


class ChainClient:
    """Faucet account bound to one web3 provider."""

    def __init__(self, w3: Web3, private_key: str) -> None:
        self.w3 = w3
        self._account = Account.from_key(private_key)
        self._send_lock = threading.Lock()
        self._chain_id: int | None = None

    @classmethod
    def from_rpc_url(cls, rpc_url: str, private_key: str, timeout_sec: float = 30.0) -> "ChainClient":
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout_sec}))
        return cls(w3, private_key)

    @property
    def address(self) -> str:
        """Checksummed address of the signing account."""
        return self._account.address

    def get_balance(self, address: str) -> int:
        """Balance in wei at the latest block."""
        try:
            return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))
        except Exception as e:
            raise _wrap(e, "get_balance") from e

    def get_gas_price(self) -> int:
        try:
            return int(self.w3.eth.gas_price)
        except Exception as e:
            raise _wrap(e, "gas_price") from e

    def _get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(self.w3.eth.chain_id)
        return self._chain_id

    def get_network(self) -> NetworkInfo:
        try:
            chain_id = self._get_chain_id()
        except Exception as e:
            raise _wrap(e, "chain_id") from e
        return NetworkInfo(name=NETWORK_NAMES.get(chain_id, "unknown"), chain_id=chain_id)

    def send_transfer(self, to: str, value_wei: int, gas: int = TRANSFER_GAS_LIMIT) -> str:
        """
        Sign and broadcast a value transfer from the faucet account.

        Nonce lookup, signing and broadcast are serialized so concurrent
        requests never reuse a pending nonce. Returns the 0x-prefixed tx hash.
        """
        with self._send_lock:
            try:
                tx: dict[str, Any] = {
                    "to": Web3.to_checksum_address(to),
                    "value": int(value_wei),
                    "gas": gas,
                    "gasPrice": int(self.w3.eth.gas_price),
                    "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
                    "chainId": self._get_chain_id(),
                }
                signed = self._account.sign_transaction(tx)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            except Exception as e:
                raise _wrap(e, "send_transfer") from e
        return Web3.to_hex(tx_hash)

    def wait_for_confirmation(self, tx_hash: str, timeout_sec: float) -> int | None:
        """
        Wait for the receipt of tx_hash; return its block number.

        Returns None if no receipt arrives within timeout_sec or the
        transaction was mined but reverted.
        """
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=timeout_sec,
                poll_latency=RECEIPT_POLL_LATENCY_SEC,
            )
        except TimeExhausted:
            logger.info("chain_receipt_timeout", tx_hash=tx_hash, timeout_sec=timeout_sec)
            return None
        except Exception as e:
            raise _wrap(e, "wait_for_confirmation") from e
        if receipt.get("status") == 0:
            logger.warning("chain_tx_reverted", tx_hash=tx_hash, block_number=receipt.get("blockNumber"))
            return None
        block = receipt.get("blockNumber")
        return int(block) if block is not None else None
