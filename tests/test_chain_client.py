"""
Tests for the web3 adapter (chain.client.ChainClient).

Uses a MagicMock in place of Web3 and a real eth-account key, so signing runs
for real while no RPC is made.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted

from sepolia_faucet.chain.client import (
    TRANSFER_GAS_LIMIT,
    ChainClient,
    classify_error,
    format_units,
    parse_ether,
)
from sepolia_faucet.core.exceptions import ChainClientError
from sepolia_faucet.faucet.cooldown import CooldownTracker
from sepolia_faucet.faucet.service import DisbursementService
from tests.conftest import VALID_ADDRESS, VALID_ADDRESS_UPPER

TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture
def w3():
    mock = MagicMock()
    mock.eth.gas_price = 2_000_000_000
    mock.eth.chain_id = 11155111
    mock.eth.get_transaction_count.return_value = 7
    mock.eth.get_balance.return_value = parse_ether("3")
    mock.eth.send_raw_transaction.return_value = bytes.fromhex("12" * 32)
    return mock


@pytest.fixture
def chain(w3):
    return ChainClient(w3, TEST_KEY)


def test_address_is_signing_account(chain):
    assert chain.address == Account.from_key(TEST_KEY).address


def test_get_balance_uses_checksum_address(chain, w3):
    assert chain.get_balance(VALID_ADDRESS_UPPER) == parse_ether("3")
    w3.eth.get_balance.assert_called_once_with(Web3.to_checksum_address(VALID_ADDRESS))


def test_get_network_names_sepolia(chain):
    info = chain.get_network()
    assert info.name == "sepolia"
    assert info.chain_id == 11155111


def test_get_network_unknown_chain(w3):
    w3.eth.chain_id = 31337
    assert ChainClient(w3, TEST_KEY).get_network().name == "unknown"


def test_send_transfer_signs_and_broadcasts(chain, w3):
    tx_hash = chain.send_transfer(VALID_ADDRESS, parse_ether("0.1"))
    assert tx_hash == "0x" + "12" * 32
    w3.eth.get_transaction_count.assert_called_once_with(chain.address, "pending")
    (raw,), _ = w3.eth.send_raw_transaction.call_args
    assert len(bytes(raw)) > 0
    assert TRANSFER_GAS_LIMIT == 21_000


def test_send_transfer_insufficient_funds(chain, w3):
    w3.eth.send_raw_transaction.side_effect = ValueError(
        {"code": -32000, "message": "insufficient funds for gas * price + value"}
    )
    with pytest.raises(ChainClientError) as exc:
        chain.send_transfer(VALID_ADDRESS, parse_ether("0.1"))
    assert exc.value.kind == ChainClientError.INSUFFICIENT_FUNDS
    assert exc.value.status_code == 503
    assert str(exc.value) == "Faucet has insufficient funds"


def test_balance_network_error(chain, w3):
    w3.eth.get_balance.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(ChainClientError) as exc:
        chain.get_balance(VALID_ADDRESS)
    assert exc.value.kind == ChainClientError.NETWORK
    assert exc.value.status_code == 502


def test_wait_returns_block_number(chain, w3):
    w3.eth.wait_for_transaction_receipt.return_value = {"blockNumber": 123, "status": 1}
    assert chain.wait_for_confirmation("0x" + "12" * 32, timeout_sec=5) == 123
    _, kwargs = w3.eth.wait_for_transaction_receipt.call_args
    assert kwargs["timeout"] == 5


def test_wait_timeout_returns_none(chain, w3):
    w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("not mined")
    assert chain.wait_for_confirmation("0x" + "12" * 32, timeout_sec=1) is None


def test_wait_other_error_wrapped(chain, w3):
    w3.eth.wait_for_transaction_receipt.side_effect = requests.exceptions.Timeout("slow")
    with pytest.raises(ChainClientError) as exc:
        chain.wait_for_confirmation("0x" + "12" * 32, timeout_sec=1)
    assert exc.value.kind == ChainClientError.NETWORK


@pytest.mark.parametrize(
    "exc, kind",
    [
        (requests.exceptions.ConnectionError("x"), ChainClientError.NETWORK),
        (requests.exceptions.ReadTimeout("x"), ChainClientError.NETWORK),
        (ValueError("Insufficient funds for transfer"), ChainClientError.INSUFFICIENT_FUNDS),
        (RuntimeError("nonce too low"), ChainClientError.UNKNOWN),
    ],
)
def test_classify_error(exc, kind):
    assert classify_error(exc) == kind


def test_unknown_kind_falls_back_to_500():
    err = ChainClientError("bogus")
    assert err.kind == ChainClientError.UNKNOWN
    assert err.status_code == 500


@pytest.mark.parametrize(
    "wei, unit, text",
    [
        (parse_ether("0.1"), "ether", "0.1"),
        (parse_ether("10"), "ether", "10.0"),
        (0, "ether", "0.0"),
        (1_500_000_000, "gwei", "1.5"),
        (20_000_000_000, "gwei", "20.0"),
    ],
)
def test_format_units(wei, unit, text):
    assert format_units(wei, unit) == text


def test_wait_reverted_receipt_has_no_block(chain, w3):
    w3.eth.wait_for_transaction_receipt.return_value = {"blockNumber": 77, "status": 0}
    assert chain.wait_for_confirmation("0x" + "12" * 32, timeout_sec=5) is None


def test_reverted_transfer_answers_without_block_and_keeps_cooldown(chain, w3):
    w3.eth.wait_for_transaction_receipt.return_value = {"blockNumber": 77, "status": 0}
    tracker = CooldownTracker(window_sec=3600)
    service = DisbursementService(chain=chain, cooldowns=tracker, confirmation_timeout_sec=1.0)
    body = service.disburse(VALID_ADDRESS).to_response()
    assert "blockNumber" not in body
    assert body["txHash"] == "0x" + "12" * 32
    assert tracker.is_eligible(VALID_ADDRESS) is False
