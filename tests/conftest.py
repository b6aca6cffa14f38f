"""
Pytest fixtures for faucet tests. Uses an in-memory fake chain and a
controllable clock so no test touches a real node.
"""

from __future__ import annotations

import threading

import pytest

from sepolia_faucet.chain.client import NetworkInfo, parse_ether
from sepolia_faucet.core.exceptions import ChainClientError
from sepolia_faucet.faucet.cooldown import CooldownTracker
from sepolia_faucet.faucet.service import DisbursementService

FAUCET_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
# Recipient from the README scenario, padded to a full 20 bytes, lowercase
VALID_ADDRESS = "0x742d35cc6635bb00000000000000000000000000"
# Same account written in all-uppercase hex (no checksum to verify)
VALID_ADDRESS_UPPER = "0x" + VALID_ADDRESS[2:].upper()
# EIP-55 checksummed
VALID_ADDRESS_2 = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
TX_HASH = "0x" + "ab" * 32


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeChain:
    """In-memory stand-in for ChainClient. Balances in wei keyed by lowercase address."""

    def __init__(self) -> None:
        self.address = FAUCET_ADDRESS
        self.balances: dict[str, int] = {FAUCET_ADDRESS.lower(): parse_ether("10")}
        self.gas_price = 1_500_000_000
        self.network = NetworkInfo(name="sepolia", chain_id=11155111)
        self.block_number: int | None = 4_200_000
        self.sent: list[tuple[str, int]] = []
        self.send_error: Exception | None = None
        self.balance_error: Exception | None = None
        self.wait_error: Exception | None = None
        self._lock = threading.Lock()

    def set_balance(self, address: str, value_wei: int) -> None:
        self.balances[address.lower()] = value_wei

    def get_balance(self, address: str) -> int:
        if self.balance_error is not None:
            raise self.balance_error
        return self.balances.get(address.lower(), 0)

    def get_gas_price(self) -> int:
        if self.balance_error is not None:
            raise self.balance_error
        return self.gas_price

    def get_network(self) -> NetworkInfo:
        return self.network

    def send_transfer(self, to: str, value_wei: int) -> str:
        if self.send_error is not None:
            raise self.send_error
        with self._lock:
            self.sent.append((to, value_wei))
            return "0x" + f"{len(self.sent):064x}" if len(self.sent) > 1 else TX_HASH

    def wait_for_confirmation(self, tx_hash: str, timeout_sec: float) -> int | None:
        if self.wait_error is not None:
            raise self.wait_error
        return self.block_number


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def tracker(clock):
    return CooldownTracker(window_sec=3600, clock=clock)


@pytest.fixture
def service(fake_chain, tracker):
    return DisbursementService(chain=fake_chain, cooldowns=tracker, confirmation_timeout_sec=1.0)


@pytest.fixture
def network_error():
    return ChainClientError(ChainClientError.NETWORK, detail="connection refused")


@pytest.fixture
def client(service, fake_chain):
    """
    FastAPI TestClient with the service and chain client overridden by fakes.
    The per-IP limiter is reset so each test starts with a fresh allowance.
    """
    from fastapi.testclient import TestClient

    from sepolia_faucet.api_server.middleware import limiter
    from sepolia_faucet.api_server.server import app, get_chain_client, get_faucet_service

    limiter.reset()
    limiter.enabled = True
    app.dependency_overrides[get_faucet_service] = lambda: service
    app.dependency_overrides[get_chain_client] = lambda: fake_chain
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True
    limiter.reset()


@pytest.fixture
def no_ip_limit(client):
    """Disable the per-IP limiter so per-address behaviour can be exercised."""
    from sepolia_faucet.api_server.middleware import limiter

    limiter.enabled = False
    return client
