"""
Disbursement service — one faucet request end to end.

validate → reserve cooldown → reserve balance check → recipient ceiling check
→ sign and broadcast → record cooldown → bounded wait for confirmation.

The cooldown is consumed as soon as the transfer is broadcast. A slow or
failed confirmation never reopens the window; the caller just gets no block
number.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from sepolia_faucet.chain.client import format_units, parse_ether
from sepolia_faucet.core.exceptions import (
    AddressRequired,
    ChainClientError,
    CooldownActive,
    InvalidAddress,
    RecipientAlreadyFunded,
    ReserveLow,
)
from sepolia_faucet.faucet.cooldown import CooldownTracker, describe_window
from sepolia_faucet.faucet_logging import bind_request, get_logger
from sepolia_faucet.utils.address_utils import is_valid_address

logger = get_logger(__name__)

# Fixed per-request amount: 0.1 ETH
FAUCET_AMOUNT_WEI = parse_ether("0.1")
DEFAULT_MIN_BALANCE_WEI = parse_ether("1.0")
DEFAULT_MAX_RECIPIENT_BALANCE_WEI = parse_ether("5.0")
DEFAULT_CONFIRMATION_TIMEOUT_SEC = 120.0


class ChainBackend(Protocol):
    """What the service needs from the chain client."""

    @property
    def address(self) -> str: ...

    def get_balance(self, address: str) -> int: ...

    def send_transfer(self, to: str, value_wei: int) -> str: ...

    def wait_for_confirmation(self, tx_hash: str, timeout_sec: float) -> int | None: ...


@dataclass(frozen=True)
class DisbursementResult:
    tx_hash: str
    amount_wei: int
    block_number: int | None = None

    @property
    def amount(self) -> str:
        """Disbursed amount as ETH text, e.g. "0.1"."""
        return format_units(self.amount_wei)

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": True,
            "txHash": self.tx_hash,
            "amount": self.amount,
        }
        if self.block_number is not None:
            body["blockNumber"] = self.block_number
        return body


class DisbursementService:
    """Admission checks plus the transfer itself. Thread-safe; share one instance."""

    def __init__(
        self,
        chain: ChainBackend,
        cooldowns: CooldownTracker,
        min_balance_wei: int = DEFAULT_MIN_BALANCE_WEI,
        max_recipient_balance_wei: int = DEFAULT_MAX_RECIPIENT_BALANCE_WEI,
        confirmation_timeout_sec: float = DEFAULT_CONFIRMATION_TIMEOUT_SEC,
    ) -> None:
        self.chain = chain
        self.cooldowns = cooldowns
        self.min_balance_wei = int(min_balance_wei)
        self.max_recipient_balance_wei = int(max_recipient_balance_wei)
        self.confirmation_timeout_sec = confirmation_timeout_sec

    @classmethod
    def from_settings(cls, settings: Any, chain: ChainBackend) -> "DisbursementService":
        return cls(
            chain=chain,
            cooldowns=CooldownTracker(window_sec=settings.cooldown_sec),
            min_balance_wei=parse_ether(Decimal(settings.min_balance_eth)),
            max_recipient_balance_wei=parse_ether(Decimal(settings.max_recipient_balance_eth)),
            confirmation_timeout_sec=settings.confirmation_timeout_sec,
        )

    @property
    def amount_wei(self) -> int:
        return FAUCET_AMOUNT_WEI

    def disburse(self, address: Any) -> DisbursementResult:
        """
        Send FAUCET_AMOUNT_WEI to address.

        Raises:
            AddressRequired, InvalidAddress: bad input.
            CooldownActive: address served within the window (or in flight).
            ReserveLow: faucet balance below the operating minimum.
            RecipientAlreadyFunded: recipient balance at or above the ceiling.
            ChainClientError: balance read or broadcast failed.
        """
        if not address:
            raise AddressRequired()
        if not is_valid_address(address):
            raise InvalidAddress()

        log = bind_request(address)
        if not self.cooldowns.reserve(address):
            log.info("faucet_cooldown_active")
            raise CooldownActive(
                "This address has already requested funds recently. "
                f"Please wait {describe_window(self.cooldowns.window_sec)}."
            )

        try:
            self._check_balances(address)
            log.info("faucet_sending", amount=format_units(FAUCET_AMOUNT_WEI))
            tx_hash = self.chain.send_transfer(address, FAUCET_AMOUNT_WEI)
        except BaseException:
            self.cooldowns.release(address)
            raise

        self.cooldowns.record_disbursement(address)
        log.info("faucet_transfer_sent", tx_hash=tx_hash)

        block_number = self._wait_for_block(tx_hash)
        if block_number is not None:
            log.info("faucet_transfer_confirmed", tx_hash=tx_hash, block_number=block_number)
        return DisbursementResult(tx_hash=tx_hash, amount_wei=FAUCET_AMOUNT_WEI, block_number=block_number)

    def _check_balances(self, address: str) -> None:
        reserve = self.chain.get_balance(self.chain.address)
        if reserve < self.min_balance_wei:
            logger.warning(
                "faucet_reserve_low",
                balance=format_units(reserve),
                minimum=format_units(self.min_balance_wei),
            )
            raise ReserveLow()
        recipient_balance = self.chain.get_balance(address)
        if recipient_balance >= self.max_recipient_balance_wei:
            logger.info(
                "faucet_recipient_funded",
                address=address,
                balance=format_units(recipient_balance),
            )
            raise RecipientAlreadyFunded()

    def _wait_for_block(self, tx_hash: str) -> int | None:
        try:
            return self.chain.wait_for_confirmation(tx_hash, self.confirmation_timeout_sec)
        except ChainClientError as e:
            logger.warning("faucet_confirmation_failed", tx_hash=tx_hash, kind=e.kind)
            return None
