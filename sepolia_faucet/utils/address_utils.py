"""Ethereum address validation utilities."""

from __future__ import annotations

from typing import Any

from web3 import Web3


def is_valid_address(value: Any) -> bool:
    """
    Return True if value is a 0x-prefixed 20-byte account address.

    All-lowercase and all-uppercase hex are accepted as is; mixed case must
    carry a valid EIP-55 checksum.
    """
    if not isinstance(value, str) or not value.startswith("0x"):
        return False
    return Web3.is_address(value)


def normalize_address(value: str) -> str:
    """Lowercase key used for cooldown bookkeeping."""
    return value.strip().lower()
