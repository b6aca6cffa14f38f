"""
Core cross-cutting concerns — the error taxonomy shared by the
disbursement service, chain client and API server.
"""

from sepolia_faucet.core.exceptions import (
    AddressRequired,
    ChainClientError,
    ConfigError,
    CooldownActive,
    FaucetError,
    InvalidAddress,
    RecipientAlreadyFunded,
    ReserveLow,
)

__all__ = [
    "AddressRequired",
    "ChainClientError",
    "ConfigError",
    "CooldownActive",
    "FaucetError",
    "InvalidAddress",
    "RecipientAlreadyFunded",
    "ReserveLow",
]
