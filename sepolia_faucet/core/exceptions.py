"""
Application-level exceptions.

Every request-path failure is a FaucetError carrying the HTTP status code and
the user-facing message the API layer returns in {"error": message}.
ConfigError is raised at startup only and is never mapped to a response.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Missing or malformed configuration (e.g. PRIVATE_KEY). Fatal at startup."""


class FaucetError(Exception):
    """Base for errors surfaced to the faucet caller."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AddressRequired(FaucetError):
    status_code = 400
    message = "Address is required"


class InvalidAddress(FaucetError):
    status_code = 400
    message = "Invalid Ethereum address"


class RecipientAlreadyFunded(FaucetError):
    status_code = 400
    message = "Recipient address already has sufficient funds"


class CooldownActive(FaucetError):
    status_code = 429
    message = "This address has already requested funds recently. Please wait 1 hour."


class ReserveLow(FaucetError):
    status_code = 503
    message = "Faucet is running low on funds. Please contact the administrator."


class ChainClientError(FaucetError):
    """
    Wraps any signing, broadcast or RPC failure from the chain client.

    kind is one of "network", "insufficient_funds" or "unknown"; it selects
    the status code and message returned to the caller.
    """

    NETWORK = "network"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN = "unknown"

    _RESPONSES = {
        NETWORK: (502, "Network error. Please try again later."),
        INSUFFICIENT_FUNDS: (503, "Faucet has insufficient funds"),
        UNKNOWN: (500, "Internal server error"),
    }

    def __init__(self, kind: str = UNKNOWN, detail: str = "") -> None:
        if kind not in self._RESPONSES:
            kind = self.UNKNOWN
        self.kind = kind
        self.detail = detail
        self.status_code, message = self._RESPONSES[kind]
        super().__init__(message)
