"""
Application settings and environment configuration.

Loads configuration from environment variables (and .env via env.py),
validates required settings and provides defaults for optional ones.
get_settings() is cached; call reset_settings_for_test() after changing env.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from sepolia_faucet.config.env import get_private_key, get_rpc_url, load_faucet_env
from sepolia_faucet.core.exceptions import ConfigError

DEFAULT_PORT = 3001
DEFAULT_MIN_BALANCE_ETH = "1.0"
DEFAULT_MAX_RECIPIENT_BALANCE_ETH = "5.0"
DEFAULT_COOLDOWN_SEC = 3600.0
DEFAULT_CONFIRMATION_TIMEOUT_SEC = 120.0
DEFAULT_RPC_TIMEOUT_SEC = 30.0


@dataclass(frozen=True)
class Settings:
    """Typed faucet configuration. private_key is 0x-prefixed hex."""

    rpc_url: str
    private_key: str = field(repr=False)
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    min_balance_eth: Decimal = Decimal(DEFAULT_MIN_BALANCE_ETH)
    max_recipient_balance_eth: Decimal = Decimal(DEFAULT_MAX_RECIPIENT_BALANCE_ETH)
    cooldown_sec: float = DEFAULT_COOLDOWN_SEC
    confirmation_timeout_sec: float = DEFAULT_CONFIRMATION_TIMEOUT_SEC
    rpc_timeout_sec: float = DEFAULT_RPC_TIMEOUT_SEC


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name, str(default))
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name, str(default))
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must be non-negative, got {raw!r}")
    return value


def _env_eth(name: str, default: str) -> Decimal:
    raw = _env_str(name, default)
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ConfigError(f"{name} must be an ETH amount, got {raw!r}") from e
    if not value.is_finite() or value < 0:
        raise ConfigError(f"{name} must be a non-negative ETH amount, got {raw!r}")
    return value


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ConfigError: PRIVATE_KEY missing/malformed or a numeric variable invalid.
    """
    load_faucet_env()
    return Settings(
        rpc_url=get_rpc_url(),
        private_key=get_private_key(),
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", DEFAULT_PORT),
        min_balance_eth=_env_eth("FAUCET_MIN_BALANCE_ETH", DEFAULT_MIN_BALANCE_ETH),
        max_recipient_balance_eth=_env_eth(
            "FAUCET_MAX_RECIPIENT_BALANCE_ETH", DEFAULT_MAX_RECIPIENT_BALANCE_ETH
        ),
        cooldown_sec=_env_float("FAUCET_COOLDOWN_SEC", DEFAULT_COOLDOWN_SEC),
        confirmation_timeout_sec=_env_float(
            "FAUCET_CONFIRMATION_TIMEOUT_SEC", DEFAULT_CONFIRMATION_TIMEOUT_SEC
        ),
        rpc_timeout_sec=_env_float("FAUCET_RPC_TIMEOUT_SEC", DEFAULT_RPC_TIMEOUT_SEC),
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (validated once)."""
    return load_settings()


def reset_settings_for_test() -> None:
    get_settings.cache_clear()
