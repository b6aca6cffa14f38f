"""
Environment variable loading for the faucet.

- SEPOLIA_RPC_URL: JSON-RPC endpoint (read from .env)
- PRIVATE_KEY: faucet signing key, 64 hex chars with or without 0x
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from dotenv import load_dotenv

from sepolia_faucet.core.exceptions import ConfigError

# Project root: config is sepolia_faucet/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_SEPOLIA_RPC_URL = "https://rpc.sepolia.org"

_PRIVATE_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def load_faucet_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH, override=False)


def get_rpc_url() -> str:
    load_faucet_env()
    return (os.getenv("SEPOLIA_RPC_URL") or "").strip() or DEFAULT_SEPOLIA_RPC_URL


def get_private_key() -> str:
    """
    Return PRIVATE_KEY from env as 0x-prefixed hex.

    Raises ConfigError if unset or not 64 hex characters (after removing an
    optional 0x prefix). The key value never appears in the error message.
    """
    load_faucet_env()
    raw = (os.getenv("PRIVATE_KEY") or "").strip()
    if not raw:
        raise ConfigError(
            "PRIVATE_KEY environment variable is not set. Please set PRIVATE_KEY in your .env file"
        )
    key = raw[2:] if raw[:2].lower() == "0x" else raw
    if not _PRIVATE_KEY_RE.match(key):
        raise ConfigError(
            "Invalid private key format: PRIVATE_KEY must be a 64-character hexadecimal string"
        )
    return "0x" + key


def mask_rpc_url(url: str) -> str:
    """Hide API keys embedded in provider URLs (e.g. .../v2/<key>) for logging."""
    if "/v2/" in url:
        return url.split("/v2/")[0] + "/v2/***"
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url


# The values below are needed when the ASGI app is built at import time,
# before PRIVATE_KEY is validated.

def get_static_dir() -> Path:
    """Frontend build directory (FAUCET_STATIC_DIR, default ./build)."""
    load_faucet_env()
    return Path((os.getenv("FAUCET_STATIC_DIR") or "").strip() or "build")


def get_cors_origins() -> tuple[str, ...]:
    load_faucet_env()
    raw = (os.getenv("CORS_ORIGINS") or "").strip() or "*"
    return tuple(o.strip() for o in raw.split(",") if o.strip()) or ("*",)


def get_ip_rate_limit() -> str:
    """slowapi limit string for POST /api/faucet (FAUCET_IP_RATE_LIMIT, default 1/hour)."""
    load_faucet_env()
    return (os.getenv("FAUCET_IP_RATE_LIMIT") or "").strip() or "1/hour"
