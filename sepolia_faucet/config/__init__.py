"""
Configuration management for the faucet.

Loads and validates settings from environment variables and an optional
.env file. Exposes a single source of truth for all service configuration.
"""

from sepolia_faucet.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
