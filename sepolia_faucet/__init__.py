"""
Sepolia Faucet — testnet ETH faucet backend.

Accepts a recipient address over HTTP, enforces per-address and per-IP
cooldowns, checks the faucet reserve, and signs and broadcasts a fixed-amount
transfer through web3. Modular layout: address utils, cooldown tracker,
disbursement service, chain client, and API server.
"""

__version__ = "0.1.0"
