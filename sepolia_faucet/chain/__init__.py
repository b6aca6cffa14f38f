"""
Chain package — web3 adapter for balance reads, fee data and transfers.
"""

from sepolia_faucet.chain.client import ChainClient, NetworkInfo, format_units, parse_ether

__all__ = ["ChainClient", "NetworkInfo", "format_units", "parse_ether"]
