from sepolia_faucet.utils.address_utils import is_valid_address, normalize_address

__all__ = ["is_valid_address", "normalize_address"]
