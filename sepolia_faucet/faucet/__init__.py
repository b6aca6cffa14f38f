"""
Faucet package — cooldown tracking and the disbursement sequence.
"""

from sepolia_faucet.faucet.cooldown import CooldownTracker
from sepolia_faucet.faucet.service import (
    FAUCET_AMOUNT_WEI,
    DisbursementResult,
    DisbursementService,
)

__all__ = [
    "FAUCET_AMOUNT_WEI",
    "CooldownTracker",
    "DisbursementResult",
    "DisbursementService",
]
