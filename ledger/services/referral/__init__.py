"""
Referral services package.

Contains modular services for referral processing:
- config: Configuration constants (REFERRAL_DEPTH, REFERRAL_RATES)
- chain_manager: Resolves referrer ancestry
- query_manager: Handles referral queries
- bonus_processor: Pays deposit and legacy registration bonuses
"""

from ledger.services.referral.bonus_processor import (
    BonusResult,
    ReferralBonusProcessor,
)
from ledger.services.referral.chain_manager import ReferralChainManager
from ledger.services.referral.config import (
    LEGACY_REFERRAL_BONUS,
    REFERRAL_DEPTH,
    REFERRAL_RATES,
)
from ledger.services.referral.query_manager import (
    ReferralDetails,
    ReferralQueryManager,
)


__all__ = [
    # Configuration
    "LEGACY_REFERRAL_BONUS",
    "REFERRAL_DEPTH",
    "REFERRAL_RATES",
    # Managers
    "ReferralChainManager",
    "ReferralQueryManager",
    "ReferralDetails",
    # Bonus processing
    "ReferralBonusProcessor",
    "BonusResult",
]
