"""Referral milestone ladder."""

from ledger.services.milestone.ladder import (
    MilestoneOverview,
    TierStatus,
    evaluate_ladder,
)
from ledger.services.milestone.milestone_service import MilestoneService

__all__ = [
    "MilestoneOverview",
    "MilestoneService",
    "TierStatus",
    "evaluate_ladder",
]
