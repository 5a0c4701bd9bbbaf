"""
Referral milestone reward claim model.

At most one row per (user, milestone target); the unique constraint is
the replay-prevention primitive for milestone claims.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger.models.base import Base
from ledger.models.enums import MilestoneClaimStatus
from ledger.models.types import MoneyType, UTCDateTime
from ledger.utils.datetime_utils import utc_now


class ReferralReward(Base):
    """Milestone claim for a referrer."""

    __tablename__ = "referral_rewards"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "milestone_target", name="uq_referral_reward_user_target"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    milestone_target: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=MilestoneClaimStatus.PENDING.value, nullable=False
    )
    claimed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
