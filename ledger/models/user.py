"""
User model.

Represents a registered investor. ``balance`` is mutated only through the
balance ledger; ``total_referrals`` and ``referral_earnings`` are advisory
counters, the transaction log is the source of truth.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from ledger.models.base import Base
from ledger.models.enums import UserStatus
from ledger.models.types import MoneyType, UTCDateTime
from ledger.utils.datetime_utils import utc_now


class User(Base):
    """User model - registered investors."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'balance >= 0', name='check_user_balance_non_negative'
        ),
        CheckConstraint(
            'referral_earnings >= 0',
            name='check_user_referral_earnings_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Contacts
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(20), default=UserStatus.ACTIVE.value, nullable=False
    )

    # Balances
    balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_deposits: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_withdrawals: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Deposit tracking (set once, true thereafter)
    has_deposited: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    first_deposit_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    last_check_in: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    # Referral
    referral_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True, index=True
    )
    referred_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    total_referrals: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    referral_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, email={self.email}, "
            f"referral_code={self.referral_code})>"
        )
