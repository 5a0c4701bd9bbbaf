"""
Transaction model.

Immutable append-only record of every financial event. Rows are
inserted once and never updated or deleted; the log doubles as the
deduplication key for referral bonuses (``referral_user_id``), backed
by a partial unique index.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from ledger.models.base import Base
from ledger.models.enums import TransactionStatus
from ledger.models.types import MoneyType, UTCDateTime
from ledger.utils.datetime_utils import utc_now


class Transaction(Base):
    """Transaction model - financial audit trail."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transaction_user_type", "user_id", "type"),
        Index("idx_transaction_referral_user", "referral_user_id"),
        # One referral bonus per recipient and triggering user
        Index(
            "uq_transaction_referral_bonus",
            "user_id",
            "referral_user_id",
            unique=True,
            postgresql_where=text("type = 'Referral_Bonus'"),
            sqlite_where=text("type = 'Referral_Bonus'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    type: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=TransactionStatus.COMPLETED.value, nullable=False
    )

    # Snapshot of the balance around the mutation this record accompanies
    balance_before: Mapped[Decimal | None] = mapped_column(MoneyType, nullable=True)
    balance_after: Mapped[Decimal | None] = mapped_column(MoneyType, nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Downstream user whose action triggered a referral bonus
    referral_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False, index=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, amount={self.amount})>"
        )
