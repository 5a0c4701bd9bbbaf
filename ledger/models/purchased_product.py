"""
Purchased product model.

One row per plan purchase. ``end_date`` is fixed at purchase time and
``status`` only moves Active -> Completed.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger.models.base import Base
from ledger.models.enums import ProductStatus
from ledger.models.types import MoneyType, PercentType, UTCDateTime
from ledger.utils.datetime_utils import utc_now


class PurchasedProduct(Base):
    """Purchased product - an investment in a plan."""

    __tablename__ = "purchased_products"
    __table_args__ = (
        CheckConstraint('price > 0', name='check_product_price_positive'),
        CheckConstraint('cycle_days > 0', name='check_product_cycle_positive'),
        CheckConstraint('end_date > start_date', name='check_product_dates'),
        Index("idx_product_status_end", "status", "end_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Plan snapshot at purchase time
    plan_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    daily_roi: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    daily_earning: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    total_earning: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    cycle_days: Mapped[int] = mapped_column(Integer, nullable=False)

    # Lifecycle
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    last_payout_date: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=ProductStatus.ACTIVE.value, nullable=False
    )
    total_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    @property
    def is_active(self) -> bool:
        """Check if product is still running."""
        return self.status == ProductStatus.ACTIVE.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PurchasedProduct(id={self.id}, user_id={self.user_id}, "
            f"plan_id={self.plan_id}, status={self.status})>"
        )
