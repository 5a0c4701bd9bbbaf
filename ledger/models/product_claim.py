"""
Daily product claim model.

One row per product per calendar day (``date_key`` = ``YYYY-MM-DD``).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger.models.base import Base
from ledger.models.types import MoneyType, UTCDateTime
from ledger.utils.datetime_utils import utc_now


class ProductClaim(Base):
    """Daily payout claim for a purchased product."""

    __tablename__ = "product_claims"
    __table_args__ = (
        UniqueConstraint("product_id", "date_key", name="uq_claim_product_date"),
        Index("idx_claim_user_date", "user_id", "date_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("purchased_products.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    date_key: Mapped[str] = mapped_column(String(10), nullable=False)
    claim_date: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
