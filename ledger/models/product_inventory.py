"""
Product inventory model.

Tracks how many units of a limited product were sold. The persisted
quantity is ``purchased`` (counted up towards ``total``).
"""

from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger.models.base import Base


class ProductInventory(Base):
    """Inventory record for one limited product."""

    __tablename__ = "product_inventory"
    __table_args__ = (
        UniqueConstraint(
            "product_type", "product_id", name="uq_inventory_type_product"
        ),
        CheckConstraint(
            'purchased >= 0 AND purchased <= total',
            name='check_inventory_purchased_range'
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    purchased: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)

    @property
    def is_available(self) -> bool:
        """Check if at least one unit is left."""
        return self.purchased < self.total

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ProductInventory({self.product_type}/{self.product_id}: "
            f"{self.purchased}/{self.total})>"
        )
