"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from ledger.models.base import Base
from ledger.models.enums import (
    AdminNotificationType,
    InventoryType,
    MilestoneClaimStatus,
    MilestoneStatus,
    NotificationType,
    PlanType,
    ProductStatus,
    TransactionStatus,
    TransactionType,
    UserStatus,
)
from ledger.models.notification import AdminNotification, Notification
from ledger.models.product_claim import ProductClaim
from ledger.models.product_inventory import ProductInventory
from ledger.models.product_task import ProductTask
from ledger.models.purchased_product import PurchasedProduct
from ledger.models.referral_reward import ReferralReward
from ledger.models.transaction import Transaction
from ledger.models.user import User

__all__ = [
    # Base
    "Base",
    # Enums
    "AdminNotificationType",
    "InventoryType",
    "MilestoneClaimStatus",
    "MilestoneStatus",
    "NotificationType",
    "PlanType",
    "ProductStatus",
    "TransactionStatus",
    "TransactionType",
    "UserStatus",
    # Core Models
    "User",
    "Transaction",
    "PurchasedProduct",
    "ProductInventory",
    "ProductClaim",
    "ProductTask",
    "ReferralReward",
    # Notifications
    "Notification",
    "AdminNotification",
]
