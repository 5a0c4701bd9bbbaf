"""
Repositories.

Data access layer, one repository per table.
"""

from ledger.repositories.base import BaseRepository
from ledger.repositories.notification_repository import (
    AdminNotificationRepository,
    NotificationRepository,
)
from ledger.repositories.product_claim_repository import ProductClaimRepository
from ledger.repositories.product_inventory_repository import (
    ProductInventoryRepository,
)
from ledger.repositories.product_task_repository import ProductTaskRepository
from ledger.repositories.purchased_product_repository import (
    PurchasedProductRepository,
)
from ledger.repositories.referral_reward_repository import (
    ReferralRewardRepository,
)
from ledger.repositories.transaction_repository import TransactionRepository
from ledger.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "TransactionRepository",
    "PurchasedProductRepository",
    "ProductInventoryRepository",
    "ReferralRewardRepository",
    "ProductClaimRepository",
    "ProductTaskRepository",
    "NotificationRepository",
    "AdminNotificationRepository",
]
