"""
Product lifecycle.

Purchase, daily payouts, expiry and manual claims of investment plans.
"""

from ledger.services.product.lifecycle_service import (
    ProductLifecycleService,
    SweepResult,
)
from ledger.services.product.purchase_processor import PurchaseProcessor
from ledger.services.product.task_service import ProductTaskService

__all__ = [
    "ProductLifecycleService",
    "ProductTaskService",
    "PurchaseProcessor",
    "SweepResult",
]
