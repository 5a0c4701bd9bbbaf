"""
Enumerations shared by models and services.

Values are stored as plain strings; members compare equal to their values.
"""

from enum import StrEnum


class TransactionType(StrEnum):
    """Kinds of financial events recorded in the transaction log."""

    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    INVESTMENT = "Investment"
    ADMIN_ADD = "Admin_Add"
    ADMIN_DEDUCT = "Admin_Deduct"
    REFERRAL_BONUS = "Referral_Bonus"


class TransactionStatus(StrEnum):
    """Transaction status."""

    COMPLETED = "Completed"
    PENDING = "Pending"
    FAILED = "Failed"


class UserStatus(StrEnum):
    """Account status."""

    ACTIVE = "Active"
    SUSPENDED = "Suspended"


class PlanType(StrEnum):
    """Plan families. Discriminates payout timing."""

    BASIC = "Basic"
    SPECIAL = "Special"
    PREMIUM = "Premium"


class ProductStatus(StrEnum):
    """Purchased product status. Completed is terminal."""

    ACTIVE = "Active"
    COMPLETED = "Completed"


class InventoryType(StrEnum):
    """Inventory-limited product families."""

    SPECIAL = "special"
    PREMIUM = "premium"


class MilestoneClaimStatus(StrEnum):
    """Milestone reward claim status."""

    PENDING = "pending"
    CLAIMED = "claimed"


class MilestoneStatus(StrEnum):
    """Computed status of a ladder tier for a user."""

    LOCKED = "locked"
    CLAIMABLE = "claimable"
    CLAIMED = "claimed"


class NotificationType(StrEnum):
    """User notification category."""

    ANNOUNCEMENT = "announcement"
    SYSTEM = "system"
    REFERRAL = "referral"
    TRANSACTION = "transaction"


class AdminNotificationType(StrEnum):
    """Admin notification category."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    USER_SUSPENSION = "user_suspension"
    FUND_ADJUSTMENT = "fund_adjustment"
    SYSTEM = "system"
