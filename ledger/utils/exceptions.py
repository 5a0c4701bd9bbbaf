"""
Exception handling utilities.

Defines domain exceptions and the error category that multi-step
operations treat as a recoverable step failure.
"""

from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError


class LedgerError(Exception):
    """Base class for ledger domain errors."""

    pass


class InsufficientBalanceError(LedgerError):
    """Raised when a guarded debit finds the balance too low."""

    def __init__(self, user_id: int, amount: Decimal) -> None:
        self.user_id = user_id
        self.amount = amount
        super().__init__(
            f"Insufficient balance for user {user_id} to debit {amount}"
        )


class UserNotFoundError(LedgerError):
    """Raised when a balance mutation targets a missing user."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


# Store failures and ledger refusals; ValueError and TypeError propagate
PERSISTENCE_ERRORS = (
    SQLAlchemyError,
    LedgerError,
)
