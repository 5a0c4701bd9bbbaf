"""Balance and transaction ledger."""

from ledger.services.ledger.balance_ledger import BalanceLedger

__all__ = ["BalanceLedger"]
