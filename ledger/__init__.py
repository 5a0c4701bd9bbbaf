"""
Referral and investment ledger.

Plan purchases, product payouts, multi-level referral bonuses and
milestone rewards on top of an async SQLAlchemy store.
"""

__version__ = "1.0.0"
