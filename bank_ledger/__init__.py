"""
Bank Ledger

An in-memory ledger of bank accounts with deposits, withdrawals,
atomic transfers and an append-only transaction history per account.
"""

__version__ = "1.0.0"
