"""
Ledger Error Types

Every ledger operation either returns its result or raises exactly one
of the errors below, before any state has been changed.
"""

from enum import Enum


class ErrorKind(Enum):
    """Kinds of ledger failures"""
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_ACCOUNT = "duplicate_account"
    ACCOUNT_NOT_FOUND = "account_not_found"


class LedgerError(Exception):
    """Base exception for all ledger errors"""
    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT


class InvalidArgumentError(LedgerError):
    """Malformed input: empty identifier, negative initial balance, self-transfer"""
    kind = ErrorKind.INVALID_ARGUMENT


class InvalidAmountError(LedgerError):
    """Non-positive or non-numeric amount for a deposit, withdrawal or transfer leg"""
    kind = ErrorKind.INVALID_AMOUNT


class InsufficientFundsError(LedgerError):
    """Withdrawal or transfer exceeds the available balance"""
    kind = ErrorKind.INSUFFICIENT_FUNDS


class DuplicateAccountError(LedgerError):
    """Account number already registered"""
    kind = ErrorKind.DUPLICATE_ACCOUNT


class AccountNotFoundError(LedgerError):
    """Unknown account number"""
    kind = ErrorKind.ACCOUNT_NOT_FOUND
