"""
Account Module

A single bank account: its balance and its append-only transaction
history. The (balance, history) pair is guarded by one reentrant lock per
account, so every check-then-act and every read sees a consistent pair.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional, Tuple
from enum import Enum
import threading

from .errors import InvalidArgumentError, InvalidAmountError, InsufficientFundsError, LedgerError
from .money import AmountLike, ZERO, to_amount, format_amount
from .logging_config import get_logger, log_action


logger = get_logger("bank_ledger.accounts")


class TransactionKind(Enum):
    """Kinds of history records"""
    INITIAL = "initial"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"

    @property
    def is_transfer(self) -> bool:
        return self in (TransactionKind.TRANSFER_OUT, TransactionKind.TRANSFER_IN)


@dataclass(frozen=True)
class TransactionRecord:
    """
    Immutable entry in an account's transaction history
    """
    kind: TransactionKind
    amount: Decimal
    resulting_balance: Decimal
    timestamp: datetime
    counterparty: Optional[str] = None  # Only for transfer records

    def __post_init__(self):
        if self.kind.is_transfer and not self.counterparty:
            raise ValueError(f"{self.kind.value} record requires a counterparty")
        if not self.kind.is_transfer and self.counterparty is not None:
            raise ValueError(f"{self.kind.value} record cannot have a counterparty")

    @property
    def description(self) -> str:
        """Human-readable summary of the operation"""
        amount = format_amount(self.amount)
        if self.kind == TransactionKind.INITIAL:
            return f"Initial deposit: {amount}"
        if self.kind == TransactionKind.DEPOSIT:
            return f"Deposited: {amount}"
        if self.kind == TransactionKind.WITHDRAWAL:
            return f"Withdrawn: {amount}"
        if self.kind == TransactionKind.TRANSFER_OUT:
            return f"Transfer to {self.counterparty}: {amount}"
        return f"Transfer from {self.counterparty}: {amount}"

    def __str__(self) -> str:
        return (
            f"{self.timestamp:%Y-%m-%d %H:%M:%S} {self.description} "
            f"| Balance: {format_amount(self.resulting_balance)}"
        )


@dataclass(frozen=True)
class AccountSnapshot:
    """Point-in-time copy of an account, read under the account lock"""
    account_number: str
    owner_name: str
    balance: Decimal
    created_at: datetime
    history: Tuple[TransactionRecord, ...]


def _require_text(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{field_name} must be a non-empty string")
    return value


class Account:
    """
    Bank account with a non-negative balance and an auditable history.

    Accounts are created through AccountRegistry.create_account; the
    constructor records the Initial entry.
    """

    def __init__(self, account_number: str, owner_name: str, initial_balance: AmountLike = ZERO):
        self._account_number = _require_text(account_number, "Account number")
        self._owner_name = _require_text(owner_name, "Owner name")

        balance = to_amount(initial_balance, InvalidArgumentError)
        if balance < ZERO:
            raise InvalidArgumentError(
                f"Initial balance cannot be negative: {format_amount(balance)}"
            )

        self._lock = threading.RLock()
        self._created_at = datetime.now(timezone.utc)
        self._balance = balance
        self._history: List[TransactionRecord] = [
            TransactionRecord(
                kind=TransactionKind.INITIAL,
                amount=balance,
                resulting_balance=balance,
                timestamp=self._created_at
            )
        ]

    @property
    def account_number(self) -> str:
        return self._account_number

    @property
    def owner_name(self) -> str:
        return self._owner_name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def balance(self) -> Decimal:
        """Current balance"""
        with self._lock:
            return self._balance

    @property
    def lock(self) -> threading.RLock:
        """Guard for the balance/history pair, held by the registry across a transfer"""
        return self._lock

    def get_balance(self) -> Decimal:
        return self.balance

    def deposit(self, amount: AmountLike) -> Decimal:
        """
        Deposit funds

        Args:
            amount: Positive amount to add

        Returns:
            New balance

        Raises:
            InvalidAmountError: If amount is not positive
        """
        amount = self._positive_amount(amount, "deposit")
        with self._lock:
            new_balance = self._append(TransactionKind.DEPOSIT, amount)

        log_action(
            logger, "info", "Deposit posted",
            action="deposit", resource=f"account:{self._account_number}",
            extra={"amount": str(amount), "balance": str(new_balance)}
        )
        return new_balance

    def withdraw(self, amount: AmountLike) -> Decimal:
        """
        Withdraw funds

        Args:
            amount: Positive amount not exceeding the balance

        Returns:
            New balance

        Raises:
            InvalidAmountError: If amount is not positive
            InsufficientFundsError: If amount exceeds the balance
        """
        amount = self._positive_amount(amount, "withdraw")
        with self._lock:
            self._require_funds(amount, "withdraw")
            new_balance = self._append(TransactionKind.WITHDRAWAL, amount)

        log_action(
            logger, "info", "Withdrawal posted",
            action="withdraw", resource=f"account:{self._account_number}",
            extra={"amount": str(amount), "balance": str(new_balance)}
        )
        return new_balance

    def record_transfer_out(self, amount: AmountLike, counterparty: str) -> Decimal:
        """Debit leg of a transfer. Only AccountRegistry.transfer calls this."""
        amount = self._positive_amount(amount, "transfer_out")
        counterparty = self._counterparty(counterparty)
        with self._lock:
            self._require_funds(amount, "transfer_out")
            return self._append(TransactionKind.TRANSFER_OUT, amount, counterparty)

    def record_transfer_in(self, amount: AmountLike, counterparty: str) -> Decimal:
        """Credit leg of a transfer. Only AccountRegistry.transfer calls this."""
        amount = self._positive_amount(amount, "transfer_in")
        counterparty = self._counterparty(counterparty)
        with self._lock:
            return self._append(TransactionKind.TRANSFER_IN, amount, counterparty)

    def checkpoint(self) -> Tuple[Decimal, int]:
        """
        Mark the current (balance, history length) so a transfer leg can be
        undone. Only AccountRegistry.transfer calls this, holding self.lock.
        """
        with self._lock:
            return self._balance, len(self._history)

    def restore(self, checkpoint: Tuple[Decimal, int]) -> None:
        """Roll back to a checkpoint, dropping every record appended since"""
        balance, history_length = checkpoint
        with self._lock:
            del self._history[history_length:]
            self._balance = balance

    def get_account_info(self) -> str:
        """Formatted snapshot: number, owner, balance, creation time"""
        return (
            f"Account: {self._account_number} | Owner: {self._owner_name} | "
            f"Balance: {format_amount(self.balance)} | "
            f"Created: {self._created_at:%Y-%m-%d %H:%M:%S}"
        )

    def get_transaction_history(self) -> Tuple[TransactionRecord, ...]:
        """Ordered, read-only view of the history"""
        with self._lock:
            return tuple(self._history)

    def snapshot(self) -> AccountSnapshot:
        """Balance and history read as one consistent pair"""
        with self._lock:
            return AccountSnapshot(
                account_number=self._account_number,
                owner_name=self._owner_name,
                balance=self._balance,
                created_at=self._created_at,
                history=tuple(self._history)
            )

    def __repr__(self) -> str:
        return f"Account({self._account_number!r}, {self._owner_name!r}, balance={self.balance})"

    # Internal helpers; callers hold self._lock where state is touched

    def _append(self, kind: TransactionKind, amount: Decimal,
                counterparty: Optional[str] = None) -> Decimal:
        if kind in (TransactionKind.WITHDRAWAL, TransactionKind.TRANSFER_OUT):
            new_balance = self._balance - amount
        else:
            new_balance = self._balance + amount

        record = TransactionRecord(
            kind=kind,
            amount=amount,
            resulting_balance=new_balance,
            timestamp=datetime.now(timezone.utc),
            counterparty=counterparty
        )
        self._history.append(record)
        self._balance = new_balance
        return new_balance

    def _require_funds(self, amount: Decimal, action: str) -> None:
        if amount > self._balance:
            raise self._rejected(
                InsufficientFundsError(
                    f"Insufficient funds in account {self._account_number}: "
                    f"{format_amount(self._balance)} available, {format_amount(amount)} requested"
                ),
                action
            )

    def _positive_amount(self, amount: AmountLike, action: str) -> Decimal:
        try:
            value = to_amount(amount)
        except InvalidAmountError as e:
            raise self._rejected(e, action)
        if value <= ZERO:
            raise self._rejected(
                InvalidAmountError(f"Amount must be positive, got {format_amount(value)}"),
                action
            )
        return value

    def _counterparty(self, counterparty: str) -> str:
        _require_text(counterparty, "Counterparty account number")
        if counterparty == self._account_number:
            raise InvalidArgumentError("Cannot transfer to the same account")
        return counterparty

    def _rejected(self, error: LedgerError, action: str) -> LedgerError:
        log_action(
            logger, "warning", str(error),
            action=action, resource=f"account:{self._account_number}",
            extra={"error": error.kind.value}
        )
        return error
