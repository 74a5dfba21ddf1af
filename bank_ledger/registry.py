"""
Account Registry Module

Owns account identity and executes transfers as one all-or-nothing
operation.

Locking discipline:
    - self._lock serializes structural changes to the account map with
      the iteration done by the aggregate queries.
    - Each Account carries its own reentrant lock for its balance/history.
    - Whenever more than one account lock is needed, locks are taken in
      ascending account-number order. The registry lock, when needed, is
      always taken before any account lock.
"""

from decimal import Decimal
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Dict, Iterable, List
import threading

from .accounts import Account
from .errors import (
    LedgerError, InvalidArgumentError, DuplicateAccountError, AccountNotFoundError,
    InsufficientFundsError
)
from .money import AmountLike, ZERO, to_amount, format_amount
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class TransferReceipt:
    """Outcome of a completed transfer"""
    from_account: str
    to_account: str
    amount: Decimal
    from_balance: Decimal
    to_balance: Decimal


def _lock_order(accounts: Iterable[Account]) -> List[Account]:
    return sorted(accounts, key=lambda account: account.account_number)


class AccountRegistry:
    """
    In-memory registry of accounts keyed by account number
    """

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.RLock()
        self.logger = get_logger("bank_ledger.registry")

    def create_account(
        self,
        account_number: str,
        owner_name: str,
        initial_balance: AmountLike = ZERO
    ) -> Account:
        """
        Create and register a new account

        Args:
            account_number: Unique, non-empty account number
            owner_name: Non-empty owner name
            initial_balance: Non-negative opening balance

        Returns:
            The registered Account

        Raises:
            InvalidArgumentError: If a field is empty or the balance is negative
            DuplicateAccountError: If the account number is already registered
        """
        try:
            account = Account(account_number, owner_name, initial_balance)
        except LedgerError as e:
            raise self._rejected(e, "create_account", account_number)

        with self._lock:
            if account_number in self._accounts:
                raise self._rejected(
                    DuplicateAccountError(f"Account {account_number} already exists"),
                    "create_account", account_number
                )
            self._accounts[account_number] = account

        log_action(
            self.logger, "info", "Account created",
            action="create_account", resource=f"account:{account_number}",
            extra={"owner_name": owner_name, "initial_balance": str(account.balance)}
        )
        return account

    def get_account(self, account_number: str) -> Account:
        """
        Look up an account

        Returns:
            The live Account, not a copy

        Raises:
            AccountNotFoundError: If no account has this number
        """
        with self._lock:
            account = self._accounts.get(account_number)
        if account is None:
            raise AccountNotFoundError(f"Account {account_number} not found")
        return account

    def transfer(self, from_number: str, to_number: str, amount: AmountLike) -> TransferReceipt:
        """
        Move funds between two accounts.

        Either both legs are applied (one TRANSFER_OUT on the source, one
        TRANSFER_IN on the destination) or neither is.

        Args:
            from_number: Source account number
            to_number: Destination account number
            amount: Positive amount

        Returns:
            TransferReceipt with both resulting balances

        Raises:
            InvalidArgumentError: If source and destination are the same or amount is not positive
            AccountNotFoundError: If either account does not exist
            InsufficientFundsError: If the source balance is below amount
        """
        if from_number == to_number:
            raise self._rejected(
                InvalidArgumentError("Cannot transfer to the same account"),
                "transfer", from_number
            )

        try:
            value = to_amount(amount, InvalidArgumentError)
        except LedgerError as e:
            raise self._rejected(e, "transfer", from_number)
        if value <= ZERO:
            raise self._rejected(
                InvalidArgumentError(f"Transfer amount must be positive, got {format_amount(value)}"),
                "transfer", from_number
            )

        try:
            source = self.get_account(from_number)
            destination = self.get_account(to_number)
        except AccountNotFoundError as e:
            raise self._rejected(e, "transfer", from_number)

        with ExitStack() as stack:
            for account in _lock_order((source, destination)):
                stack.enter_context(account.lock)

            if value > source.balance:
                raise self._rejected(
                    InsufficientFundsError(
                        f"Insufficient funds in account {from_number}: "
                        f"{format_amount(source.balance)} available, {format_amount(value)} requested"
                    ),
                    "transfer", from_number
                )

            checkpoint = source.checkpoint()
            from_balance = source.record_transfer_out(value, to_number)
            try:
                to_balance = destination.record_transfer_in(value, from_number)
            except BaseException:
                source.restore(checkpoint)
                raise

        log_action(
            self.logger, "info", "Transfer completed",
            action="transfer", resource=f"account:{from_number}",
            extra={
                "from_account": from_number,
                "to_account": to_number,
                "amount": str(value)
            }
        )
        return TransferReceipt(
            from_account=from_number,
            to_account=to_number,
            amount=value,
            from_balance=from_balance,
            to_balance=to_balance
        )

    def get_total_bank_balance(self) -> Decimal:
        """Sum of all balances, read with every account lock held"""
        with self._lock:
            accounts = _lock_order(self._accounts.values())
            with ExitStack() as stack:
                for account in accounts:
                    stack.enter_context(account.lock)
                return sum((account.balance for account in accounts), ZERO)

    def get_accounts_count(self) -> int:
        with self._lock:
            return len(self._accounts)

    def list_accounts(self) -> List[Account]:
        """Accounts in creation order"""
        with self._lock:
            return list(self._accounts.values())

    def _rejected(self, error: LedgerError, action: str, account_number) -> LedgerError:
        log_action(
            self.logger, "warning", str(error),
            action=action, resource=f"account:{account_number}",
            extra={"error": error.kind.value}
        )
        return error
