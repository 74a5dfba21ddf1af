"""
Console Menu

Interactive text menu over an AccountRegistry. Commands are looked up in
a table of handlers; every ledger call goes through attempt() so errors
are reported and the loop continues.
"""

from decimal import Decimal
from typing import Callable, Dict, Optional, Tuple
import argparse

from .registry import AccountRegistry
from .results import attempt
from .money import decimal_from_string, format_amount
from .config import get_config
from .logging_config import setup_logging


DEMO_ACCOUNTS = [
    ("1001", "Ivan Ivanov", Decimal('5000.00')),
    ("1002", "Maria Petrova", Decimal('3000.00')),
    ("1003", "Alexey Sidorov", Decimal('10000.00')),
]


class Console:
    """Text I/O for the menu; input and output are injectable for tests"""

    def __init__(self, read: Optional[Callable[[str], str]] = None,
                 write: Optional[Callable[[str], None]] = None):
        self._read = read or input
        self._write = write or print

    def say(self, message: str = "") -> None:
        self._write(message)

    def ask(self, prompt: str) -> str:
        return self._read(prompt).strip()

    def ask_int(self, prompt: str) -> int:
        while True:
            try:
                return int(self.ask(prompt))
            except ValueError:
                self.say("Please enter a whole number!")

    def ask_amount(self, prompt: str) -> Decimal:
        while True:
            try:
                return decimal_from_string(self.ask(prompt))
            except ValueError:
                self.say("Please enter a number!")

    def error(self, message: str) -> None:
        self.say(f"Error: {message}")


def seed_demo_data(registry: AccountRegistry, console: Optional[Console] = None) -> None:
    """Register the demo accounts"""
    for account_number, owner_name, balance in DEMO_ACCOUNTS:
        result = attempt(registry.create_account, account_number, owner_name, balance)
        if not result.ok and console:
            console.error(f"could not create demo account {account_number}: {result.message}")
    if console:
        console.say("Demo data loaded!")


def create_account(console: Console, registry: AccountRegistry) -> None:
    console.say("\n=== Create Account ===")
    account_number = console.ask("Account number: ")
    owner_name = console.ask("Owner name: ")
    initial_balance = console.ask_amount("Initial balance: ")

    result = attempt(registry.create_account, account_number, owner_name, initial_balance)
    if result.ok:
        console.say("Account created!")
        console.say(result.value.get_account_info())
    else:
        console.error(result.message)


def deposit(console: Console, registry: AccountRegistry) -> None:
    console.say("\n=== Deposit ===")
    account_number = console.ask("Account number: ")
    amount = console.ask_amount("Amount to deposit: ")

    found = attempt(registry.get_account, account_number)
    if not found.ok:
        console.error(found.message)
        return
    result = attempt(found.value.deposit, amount)
    if result.ok:
        console.say(f"Deposited: {format_amount(amount)}")
        console.say(f"New balance: {format_amount(result.value)}")
    else:
        console.error(result.message)


def withdraw(console: Console, registry: AccountRegistry) -> None:
    console.say("\n=== Withdraw ===")
    account_number = console.ask("Account number: ")
    amount = console.ask_amount("Amount to withdraw: ")

    found = attempt(registry.get_account, account_number)
    if not found.ok:
        console.error(found.message)
        return
    result = attempt(found.value.withdraw, amount)
    if result.ok:
        console.say(f"Withdrawn: {format_amount(amount)}")
        console.say(f"New balance: {format_amount(result.value)}")
    else:
        console.error(result.message)


def transfer(console: Console, registry: AccountRegistry) -> None:
    console.say("\n=== Transfer ===")
    from_number = console.ask("From account: ")
    to_number = console.ask("To account: ")
    amount = console.ask_amount("Amount to transfer: ")

    result = attempt(registry.transfer, from_number, to_number, amount)
    if result.ok:
        console.say(f"Transferred: {format_amount(result.value.amount)}")
        console.say(f"From account {from_number} to account {to_number}")
    else:
        console.error(result.message)


def check_balance(console: Console, registry: AccountRegistry) -> None:
    console.say("\n=== Balance ===")
    account_number = console.ask("Account number: ")

    result = attempt(registry.get_account, account_number)
    if result.ok:
        console.say(result.value.get_account_info())
    else:
        console.error(result.message)


def transaction_history(console: Console, registry: AccountRegistry) -> None:
    console.say("\n=== Transaction History ===")
    account_number = console.ask("Account number: ")

    result = attempt(registry.get_account, account_number)
    if not result.ok:
        console.error(result.message)
        return
    console.say(f"Transaction history for account {account_number}:")
    for record in result.value.get_transaction_history():
        console.say(f"  * {record}")


def bank_summary(console: Console, registry: AccountRegistry) -> None:
    console.say("\n=== Bank Summary ===")
    console.say(f"Total bank balance: {format_amount(registry.get_total_bank_balance())}")
    console.say(f"Number of accounts: {registry.get_accounts_count()}")
    for account in registry.list_accounts():
        console.say(f"  {account.get_account_info()}")


Handler = Callable[[Console, AccountRegistry], None]

COMMANDS: Dict[int, Tuple[str, Handler]] = {
    1: ("Create account", create_account),
    2: ("Deposit", deposit),
    3: ("Withdraw", withdraw),
    4: ("Transfer", transfer),
    5: ("Check balance", check_balance),
    6: ("Transaction history", transaction_history),
    7: ("Bank summary", bank_summary),
}
EXIT_COMMAND = 0


def print_menu(console: Console) -> None:
    console.say("\n=== Main Menu ===")
    for key, (label, _) in COMMANDS.items():
        console.say(f"{key}. {label}")
    console.say(f"{EXIT_COMMAND}. Exit")


def run_menu(registry: AccountRegistry, console: Console) -> None:
    """Loop until the exit command"""
    while True:
        print_menu(console)
        choice = console.ask_int("Choose an option: ")
        if choice == EXIT_COMMAND:
            console.say("Exiting...")
            return
        command = COMMANDS.get(choice)
        if command is None:
            console.say("Invalid choice!")
            continue
        _, handler = command
        handler(console, registry)


def main(argv=None) -> None:
    """Entry point for the bank-ledger command"""
    parser = argparse.ArgumentParser(prog="bank-ledger", description="In-memory bank ledger")
    parser.add_argument("mode", nargs="?", choices=["menu", "serve"], default="menu")
    parser.add_argument("--host", help="API host (serve mode)")
    parser.add_argument("--port", type=int, help="API port (serve mode)")
    parser.add_argument("--no-demo", action="store_true", help="Start without demo accounts")
    args = parser.parse_args(argv)

    config = get_config()
    # The menu owns stdout, so logs default to plain text there
    setup_logging(
        level=config.log_level if args.mode == "serve" else "WARNING",
        log_format=config.log_format if args.mode == "serve" else "text"
    )

    registry = AccountRegistry()
    if args.mode == "serve":
        from .api import run_server
        if config.seed_demo_data and not args.no_demo:
            seed_demo_data(registry)
        run_server(registry, host=args.host or config.api_host, port=args.port or config.api_port)
        return

    console = Console()
    console.say("=== Bank Ledger ===")
    if config.seed_demo_data and not args.no_demo:
        seed_demo_data(registry, console)
    try:
        run_menu(registry, console)
    except (EOFError, KeyboardInterrupt):
        console.say("\nExiting...")


if __name__ == "__main__":
    main()
