"""
Pydantic schemas for API requests and responses
"""

from typing import List, Optional, Union
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

from .accounts import AccountSnapshot, TransactionRecord
from .registry import TransferReceipt

# Strict members so JSON booleans are refused instead of read as 0/1
AmountField = Union[StrictStr, StrictInt, StrictFloat]


class CreateAccountRequest(BaseModel):
    account_number: str
    owner_name: str
    initial_balance: AmountField = Field("0", description="Decimal amount, string or number")


class AmountRequest(BaseModel):
    amount: AmountField = Field(..., description="Decimal amount, string or number")


class TransferRequest(BaseModel):
    from_account: str
    to_account: str
    amount: AmountField = Field(..., description="Decimal amount, string or number")


class TransactionModel(BaseModel):
    kind: str
    amount: str
    resulting_balance: str
    timestamp: str
    counterparty: Optional[str] = None
    description: str

    @classmethod
    def from_record(cls, record: TransactionRecord) -> 'TransactionModel':
        return cls(
            kind=record.kind.value,
            amount=str(record.amount),
            resulting_balance=str(record.resulting_balance),
            timestamp=record.timestamp.isoformat(),
            counterparty=record.counterparty,
            description=record.description
        )


class AccountModel(BaseModel):
    account_number: str
    owner_name: str
    balance: str
    created_at: str

    @classmethod
    def from_snapshot(cls, snapshot: AccountSnapshot) -> 'AccountModel':
        return cls(
            account_number=snapshot.account_number,
            owner_name=snapshot.owner_name,
            balance=str(snapshot.balance),
            created_at=snapshot.created_at.isoformat()
        )


class AccountHistoryModel(BaseModel):
    account_number: str
    balance: str
    transactions: List[TransactionModel]


class TransferModel(BaseModel):
    from_account: str
    to_account: str
    amount: str
    from_balance: str
    to_balance: str

    @classmethod
    def from_receipt(cls, receipt: TransferReceipt) -> 'TransferModel':
        return cls(
            from_account=receipt.from_account,
            to_account=receipt.to_account,
            amount=str(receipt.amount),
            from_balance=str(receipt.from_balance),
            to_balance=str(receipt.to_balance)
        )


class BalanceModel(BaseModel):
    account_number: str
    balance: str


class SummaryModel(BaseModel):
    total_balance: str
    accounts_count: int
