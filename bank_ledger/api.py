"""
FastAPI REST API Module

Exposes one AccountRegistry over HTTP. Route handlers are plain (sync)
functions, so FastAPI runs them on its worker threadpool and concurrent
requests meet the registry's locking directly.
"""

from typing import Optional
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

from . import __version__
from .errors import ErrorKind
from .registry import AccountRegistry
from .results import OperationResult, attempt
from .schemas import (
    CreateAccountRequest, AmountRequest, TransferRequest, AccountModel,
    AccountHistoryModel, TransactionModel, TransferModel, BalanceModel, SummaryModel
)


ERROR_STATUS = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.INVALID_AMOUNT: 400,
    ErrorKind.ACCOUNT_NOT_FOUND: 404,
    ErrorKind.DUPLICATE_ACCOUNT: 409,
    ErrorKind.INSUFFICIENT_FUNDS: 422,
}


def error_response(result: OperationResult) -> JSONResponse:
    """Render a failed OperationResult"""
    return JSONResponse(
        status_code=ERROR_STATUS[result.error],
        content={"error": result.error.value, "detail": result.message}
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies in the ledger error shape"""
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        problems.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(
        status_code=ERROR_STATUS[ErrorKind.INVALID_ARGUMENT],
        content={"error": ErrorKind.INVALID_ARGUMENT.value, "detail": "; ".join(problems)}
    )


def get_registry(request: Request) -> AccountRegistry:
    return request.app.state.registry


router = APIRouter()


@router.post("/accounts", status_code=status.HTTP_201_CREATED, response_model=AccountModel)
def create_account(request: CreateAccountRequest, registry: AccountRegistry = Depends(get_registry)):
    """Create a new account"""
    result = attempt(
        registry.create_account,
        request.account_number, request.owner_name, request.initial_balance
    )
    if not result.ok:
        return error_response(result)
    return AccountModel.from_snapshot(result.value.snapshot())


@router.get("/accounts/{account_number}", response_model=AccountModel)
def get_account(account_number: str, registry: AccountRegistry = Depends(get_registry)):
    """Get account details"""
    result = attempt(registry.get_account, account_number)
    if not result.ok:
        return error_response(result)
    return AccountModel.from_snapshot(result.value.snapshot())


@router.post("/accounts/{account_number}/deposit", response_model=BalanceModel)
def deposit(account_number: str, request: AmountRequest,
            registry: AccountRegistry = Depends(get_registry)):
    """Deposit into an account"""
    found = attempt(registry.get_account, account_number)
    if not found.ok:
        return error_response(found)
    result = attempt(found.value.deposit, request.amount)
    if not result.ok:
        return error_response(result)
    return BalanceModel(account_number=account_number, balance=str(result.value))


@router.post("/accounts/{account_number}/withdraw", response_model=BalanceModel)
def withdraw(account_number: str, request: AmountRequest,
             registry: AccountRegistry = Depends(get_registry)):
    """Withdraw from an account"""
    found = attempt(registry.get_account, account_number)
    if not found.ok:
        return error_response(found)
    result = attempt(found.value.withdraw, request.amount)
    if not result.ok:
        return error_response(result)
    return BalanceModel(account_number=account_number, balance=str(result.value))


@router.get("/accounts/{account_number}/transactions", response_model=AccountHistoryModel)
def get_account_transactions(account_number: str, registry: AccountRegistry = Depends(get_registry)):
    """Get transaction history for account"""
    result = attempt(registry.get_account, account_number)
    if not result.ok:
        return error_response(result)

    snapshot = result.value.snapshot()
    return AccountHistoryModel(
        account_number=snapshot.account_number,
        balance=str(snapshot.balance),
        transactions=[TransactionModel.from_record(record) for record in snapshot.history]
    )


@router.post("/transfers", response_model=TransferModel)
def transfer(request: TransferRequest, registry: AccountRegistry = Depends(get_registry)):
    """Transfer between accounts"""
    result = attempt(registry.transfer, request.from_account, request.to_account, request.amount)
    if not result.ok:
        return error_response(result)
    return TransferModel.from_receipt(result.value)


@router.get("/summary", response_model=SummaryModel)
def get_summary(registry: AccountRegistry = Depends(get_registry)):
    """Total balance and number of accounts"""
    return SummaryModel(
        total_balance=str(registry.get_total_bank_balance()),
        accounts_count=registry.get_accounts_count()
    )


def create_app(registry: Optional[AccountRegistry] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Bank Ledger API",
        description="In-memory bank ledger with atomic transfers",
        version=__version__
    )
    app.state.registry = registry if registry is not None else AccountRegistry()
    app.include_router(router, tags=["Ledger"])
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "bank_ledger_api",
            "version": __version__
        }

    return app


def run_server(registry: AccountRegistry, host: str = "127.0.0.1", port: int = 8090):
    """Run the FastAPI server"""
    uvicorn.run(create_app(registry), host=host, port=port, log_level="info")
