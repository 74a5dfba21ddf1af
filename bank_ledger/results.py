"""
Operation Outcomes

Callers of the ledger (console menu, HTTP API) run operations through
attempt() and branch on the returned OperationResult instead of letting
ledger errors propagate.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import ErrorKind, LedgerError


@dataclass(frozen=True)
class OperationResult:
    """Either a value or a tagged ledger error"""
    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> 'OperationResult':
        return cls(value=value)

    @classmethod
    def failure(cls, error: LedgerError) -> 'OperationResult':
        return cls(error=error.kind, message=str(error))

    def unwrap(self) -> Any:
        """Return the value, or raise ValueError for a failed result"""
        if not self.ok:
            raise ValueError(f"{self.error.value}: {self.message}")
        return self.value


def attempt(operation: Callable[..., Any], *args, **kwargs) -> OperationResult:
    """
    Run a ledger operation and capture its outcome

    Only LedgerError is converted; any other exception is a bug and propagates.
    """
    try:
        return OperationResult.success(operation(*args, **kwargs))
    except LedgerError as e:
        return OperationResult.failure(e)
