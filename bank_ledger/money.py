"""
Monetary Amounts Module

Normalizes amounts to Decimal with cent precision and formats them for
display. NEVER uses float for stored monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Type, Union
import re

from .errors import LedgerError, InvalidAmountError

# Set global decimal context for financial precision
getcontext().prec = 28

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')

AmountLike = Union[Decimal, int, float, str]

_TYPED_AMOUNT = re.compile(r'(?P<sign>[+-]?)\s*\$?\s*(?P<number>[\d.,]+)')


def to_amount(value: AmountLike, error_cls: Type[LedgerError] = InvalidAmountError) -> Decimal:
    """
    Convert a caller-supplied value to a Decimal rounded to cents

    Args:
        value: Decimal, int, str, or float (converted through its string form)
        error_cls: Ledger error raised when the value is not a finite number

    Returns:
        Decimal quantized to two fractional digits

    Raises:
        error_cls: If the value is not numeric, not finite, or too large
            to hold at cent precision
    """
    if isinstance(value, bool):
        raise error_cls(f"Amount must be a number, got {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise error_cls(f"Amount must be a number, got {value!r}")
    else:
        raise error_cls(f"Amount must be a number, got {type(value).__name__}")

    if not amount.is_finite():
        raise error_cls(f"Amount must be finite, got {value!r}")

    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Cent-quantized value needs more digits than the context precision
        raise error_cls(f"Amount is too large: {value!r}")


def format_amount(amount: Decimal) -> str:
    """Format for display as $%.2f"""
    return f"${amount:.2f}"


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert user-typed text to Decimal, handling common formats

    Args:
        value: String representation of number, e.g. "1,000.50", "$25", "12,5".
            Anything besides whitespace, a sign, one leading "$", digits
            and separators is rejected.

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    # Optional sign and dollar sign, then digits and separators only
    match = _TYPED_AMOUNT.fullmatch(value.strip())
    if match is None:
        raise ValueError(f"Cannot convert '{value}' to Decimal")
    clean_value = match.group('sign') + match.group('number')

    if ',' in clean_value and '.' in clean_value:
        # Both comma and dot - assume comma is thousands separator
        clean_value = clean_value.replace(',', '')
    elif ',' in clean_value and clean_value.count(',') == 1:
        # Single comma - could be decimal separator
        parts = clean_value.split(',')
        if len(parts[1]) <= 2:
            clean_value = clean_value.replace(',', '.')
        else:
            clean_value = clean_value.replace(',', '')

    try:
        result = Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    if not result.is_finite():
        raise ValueError(f"Cannot convert '{value}' to Decimal")
    return result
