# PATH: core/math.py
"""
Math utilities for token amounts.

All amounts are Decimal or int; floats never touch a token amount.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

from core.constants import ErrorCode
from core.exceptions import ValidationError

# Enough digits for any uint256 value
_PRECISION = 80

UINT256_MAX = 2**256 - 1


def safe_decimal(value: Union[str, int, float, Decimal, None], default: Decimal = Decimal("0")) -> Decimal:
    """
    Safely convert value to Decimal.

    Args:
        value: Value to convert
        default: Default if conversion fails

    Returns:
        Decimal value
    """
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def parse_amount(value: Union[str, int, float, Decimal]) -> Decimal:
    """
    Parse a human-unit amount supplied by a caller.

    Raises:
        ValidationError: If the value is not a finite, positive number
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(
            f"Invalid amount: {value!r}",
            code=ErrorCode.INVALID_AMOUNT,
            details={"amount": str(value)},
        )

    if not amount.is_finite() or amount <= 0:
        raise ValidationError(
            f"Amount must be a positive number, got {value!r}",
            code=ErrorCode.INVALID_AMOUNT,
            details={"amount": str(value)},
        )
    return amount


def to_base_units(amount: Union[str, int, Decimal], decimals: int) -> str:
    """
    Convert a human-unit amount to an integer base-unit string.

    Computes amount * 10**decimals and rounds half-up to an integer,
    e.g. ("1.5", 6) -> "1500000".

    Raises:
        ValidationError: If the scaled amount does not fit in a uint256
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            scaled = safe_decimal(amount) * (Decimal(10) ** decimals)
            raw = scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raw = None
        if raw is None or raw > UINT256_MAX:
            raise ValidationError(
                f"Amount {amount} with {decimals} decimals does not fit in a uint256",
                code=ErrorCode.INVALID_AMOUNT,
                details={"amount": str(amount), "decimals": decimals},
            )
        return str(raw)


def from_base_units(raw: Union[str, int], decimals: int) -> Decimal:
    """Convert integer base units to a human-unit Decimal."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(int(raw)) / (Decimal(10) ** decimals)


def parse_int(value: Union[str, int, None], default: int = 0) -> int:
    """
    Parse an integer that may arrive as int, decimal string or 0x-hex string.

    Raises:
        ValueError: If the string is neither decimal nor hex
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"Not an integer: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return default
    if text.lower().startswith("0x"):
        return int(text, 16)
    try:
        return int(Decimal(text))
    except InvalidOperation:
        raise ValueError(f"Not an integer: {value!r}")
