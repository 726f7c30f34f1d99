"""Decimal helpers for gCO₂eq quantities"""

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# Matches the Numeric(15, 2) storage columns
GCO2EQ_PLACES = 2
GCO2EQ_QUANTUM = Decimal("0.01")
MAX_GCO2EQ = Decimal("9999999999999.99")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a numeric value to Decimal.

    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a numeric amount: {value!r}") from e
    else:
        raise ValueError(f"Not a numeric amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return result


def to_storable_gco2eq(value: Decimal) -> Decimal:
    """
    Return the amount at storage precision (2 decimal places).

    Raises:
        ValueError: If storing the amount would round it or overflow the column
    """
    if abs(value) > MAX_GCO2EQ:
        raise ValueError(f"Amount {value} exceeds the maximum of {MAX_GCO2EQ} gCO₂eq")
    quantized = value.quantize(GCO2EQ_QUANTUM)
    if quantized != value:
        raise ValueError(f"Amount {value} has more than {GCO2EQ_PLACES} decimal places")
    return quantized


def format_gco2eq(value: Decimal) -> str:
    """Render an amount with 2 decimal places for user-facing messages"""
    return f"{value:.2f}"
