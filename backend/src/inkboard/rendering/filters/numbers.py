"""Numeric formatting filters."""

from decimal import Decimal, InvalidOperation
from typing import Any


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _delimit(digits: str, delimiter: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return delimiter.join(groups)


def _format(number: Decimal, delimiter: str, separator: str, precision: int | None = None) -> str:
    text = f"{abs(number):.{precision}f}" if precision is not None else f"{abs(number):f}"
    integer, _, fraction = text.partition(".")
    out = _delimit(integer, delimiter)
    if fraction:
        out = f"{out}{separator}{fraction}"
    return out


def number_with_delimiter(value: Any, delimiter: str = ",", separator: str = ".") -> Any:
    """``1234567.5 -> "1,234,567.5"``. Non-numeric input is returned unchanged."""
    number = _to_decimal(value)
    if number is None:
        return value
    sign = "-" if number < 0 else ""
    return sign + _format(number, delimiter, separator)


def number_to_currency(
    value: Any,
    unit: str = "$",
    delimiter: str = ",",
    separator: str = ".",
    precision: int = 2,
) -> Any:
    """``1234.5 -> "$1,234.50"``; negative amounts render as ``-$1,234.50``."""
    number = _to_decimal(value)
    if number is None:
        return value
    sign = "-" if number < 0 else ""
    return f"{sign}{unit}{_format(number, delimiter, separator, int(precision))}"


FILTERS = {
    "number_with_delimiter": number_with_delimiter,
    "number_to_currency": number_to_currency,
}
