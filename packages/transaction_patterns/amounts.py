"""Exact decimal handling for monetary amounts.

Amounts travel as JSON numbers (floats or ints) or as short numeric strings.
Everything inside the package works on :class:`decimal.Decimal` so two equal
monetary values always compare equal, independent of binary floating point.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

# Unsigned integer or decimal: "250", "12.50", ".5", "7."
_NUMERIC_TOKEN = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)")


def to_decimal(raw: Any) -> Decimal:
    """Convert a wire amount into an exact, finite ``Decimal``.

    Floats go through ``repr`` (shortest round-trip form) so ``50.1`` becomes
    ``Decimal("50.1")`` rather than the binary expansion. Booleans are not
    amounts even though they are ``int`` subclasses.

    Raises ``ValueError`` for missing, non-numeric or non-finite input.
    """

    if raw is None:
        raise ValueError("amount is required")
    if isinstance(raw, bool):
        raise ValueError(f"invalid amount: {raw!r}")
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, int):
        d = Decimal(raw)
    elif isinstance(raw, float):
        d = Decimal(repr(raw))
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            raise ValueError("amount is empty")
        try:
            d = Decimal(s)
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {raw!r}") from exc
    else:
        raise ValueError(f"invalid amount type: {type(raw).__name__}")

    if not d.is_finite():
        raise ValueError(f"amount must be finite: {raw!r}")
    return d


def to_non_negative_decimal(raw: Any) -> Decimal:
    d = to_decimal(raw)
    if d < 0:
        raise ValueError(f"amount must be non-negative: {raw!r}")
    return d


def is_numeric_token(token: str) -> bool:
    """Return ``True`` when ``token`` reads as an unsigned integer or decimal."""

    return _NUMERIC_TOKEN.fullmatch(token) is not None


def to_json_number(d: Decimal) -> int | float:
    """Render a ``Decimal`` as a JSON number for the store's request shape."""

    if d == d.to_integral_value():
        return int(d)
    return float(d)


def format_amount(d: Decimal) -> str:
    """Plain display form without exponent notation (``Decimal("1E+2")`` → ``"100"``)."""

    if d == d.to_integral_value():
        return f"{d.to_integral_value():f}"
    return f"{d.normalize():f}"


__all__ = [
    "format_amount",
    "is_numeric_token",
    "to_decimal",
    "to_json_number",
    "to_non_negative_decimal",
]
