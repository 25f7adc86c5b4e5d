"""Draft construction from manual entry-form fields.

Mirrors the entry form's rules: kind defaults to expense, amount, category and
date are required, description is optional. The result is the same
:class:`~transaction_patterns.models.DraftTransaction` the voice interpreter
produces, so both pathways submit identical payloads.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from typing import Any

from .amounts import to_non_negative_decimal
from .models import DraftTransaction, TransactionKind


class DraftValidationError(ValueError):
    """A manual entry field is missing or invalid."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


def _parse_kind(raw: Any) -> TransactionKind:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return TransactionKind.EXPENSE
    try:
        return TransactionKind(str(raw).strip().lower())
    except ValueError as exc:
        raise DraftValidationError("type", f"must be 'income' or 'expense', got {raw!r}") from exc


def _parse_date(raw: Any) -> str:
    if isinstance(raw, dt.datetime):
        return raw.date().isoformat()
    if isinstance(raw, dt.date):
        return raw.isoformat()
    if not isinstance(raw, str) or not raw.strip():
        raise DraftValidationError("date", "is required")
    s = raw.strip()
    try:
        return dt.date.fromisoformat(s).isoformat()
    except ValueError as exc:
        raise DraftValidationError("date", f"expected YYYY-MM-DD, got {raw!r}") from exc


def build_draft(
    kind: str | TransactionKind | None,
    amount: Any,
    category: str | None,
    date: str | dt.date | None,
    description: str | None = "",
) -> DraftTransaction:
    """Validate manual form fields and return a draft transaction.

    ``category`` is kept exactly as typed, whitespace included, since
    recurrence grouping compares categories verbatim. Only empty input is
    rejected.
    """

    parsed_kind = _parse_kind(kind)
    try:
        parsed_amount = to_non_negative_decimal(amount)
    except ValueError as exc:
        raise DraftValidationError("amount", str(exc)) from exc
    if not isinstance(category, str) or not category:
        raise DraftValidationError("category", "is required")
    parsed_date = _parse_date(date)
    if description is not None and not isinstance(description, str):
        raise DraftValidationError("description", "must be text")

    return DraftTransaction(
        kind=parsed_kind,
        amount=parsed_amount,
        category=category,
        description=description or "",
        date=parsed_date,
    )


def draft_from_fields(fields: Mapping[str, Any]) -> DraftTransaction:
    """Build a draft from a form mapping using the store's field names."""

    return build_draft(
        fields.get("type"),
        fields.get("amount"),
        fields.get("category"),
        fields.get("date"),
        fields.get("description", ""),
    )


__all__ = ["DraftValidationError", "build_draft", "draft_from_fields"]
