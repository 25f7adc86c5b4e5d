"""Recurring-expense detection and per-category expense totals.

Public API:
    - :func:`detect`
    - :func:`recurring_groups`
    - :func:`category_totals`
    - :func:`coerce_transactions`

Every call recomputes from the full snapshot it is given; nothing is cached
between calls. Income records never take part in grouping or totals.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from .amounts import to_non_negative_decimal
from .logging_setup import get_logger
from .models import (
    CategoryAggregate,
    DetectionResult,
    RecurrenceGroup,
    StoredTransaction,
    Transaction,
    TransactionKind,
)

_MIN_OCCURRENCES: int = 2

_logger = get_logger("transaction_patterns.recurrence")


# ---- Input coercion ----------------------------------------------------------


def _ensure_collection(transactions: Any) -> list[Any]:
    # A str/bytes or a single mapping is iterable but is never a collection of
    # records; treat it as a call-site error.
    if isinstance(transactions, (str, bytes, bytearray, Mapping)):
        raise TypeError(
            "expected a collection of transaction records, "
            f"got {type(transactions).__name__}"
        )
    try:
        return list(transactions)
    except TypeError as exc:
        raise TypeError(
            "expected a collection of transaction records, "
            f"got {type(transactions).__name__}"
        ) from exc


def _coerce_one(pos: int, item: Any) -> Transaction | None:
    if isinstance(item, Transaction):
        tx = _normalized(item)
        if tx is None:
            _logger.debug("skip:malformed pos=%d id=%r", pos, item.id)
        return tx
    if not isinstance(item, Mapping):
        raise TypeError(
            f"transaction at position {pos} must be a mapping or Transaction, "
            f"got {type(item).__name__}"
        )
    try:
        return StoredTransaction.model_validate(item).to_transaction()
    except ValidationError as exc:
        _logger.debug(
            "skip:malformed pos=%d id=%r errors=%d",
            pos,
            item.get("_id", item.get("id")),
            exc.error_count(),
        )
        return None


def _normalized(tx: Transaction) -> Transaction | None:
    # Callers may build Transaction with int/float amounts; key on the exact Decimal.
    if not isinstance(tx.category, str) or not tx.category:
        return None
    try:
        amount = to_non_negative_decimal(tx.amount)
    except ValueError:
        return None
    if amount is tx.amount:
        return tx
    return replace(tx, amount=amount)


def coerce_transactions(transactions: Iterable[Any]) -> list[Transaction]:
    """Return well-formed :class:`Transaction` objects in input order.

    Accepts store records (mappings in the REST shape) and ``Transaction``
    instances. Malformed records are dropped and logged at DEBUG. Raises
    ``TypeError`` when the argument is not a collection of records.
    """

    items = _ensure_collection(transactions)
    out: list[Transaction] = []
    for pos, item in enumerate(items):
        tx = _coerce_one(pos, item)
        if tx is not None:
            out.append(tx)
    return out


def _expenses(transactions: Iterable[Any]) -> list[Transaction]:
    return [
        tx for tx in coerce_transactions(transactions) if tx.kind == TransactionKind.EXPENSE
    ]


# ---- Grouping ----------------------------------------------------------------


@dataclass(slots=True)
class _GroupState:
    representative: Transaction
    dates: list[str | None] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.dates)


def _group_expenses(expenses: list[Transaction]) -> list[RecurrenceGroup]:
    # dict preserves first-seen key order; Decimal keys compare by value so
    # 50 and 50.00 land in the same bucket.
    by_key: dict[tuple[Decimal, str], _GroupState] = {}
    for tx in expenses:
        key = (tx.amount, tx.category)
        state = by_key.get(key)
        if state is None:
            state = by_key[key] = _GroupState(representative=tx)
        state.dates.append(tx.date)

    return [
        RecurrenceGroup(
            representative=state.representative,
            occurrence_count=state.count,
            dates=tuple(state.dates),
        )
        for state in by_key.values()
        if state.count >= _MIN_OCCURRENCES
    ]


def _sum_by_category(expenses: list[Transaction]) -> CategoryAggregate:
    totals: dict[str, Decimal] = {}
    for tx in expenses:
        totals[tx.category] = totals.get(tx.category, Decimal(0)) + tx.amount
    return CategoryAggregate.from_pairs(totals.items())


# ---- Public API --------------------------------------------------------------


def detect(transactions: Iterable[Any]) -> DetectionResult:
    """Detect recurring expenses and compute per-category expense totals.

    Behavior:
    - Coerces the input (store mappings or ``Transaction`` objects), skipping
      malformed records.
    - Keeps expense records only.
    - Groups by exact ``(amount, category)``; categories are compared as
      entered (case-sensitive, untrimmed).
    - Returns groups seen at least twice, in the order their key first
      appeared, plus the category totals over the same expense subset.

    Empty input yields ``DetectionResult((), CategoryAggregate())``.
    """

    expenses = _expenses(transactions)
    groups = tuple(_group_expenses(expenses))
    aggregates = _sum_by_category(expenses)
    _logger.debug(
        "detect:done expenses=%d groups=%d categories=%d",
        len(expenses),
        len(groups),
        len(aggregates),
    )
    return DetectionResult(groups=groups, aggregates=aggregates)


def recurring_groups(transactions: Iterable[Any]) -> tuple[RecurrenceGroup, ...]:
    return tuple(_group_expenses(_expenses(transactions)))


def category_totals(transactions: Iterable[Any]) -> CategoryAggregate:
    return _sum_by_category(_expenses(transactions))


__all__ = [
    "category_totals",
    "coerce_transactions",
    "detect",
    "recurring_groups",
]
