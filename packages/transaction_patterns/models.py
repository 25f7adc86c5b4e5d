"""Data models for ``transaction_patterns``.

Records handled by the engine are frozen dataclasses. The store's JSON shape
(``type``, ``amount``, ``category``, ``date``, ``description``, ``_id``) is
validated by the :class:`StoredTransaction` pydantic model and converted into
a :class:`Transaction` at the boundary.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any, NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .amounts import to_json_number, to_non_negative_decimal

# ---------------------------------------------------------------------------
# Core records
# ---------------------------------------------------------------------------


class TransactionKind(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single income or expense entry as supplied by the store.

    Attributes
    ----------
    kind:
        Income or expense (``type`` on the wire).
    amount:
        Exact non-negative amount.
    category:
        Free-form label, case-sensitive as entered.
    date:
        ISO-8601 date string as supplied, or ``None`` when absent.
    description:
        Optional free text; empty string when absent.
    id:
        Store-issued identifier (``_id`` on the wire). Never interpreted.
    """

    kind: TransactionKind
    amount: Decimal
    category: str
    date: str | None = None
    description: str = ""
    id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.kind.value,
            "amount": to_json_number(self.amount),
            "category": self.category,
            "date": self.date,
            "description": self.description,
        }
        if self.id is not None:
            payload["_id"] = self.id
        return payload


@dataclass(frozen=True, slots=True)
class DraftTransaction:
    """A transaction-shaped record not yet assigned a store identifier.

    Produced by the voice interpreter and by manual form entry. ``date`` is an
    ISO ``YYYY-MM-DD`` string.
    """

    kind: TransactionKind
    amount: Decimal
    category: str
    description: str
    date: str

    def to_payload(self) -> dict[str, Any]:
        """Return the store's create-request body."""

        return {
            "type": self.kind.value,
            "amount": to_json_number(self.amount),
            "category": self.category,
            "date": self.date,
            "description": self.description,
        }


# ---------------------------------------------------------------------------
# Wire validation
# ---------------------------------------------------------------------------


class StoredTransaction(BaseModel):
    """Validated view of one record returned by the transaction store.

    Unknown keys (e.g. ``user``, ``__v``) are ignored. ``amount`` accepts JSON
    numbers and numeric strings; ``category`` must be a non-empty string and is
    kept exactly as entered, whitespace included. A date never makes a record
    invalid.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    type: TransactionKind
    amount: Decimal
    category: str
    date: str | None = None
    description: str | None = None
    id: str | None = Field(default=None, alias="_id")

    @field_validator("amount", mode="before")
    @classmethod
    def _exact_amount(cls, v: Any) -> Decimal:
        return to_non_negative_decimal(v)

    @field_validator("category", mode="before")
    @classmethod
    def _category_non_empty(cls, v: Any) -> str:
        if not isinstance(v, str) or not v:
            raise ValueError("category must be a non-empty string")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def _iso_date(cls, v: Any) -> str | None:
        # Dates are carried, never interpreted; other shapes (epoch millis) stay opaque.
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, dt.date):
            return v.isoformat()
        return str(v)

    @field_validator("description", mode="before")
    @classmethod
    def _text_description(cls, v: Any) -> str | None:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("id", mode="before")
    @classmethod
    def _opaque_id(cls, v: Any) -> str | None:
        # Mongo-style ids arrive as strings; numbers are stringified untouched.
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def to_transaction(self) -> Transaction:
        return Transaction(
            kind=self.type,
            amount=self.amount,
            category=self.category,
            date=self.date,
            description=self.description or "",
            id=self.id,
        )


# ---------------------------------------------------------------------------
# Derived structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RecurrenceGroup:
    """Expenses sharing one exact (amount, category) key.

    ``representative`` is the first matching transaction and ``dates`` holds
    every occurrence's date in input order.
    """

    representative: Transaction
    occurrence_count: int
    dates: tuple[str | None, ...]

    @property
    def amount(self) -> Decimal:
        return self.representative.amount

    @property
    def category(self) -> str:
        return self.representative.category

    @property
    def group_key(self) -> tuple[Decimal, str]:
        return (self.representative.amount, self.representative.category)


class ChartSeries(NamedTuple):
    """Parallel label/value series for a bar-chart collaborator."""

    label: str
    labels: tuple[str, ...]
    values: tuple[Decimal, ...]


@dataclass(frozen=True, slots=True, eq=False)
class CategoryAggregate(Mapping[str, Decimal]):
    """Read-only mapping of category → summed expense amount.

    Iteration follows the order categories were first seen in the input, so
    ``labels()`` and ``values()`` pair up by index. Equality is mapping
    equality (``agg == {"food": Decimal("170")}``).
    """

    totals: tuple[tuple[str, Decimal], ...] = ()
    _index: dict[str, Decimal] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", dict(self.totals))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Decimal]]) -> CategoryAggregate:
        return cls(totals=tuple(pairs))

    def __getitem__(self, category: str) -> Decimal:
        return self._index[category]

    def __iter__(self) -> Iterator[str]:
        return (cat for cat, _ in self.totals)

    def __len__(self) -> int:
        return len(self.totals)

    def labels(self) -> tuple[str, ...]:
        return tuple(cat for cat, _ in self.totals)

    def values(self) -> tuple[Decimal, ...]:  # type: ignore[override]
        return tuple(total for _, total in self.totals)

    def series(self, label: str = "Expenses by Category") -> ChartSeries:
        return ChartSeries(label=label, labels=self.labels(), values=self.values())


class DetectionResult(NamedTuple):
    """Output of one detection pass: recurring groups and category totals."""

    groups: tuple[RecurrenceGroup, ...]
    aggregates: CategoryAggregate


# Accepted element shapes for detector input
TransactionLike: TypeAlias = Transaction | Mapping[str, Any]


__all__ = [
    "CategoryAggregate",
    "ChartSeries",
    "DetectionResult",
    "DraftTransaction",
    "RecurrenceGroup",
    "StoredTransaction",
    "Transaction",
    "TransactionKind",
    "TransactionLike",
]
