"""Terminal rendering for detection output and transaction lists.

Plain-string helpers (``recurring_lines``, ``transaction_line``) carry the
dashboard's wording so they can be asserted in tests; the ``render_*``
helpers wrap the same data in ``rich`` renderables for the CLI.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .amounts import format_amount
from .models import CategoryAggregate, RecurrenceGroup, Transaction, TransactionKind
from .recurrence import coerce_transactions

NO_RECURRING_MESSAGE = "No recurring expenses detected yet."
NO_TRANSACTIONS_MESSAGE = "No transactions yet."


def recurring_line(group: RecurrenceGroup) -> str:
    amount = format_amount(group.amount)
    return f"{amount} - {group.category} (Seen {group.occurrence_count} times)"


def recurring_lines(groups: Sequence[RecurrenceGroup]) -> list[str]:
    """Lines for the recurring-expenses panel, or the empty-panel message."""

    if not groups:
        return [NO_RECURRING_MESSAGE]
    return [recurring_line(g) for g in groups]


def transaction_line(tx: Transaction) -> str:
    sign = "+" if tx.kind == TransactionKind.INCOME else "-"
    amount = format_amount(tx.amount)
    when = tx.date or "unknown date"
    desc = tx.description or "No description"
    return f"{tx.kind.value}: {amount} - {tx.category} on {when} ({desc})  {sign}{amount}"


def transaction_lines(records: Iterable[Any]) -> list[str]:
    """Render well-formed records; malformed ones are omitted like everywhere else."""

    return [transaction_line(tx) for tx in coerce_transactions(records)]


def render_transactions(records: Iterable[Any]) -> Panel:
    lines = transaction_lines(records)
    body = "\n".join(escape(line) for line in lines) if lines else NO_TRANSACTIONS_MESSAGE
    return Panel(body, title="Transactions", border_style="dim")


def render_recurring(groups: Sequence[RecurrenceGroup]) -> Panel | Table:
    if not groups:
        return Panel(NO_RECURRING_MESSAGE, title="Recurring Expenses", border_style="dim")
    table = Table(title="Recurring Expenses")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Seen", justify="right")
    table.add_column("Dates")
    for g in groups:
        table.add_row(
            format_amount(g.amount),
            escape(g.category),
            str(g.occurrence_count),
            ", ".join(d or "?" for d in g.dates),
        )
    return table


def render_category_totals(aggregates: CategoryAggregate) -> Table:
    series = aggregates.series()
    table = Table(title=series.label)
    table.add_column("Category")
    table.add_column("Total", justify="right")
    for label, value in zip(series.labels, series.values, strict=True):
        table.add_row(escape(label), format_amount(value))
    return table


__all__ = [
    "NO_RECURRING_MESSAGE",
    "NO_TRANSACTIONS_MESSAGE",
    "recurring_line",
    "recurring_lines",
    "render_category_totals",
    "render_recurring",
    "render_transactions",
    "transaction_line",
    "transaction_lines",
]
