# ruff: noqa: I001
"""CLI for the ``transaction_patterns`` package.

A Typer-based console interface over the detector and the voice
interpreter. Environment variables are loaded from a local ``.env`` with
``python-dotenv`` before any command runs:

- ``TRANSACTION_PATTERNS_LOG_LEVEL``: logging level (default ``INFO``).
- ``TRANSACTION_PATTERNS_LOG_FORMAT``: log line format preset or format string.
- ``TP_TRANSACTIONS_JSON``: default snapshot path for ``detect``/``listen``.

Business logic lives in :mod:`transaction_patterns.recurrence`,
:mod:`transaction_patterns.voice` and the workflow module.
"""

from __future__ import annotations

import datetime as dt
import json
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from typer.models import OptionInfo

from .amounts import to_json_number
from .display import render_category_totals, render_recurring, render_transactions
from .logging_setup import configure_logging
from .models import DetectionResult, DraftTransaction, RecurrenceGroup
from .recurrence import detect
from .store import InMemoryStore, SnapshotError, TransactionStore, load_snapshot
from .term_ui import prompt_transcript
from .voice import parse_transcript
from .workflows.voice_flow import FlowStatus, Notice, refresh, submit_transcript

# Exit code for a transcript that could not be interpreted (distinct from 1,
# which reports I/O or store failures).
EXIT_NOT_UNDERSTOOD = 2

console = Console()

_NOTICE_STYLES: dict[FlowStatus, str] = {
    FlowStatus.SUBMITTED: "green",
    FlowStatus.NOT_UNDERSTOOD: "yellow",
    FlowStatus.INVALID: "yellow",
    FlowStatus.SUBMIT_FAILED: "red",
}


# ---- Small module-level helpers ---------------------------------------------


def _group_to_json(group: RecurrenceGroup) -> dict[str, Any]:
    return {
        "amount": to_json_number(group.amount),
        "category": group.category,
        "count": group.occurrence_count,
        "dates": list(group.dates),
        "representative": group.representative.to_payload(),
    }


def detection_to_json(result: DetectionResult) -> dict[str, Any]:
    """JSON-ready view: recurring groups plus parallel chart series."""

    series = result.aggregates.series()
    return {
        "recurring": [_group_to_json(g) for g in result.groups],
        "totals": {
            "label": series.label,
            "labels": list(series.labels),
            "values": [to_json_number(v) for v in series.values],
        },
    }


def _print_detection(result: DetectionResult) -> None:
    console.print(render_recurring(result.groups))
    if len(result.aggregates):
        console.print(render_category_totals(result.aggregates))


def _load_records_or_exit(path: Path | None) -> list[dict[str, Any]]:
    if path is None:
        return []
    try:
        return load_snapshot(path)
    except SnapshotError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


def _parse_today_or_exit(today: str | None) -> dt.date | None:
    if today is None:
        return None
    try:
        return dt.date.fromisoformat(today)
    except ValueError as e:
        typer.echo(f"Error: --today expects YYYY-MM-DD, got {today!r}", err=True)
        raise typer.Exit(1) from e


def _draft_to_json(draft: DraftTransaction) -> str:
    return json.dumps(draft.to_payload(), ensure_ascii=False)


def listen_loop(
    store: TransactionStore,
    *,
    read_transcript: Callable[[list[str]], str | None],
    today: dt.date | None = None,
    out: Console | None = None,
) -> int:
    """Read transcripts until ``read_transcript`` returns ``None``.

    ``read_transcript`` receives the categories currently known to the store
    (for completion). Each understood transcript is submitted and the
    recurring panel is reprinted from a fresh detection. Returns the number
    of entries submitted.
    """

    out = out or console
    submitted = 0
    categories = list(refresh(store).aggregates.labels())

    def _show(notice: Notice) -> None:
        out.print(f"[{_NOTICE_STYLES[notice.status]}]{escape(notice.message)}[/]")

    while True:
        transcript = read_transcript(categories)
        if transcript is None:
            break
        outcome = submit_transcript(transcript, store=store, today=today, notify=_show)
        if outcome.submitted and outcome.detection is not None:
            submitted += 1
            categories = list(outcome.detection.aggregates.labels())
            out.print(render_recurring(outcome.detection.groups))
    return submitted


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Detect recurring expenses in a transaction snapshot and turn voice "
        "transcripts into draft transactions."
    ),
)


def _transactions_json_option() -> OptionInfo:
    # One OptionInfo per command; used inside Annotated so ruff B008 is satisfied.
    return typer.Option(
        ...,
        "--transactions-json",
        envvar="TP_TRANSACTIONS_JSON",
        help="Path to a JSON array of store records (the GET /api/expenses payload).",
        dir_okay=False,
        file_okay=True,
        exists=False,  # the handler reports missing files itself
    )


@app.command("detect")
def detect_cmd(
    transactions_json: Annotated[Path | None, _transactions_json_option()] = None,
    *,
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of tables."),
) -> None:
    """Print the transaction list, recurring expense groups and per-category totals."""

    if transactions_json is None:
        typer.echo(
            "Error: --transactions-json (or TP_TRANSACTIONS_JSON) is required.", err=True
        )
        raise typer.Exit(1)
    records = _load_records_or_exit(transactions_json)
    result = detect(records)
    if as_json:
        typer.echo(json.dumps(detection_to_json(result), ensure_ascii=False, indent=2))
    else:
        console.print(render_transactions(records))
        _print_detection(result)


@app.command("interpret")
def interpret_cmd(
    transcript: Annotated[list[str], typer.Argument(help="Transcript words.")],
    *,
    today: str | None = typer.Option(
        None, help="Override the draft date (YYYY-MM-DD); defaults to today (UTC)."
    ),
) -> None:
    """Interpret a transcript and print the draft transaction as JSON."""

    when = _parse_today_or_exit(today)
    outcome = parse_transcript(" ".join(transcript), today=when)
    if outcome.draft is None:
        typer.echo(f"Not understood: {outcome.failure}", err=True)
        raise typer.Exit(EXIT_NOT_UNDERSTOOD)
    typer.echo(_draft_to_json(outcome.draft))


@app.command("listen")
def listen_cmd(
    transactions_json: Annotated[Path | None, _transactions_json_option()] = None,
) -> None:
    """Interactively read transcripts and add them to an in-memory session store.

    The store is seeded from the snapshot when one is given. Enter ``quit``
    or press Ctrl-D to finish.
    """

    store = InMemoryStore(_load_records_or_exit(transactions_json))
    _print_detection(refresh(store))
    submitted = listen_loop(
        store,
        read_transcript=lambda cats: prompt_transcript(categories=cats),
    )
    console.print(f"Session ended; {submitted} entr{'y' if submitted == 1 else 'ies'} added.")


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, help="Logging level (falls back to TRANSACTION_PATTERNS_LOG_LEVEL)."
    ),
    log_format: str | None = typer.Option(
        None,
        help="'plain', 'short' or a logging format string "
        "(falls back to TRANSACTION_PATTERNS_LOG_FORMAT).",
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory without overriding
    variables already set, then configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging(log_level, fmt=log_format)

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m transaction_patterns.cli`
    main()
