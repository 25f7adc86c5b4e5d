"""Workflow orchestrators composing the store, the interpreter and the detector.

Pipelines:
- fetch → detect (``refresh``)
- transcript → interpret → create → refresh (``submit_transcript``)
- form fields → build draft → create → refresh (``submit_manual_entry``)
- update/delete → refresh (``update_entry`` / ``delete_entry``)

Detection is re-run after every successful store mutation so recurring groups
and totals always reflect the latest persisted state. Failures are reported
through an optional ``notify`` callable and never retried here.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias, cast

from ..amounts import format_amount
from ..drafts import DraftValidationError, draft_from_fields
from ..logging_setup import get_logger
from ..models import DetectionResult, DraftTransaction
from ..recurrence import detect
from ..store import SubmissionError, TransactionStore
from ..voice import ParseFailure, parse_transcript

_logger = get_logger("transaction_patterns.workflows.voice_flow")

NOT_UNDERSTOOD_MESSAGES: dict[ParseFailure, str] = {
    ParseFailure.NO_AMOUNT: "Couldn't understand that: no amount was heard.",
    ParseFailure.NO_CATEGORY: "Couldn't understand that: no category was heard.",
}


class FlowStatus(StrEnum):
    SUBMITTED = "submitted"
    NOT_UNDERSTOOD = "not_understood"
    INVALID = "invalid"
    SUBMIT_FAILED = "submit_failed"


@dataclass(frozen=True, slots=True)
class Notice:
    """A user-facing message emitted by a flow.

    ``status`` lets a UI style "couldn't understand" differently from a
    persistence failure.
    """

    status: FlowStatus
    message: str


@dataclass(frozen=True, slots=True)
class FlowOutcome:
    status: FlowStatus
    draft: DraftTransaction | None = None
    record: Mapping[str, Any] | None = None
    failure: ParseFailure | None = None
    error: str | None = None
    detection: DetectionResult | None = None

    @property
    def submitted(self) -> bool:
        return self.status is FlowStatus.SUBMITTED


Notify: TypeAlias = Callable[[Notice], None]


def _emit(notify: Notify | None, status: FlowStatus, message: str) -> None:
    if notify is not None:
        notify(Notice(status=status, message=message))


def refresh(store: TransactionStore) -> DetectionResult:
    """Fetch the current snapshot and run a fresh detection pass."""

    records = store.fetch()
    result = detect(records)
    _logger.info(
        "refresh:done records=%d groups=%d categories=%d",
        len(records),
        len(result.groups),
        len(result.aggregates),
    )
    return result


def _submit_draft(
    draft: DraftTransaction,
    *,
    store: TransactionStore,
    notify: Notify | None,
) -> FlowOutcome:
    try:
        record = store.create(draft.to_payload())
    except SubmissionError as e:
        _logger.warning("submit:failed error=%s", e)
        _emit(notify, FlowStatus.SUBMIT_FAILED, f"Saving the entry failed: {e}")
        return FlowOutcome(status=FlowStatus.SUBMIT_FAILED, draft=draft, error=str(e))

    detection = refresh(store)
    _emit(
        notify,
        FlowStatus.SUBMITTED,
        f"Added {draft.kind.value} {format_amount(draft.amount)} for {draft.category}.",
    )
    return FlowOutcome(
        status=FlowStatus.SUBMITTED, draft=draft, record=record, detection=detection
    )


def submit_transcript(
    transcript: str,
    *,
    store: TransactionStore,
    today: dt.date | None = None,
    notify: Notify | None = None,
) -> FlowOutcome:
    """Interpret one transcript and, when understood, create and refresh.

    An unparseable transcript produces a ``NOT_UNDERSTOOD`` notice and no store
    call. A store rejection produces a ``SUBMIT_FAILED`` notice.
    """

    outcome = parse_transcript(transcript, today=today)
    if outcome.draft is None:
        failure = cast(ParseFailure, outcome.failure)
        _emit(notify, FlowStatus.NOT_UNDERSTOOD, NOT_UNDERSTOOD_MESSAGES[failure])
        return FlowOutcome(status=FlowStatus.NOT_UNDERSTOOD, failure=failure)
    return _submit_draft(outcome.draft, store=store, notify=notify)


def submit_manual_entry(
    fields: Mapping[str, Any],
    *,
    store: TransactionStore,
    notify: Notify | None = None,
) -> FlowOutcome:
    """Validate form fields, create the entry and refresh."""

    try:
        draft = draft_from_fields(fields)
    except DraftValidationError as e:
        _emit(notify, FlowStatus.INVALID, f"Invalid entry: {e}")
        return FlowOutcome(status=FlowStatus.INVALID, error=str(e))
    return _submit_draft(draft, store=store, notify=notify)


def update_entry(
    store: TransactionStore, record_id: str, fields: Mapping[str, Any]
) -> DetectionResult:
    """Apply an update and return the refreshed detection.

    ``SubmissionError`` from the store propagates to the caller.
    """

    store.update(record_id, fields)
    return refresh(store)


def delete_entry(store: TransactionStore, record_id: str) -> DetectionResult:
    store.delete(record_id)
    return refresh(store)


__all__ = [
    "FlowOutcome",
    "FlowStatus",
    "NOT_UNDERSTOOD_MESSAGES",
    "Notice",
    "Notify",
    "delete_entry",
    "refresh",
    "submit_manual_entry",
    "submit_transcript",
    "update_entry",
]
