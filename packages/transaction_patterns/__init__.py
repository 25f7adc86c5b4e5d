"""Public interface for the ``transaction_patterns`` package.

Re-exports the detector, the voice interpreter, the manual draft builder and
the public models as the stable import surface. No runtime logic lives here.
"""

from .drafts import DraftValidationError, build_draft, draft_from_fields
from .models import (
    CategoryAggregate,
    ChartSeries,
    DetectionResult,
    DraftTransaction,
    RecurrenceGroup,
    StoredTransaction,
    Transaction,
    TransactionKind,
)
from .recurrence import category_totals, coerce_transactions, detect, recurring_groups
from .store import InMemoryStore, SnapshotError, SubmissionError, TransactionStore, load_snapshot
from .voice import ParseFailure, ParseOutcome, interpret, parse_transcript

__all__ = [
    # Recurrence detection
    "detect",
    "recurring_groups",
    "category_totals",
    "coerce_transactions",
    # Voice interpretation
    "interpret",
    "parse_transcript",
    "ParseFailure",
    "ParseOutcome",
    # Manual drafts
    "build_draft",
    "draft_from_fields",
    "DraftValidationError",
    # Store collaborator
    "TransactionStore",
    "InMemoryStore",
    "load_snapshot",
    "SnapshotError",
    "SubmissionError",
    # Models / types
    "Transaction",
    "TransactionKind",
    "StoredTransaction",
    "DraftTransaction",
    "RecurrenceGroup",
    "CategoryAggregate",
    "ChartSeries",
    "DetectionResult",
]
