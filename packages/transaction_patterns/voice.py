"""Voice transcript → draft transaction.

The interpreter is a small ordered pipeline of token-consuming rules applied
to a lower-cased, whitespace-split transcript:

1. ``take_kind_word``: drop the first ``income`` (else ``expense``) token and
   record the kind; default is expense.
2. ``take_first_amount``: the first token that reads as an unsigned integer
   or decimal becomes the amount.
3. ``take_category``: the next remaining token is the category.
4. ``take_description``: whatever is left, joined by single spaces.

When several tokens look numeric the first one wins and the rest stay in the
stream as ordinary text. ``income`` beats ``expense`` when both are spoken;
the losing word is left in place.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import NamedTuple, TypeAlias, cast

from .amounts import is_numeric_token, to_decimal
from .logging_setup import get_logger
from .models import DraftTransaction, TransactionKind

_logger = get_logger("transaction_patterns.voice")


class ParseFailure(StrEnum):
    NO_AMOUNT = "no_amount"
    NO_CATEGORY = "no_category"


class ParseOutcome(NamedTuple):
    """Result of :func:`parse_transcript`: exactly one field is non-``None``."""

    draft: DraftTransaction | None
    failure: ParseFailure | None

    @property
    def ok(self) -> bool:
        return self.draft is not None


@dataclass(slots=True)
class ParseState:
    """Mutable working state threaded through the rules for one transcript."""

    tokens: list[str]
    kind: TransactionKind = TransactionKind.EXPENSE
    amount: Decimal | None = None
    category: str | None = None
    description: str = ""


# A rule returns ``None`` to continue or a failure reason to stop the pipeline.
Rule: TypeAlias = Callable[[ParseState], ParseFailure | None]


def tokenize(transcript: str) -> list[str]:
    return transcript.lower().split()


def _remove_first(tokens: list[str], word: str) -> bool:
    try:
        tokens.remove(word)
    except ValueError:
        return False
    return True


def take_kind_word(state: ParseState) -> ParseFailure | None:
    if _remove_first(state.tokens, TransactionKind.INCOME.value):
        state.kind = TransactionKind.INCOME
    elif _remove_first(state.tokens, TransactionKind.EXPENSE.value):
        state.kind = TransactionKind.EXPENSE
    else:
        state.kind = TransactionKind.EXPENSE
    return None


def take_first_amount(state: ParseState) -> ParseFailure | None:
    for i, token in enumerate(state.tokens):
        if is_numeric_token(token):
            state.amount = to_decimal(token)
            state.tokens.pop(i)
            return None
    return ParseFailure.NO_AMOUNT


def take_category(state: ParseState) -> ParseFailure | None:
    if not state.tokens:
        return ParseFailure.NO_CATEGORY
    state.category = state.tokens.pop(0)
    return None


def take_description(state: ParseState) -> ParseFailure | None:
    state.description = " ".join(state.tokens)
    state.tokens = []
    return None


DEFAULT_RULES: tuple[Rule, ...] = (
    take_kind_word,
    take_first_amount,
    take_category,
    take_description,
)


def _today_utc() -> dt.date:
    return dt.datetime.now(dt.UTC).date()


def run_rules(
    transcript: str, rules: Sequence[Rule] = DEFAULT_RULES
) -> tuple[ParseState, ParseFailure | None]:
    """Apply ``rules`` in order, stopping at the first failure."""

    if not isinstance(transcript, str):
        raise TypeError(f"transcript must be a str, got {type(transcript).__name__}")
    state = ParseState(tokens=tokenize(transcript))
    for rule in rules:
        failure = rule(state)
        if failure is not None:
            return state, failure
    return state, None


def parse_transcript(transcript: str, *, today: dt.date | None = None) -> ParseOutcome:
    """Interpret ``transcript`` and report why it failed when it does.

    ``today`` fixes the draft's date (defaults to the current UTC date read at
    parse time). The date is never taken from the spoken words.
    """

    state, failure = run_rules(transcript)
    if failure is not None:
        _logger.info("voice:not_understood reason=%s tokens=%d", failure, len(state.tokens))
        return ParseOutcome(draft=None, failure=failure)

    # take_first_amount and take_category succeeded, so both slots are filled.
    when = today if today is not None else _today_utc()
    draft = DraftTransaction(
        kind=state.kind,
        amount=cast(Decimal, state.amount),
        category=cast(str, state.category),
        description=state.description,
        date=when.isoformat(),
    )
    _logger.debug(
        "voice:parsed kind=%s amount=%s category=%r", draft.kind, draft.amount, draft.category
    )
    return ParseOutcome(draft=draft, failure=None)


def interpret(transcript: str, *, today: dt.date | None = None) -> DraftTransaction | None:
    """Return a draft transaction for ``transcript`` or ``None`` if unparseable."""

    return parse_transcript(transcript, today=today).draft


__all__ = [
    "DEFAULT_RULES",
    "ParseFailure",
    "ParseOutcome",
    "ParseState",
    "Rule",
    "interpret",
    "parse_transcript",
    "run_rules",
    "take_category",
    "take_description",
    "take_first_amount",
    "take_kind_word",
    "tokenize",
]
