from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

import transaction_patterns.voice as voice_mod
from transaction_patterns import ParseFailure, TransactionKind, interpret, parse_transcript
from transaction_patterns.voice import (
    ParseState,
    take_category,
    take_description,
    take_first_amount,
    take_kind_word,
    tokenize,
)

TODAY = dt.date(2025, 3, 14)


def test_full_command_with_kind_amount_category_description():
    draft = interpret("expense 250 groceries weekly shop", today=TODAY)
    assert draft is not None
    assert draft.kind is TransactionKind.EXPENSE
    assert draft.amount == Decimal("250")
    assert draft.category == "groceries"
    assert draft.description == "weekly shop"
    assert draft.date == "2025-03-14"


def test_kind_defaults_to_expense():
    draft = interpret("50 rent", today=TODAY)
    assert draft is not None
    assert (draft.kind, draft.amount, draft.category, draft.description) == (
        TransactionKind.EXPENSE,
        Decimal("50"),
        "rent",
        "",
    )


def test_income_word_anywhere_sets_income():
    draft = interpret("Salary 3000 income March bonus", today=TODAY)
    assert draft is not None
    assert draft.kind is TransactionKind.INCOME
    assert draft.amount == Decimal("3000")
    assert draft.category == "salary"
    assert draft.description == "march bonus"


def test_income_beats_expense_and_expense_word_stays_as_text():
    draft = interpret("expense income 40 refund", today=TODAY)
    assert draft is not None
    assert draft.kind is TransactionKind.INCOME
    assert draft.category == "expense"
    assert draft.description == "refund"


def test_no_amount_is_no_result():
    assert interpret("expense groceries", today=TODAY) is None
    assert parse_transcript("expense groceries", today=TODAY).failure is ParseFailure.NO_AMOUNT


def test_no_category_is_no_result():
    assert interpret("expense 50", today=TODAY) is None
    assert parse_transcript("expense 50", today=TODAY).failure is ParseFailure.NO_CATEGORY


def test_empty_and_blank_transcripts_have_no_amount():
    assert parse_transcript("", today=TODAY).failure is ParseFailure.NO_AMOUNT
    assert parse_transcript("   \t ", today=TODAY).failure is ParseFailure.NO_AMOUNT


def test_first_numeric_token_wins_later_ones_are_text():
    draft = interpret("expense 12 7eleven 3 items", today=TODAY)
    assert draft is not None
    assert draft.amount == Decimal("12")
    assert draft.category == "7eleven"
    assert draft.description == "3 items"

    draft = interpret("taxi 15 2", today=TODAY)
    assert draft is not None
    assert draft.amount == Decimal("15")
    assert draft.category == "taxi"
    assert draft.description == "2"


def test_numeric_category_after_amount_is_kept_as_text():
    draft = interpret("100 2024", today=TODAY)
    assert draft is not None
    assert draft.amount == Decimal("100")
    assert draft.category == "2024"


def test_decimal_amounts_are_exact():
    draft = interpret("expense 12.75 lunch", today=TODAY)
    assert draft is not None
    assert draft.amount == Decimal("12.75")
    assert interpret(".5 gum", today=TODAY).amount == Decimal("0.5")


@pytest.mark.parametrize("token", ["-5", "1e3", "nan", "inf", "1,000", "$20", "12.5.1"])
def test_non_plain_numbers_are_not_amounts(token):
    assert parse_transcript(f"{token} food", today=TODAY).failure is ParseFailure.NO_AMOUNT


def test_whitespace_runs_collapse_and_case_is_lowered():
    draft = interpret("  EXPENSE\t 30   Coffee   With  Sam ", today=TODAY)
    assert draft is not None
    assert draft.category == "coffee"
    assert draft.description == "with sam"


def test_date_comes_from_clock_not_speech(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(voice_mod, "_today_utc", lambda: dt.date(2030, 1, 2))
    draft = interpret("expense 10 tickets 2025-01-01")
    assert draft is not None
    assert draft.date == "2030-01-02"
    assert draft.description == "2025-01-01"


def test_payload_matches_store_create_shape():
    draft = interpret("income 1200.50 freelance logo work", today=TODAY)
    assert draft is not None
    assert draft.to_payload() == {
        "type": "income",
        "amount": 1200.5,
        "category": "freelance",
        "date": "2025-03-14",
        "description": "logo work",
    }


def test_non_string_transcript_fails_fast():
    with pytest.raises(TypeError):
        interpret(None)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        parse_transcript(b"expense 5 x")  # type: ignore[arg-type]


# ---- Individual rules --------------------------------------------------------


def test_take_kind_word_removes_only_first_occurrence():
    state = ParseState(tokens=tokenize("income 5 income"))
    assert take_kind_word(state) is None
    assert state.kind is TransactionKind.INCOME
    assert state.tokens == ["5", "income"]


def test_take_first_amount_reports_missing_amount():
    state = ParseState(tokens=["coffee", "beans"])
    assert take_first_amount(state) is ParseFailure.NO_AMOUNT
    assert state.tokens == ["coffee", "beans"]


def test_take_category_and_description_consume_remaining_tokens():
    state = ParseState(tokens=["books", "for", "school"])
    assert take_category(state) is None
    assert take_description(state) is None
    assert state.category == "books"
    assert state.description == "for school"
    assert state.tokens == []
