from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from tests.helpers.records import expense, income, scenario_records
from transaction_patterns import (
    CategoryAggregate,
    Transaction,
    TransactionKind,
    category_totals,
    detect,
    recurring_groups,
)


def test_scenario_groups_and_totals():
    groups, aggregates = detect(scenario_records())

    assert len(groups) == 1
    g = groups[0]
    assert g.amount == Decimal("50")
    assert g.category == "food"
    assert g.occurrence_count == 3
    assert g.dates == ("2025-01-01", "2025-02-01", "2025-03-01")
    assert g.group_key == (Decimal("50"), "food")

    assert dict(aggregates) == {"food": Decimal("170")}
    assert "salary" not in aggregates


def test_empty_input_yields_empty_result():
    result = detect([])
    assert result.groups == ()
    assert len(result.aggregates) == 0
    assert result.aggregates.series().labels == ()


def test_income_never_grouped_or_totalled():
    records = [income(100, "salary"), income(100, "salary"), income(100, "salary")]
    groups, aggregates = detect(records)
    assert groups == ()
    assert dict(aggregates) == {}


def test_single_occurrence_is_not_recurring():
    groups, aggregates = detect([expense(12, "coffee"), expense(13, "coffee")])
    assert groups == ()
    assert aggregates["coffee"] == Decimal("25")


def test_category_match_is_case_sensitive_and_untrimmed():
    records = [
        expense(10, "Food"),
        expense(10, "food"),
        expense(10, "food "),
        expense(10, "food"),
    ]
    groups = recurring_groups(records)
    assert [(g.category, g.occurrence_count) for g in groups] == [("food", 2)]


def test_amounts_compare_by_exact_decimal_value():
    # 50, 50.0 and "50.00" are the same number; 0.1 + 0.2 style float drift
    # is avoided because floats are read through their repr.
    records = [
        expense(50, "rent"),
        expense(50.0, "rent"),
        expense("50.00", "rent"),
        expense(0.3, "fees"),
        expense(0.3, "fees"),
        expense(0.30000000000000004, "fees"),
    ]
    groups = recurring_groups(records)
    assert [(g.category, g.amount, g.occurrence_count) for g in groups] == [
        ("rent", Decimal("50"), 3),
        ("fees", Decimal("0.3"), 2),
    ]


def test_groups_emitted_in_first_seen_order_not_by_count():
    records = [
        expense(5, "bus"),
        expense(9, "gym"),
        expense(9, "gym"),
        expense(9, "gym"),
        expense(5, "bus"),
    ]
    groups = recurring_groups(records)
    assert [g.category for g in groups] == ["bus", "gym"]
    assert [g.occurrence_count for g in groups] == [2, 3]


def test_representative_is_first_occurrence():
    first = expense(15, "music", description="first", _id="a")
    second = expense(15, "music", description="second", _id="b")
    (group,) = recurring_groups([first, second])
    assert group.representative.id == "a"
    assert group.representative.description == "first"


def test_malformed_records_are_skipped_not_raised(caplog: pytest.LogCaptureFixture):
    records = [
        expense(None, "food"),
        expense("abc", "food"),
        expense(True, "food"),
        expense(float("nan"), "food"),
        expense(-5, "food"),
        expense(10, None),
        expense(10, ""),
        expense(10, 42),
        {"type": "expense", "category": "food"},
        {"type": "expense", "amount": 10},
        expense(10, "food"),
        expense(10, "food"),
    ]
    with caplog.at_level(logging.DEBUG, logger="transaction_patterns"):
        groups, aggregates = detect(records)

    assert [(g.category, g.occurrence_count) for g in groups] == [("food", 2)]
    assert dict(aggregates) == {"food": Decimal("20")}
    assert sum("skip:malformed" in r.getMessage() for r in caplog.records) == 10


def test_unknown_type_is_ignored():
    records = [
        {"type": "transfer", "amount": 10, "category": "x"},
        {"type": "transfer", "amount": 10, "category": "x"},
    ]
    assert detect(records).groups == ()


def test_aggregate_sums_exactly_and_keeps_first_seen_order():
    records = [
        expense("0.10", "snacks"),
        expense(12, "books"),
        expense("0.20", "snacks"),
        income(999, "snacks"),
        expense(3, "books"),
    ]
    totals = category_totals(records)
    assert totals.labels() == ("snacks", "books")
    assert totals.values() == (Decimal("0.30"), Decimal("15"))
    series = totals.series()
    assert series.label == "Expenses by Category"
    assert list(zip(series.labels, series.values, strict=True)) == [
        ("snacks", Decimal("0.30")),
        ("books", Decimal("15")),
    ]


def test_detection_is_repeatable_and_does_not_mutate_input():
    records = scenario_records()
    snapshot = [dict(r) for r in records]
    first = detect(records)
    second = detect(records)
    assert first == second
    assert records == snapshot


def test_accepts_transaction_objects():
    txs = [
        Transaction(kind=TransactionKind.EXPENSE, amount=Decimal("8"), category="tea"),
        Transaction(kind=TransactionKind.EXPENSE, amount=Decimal("8.00"), category="tea"),
        Transaction(kind=TransactionKind.INCOME, amount=Decimal("8"), category="tea"),
    ]
    groups, aggregates = detect(txs)
    assert groups[0].occurrence_count == 2
    assert aggregates == CategoryAggregate.from_pairs([("tea", Decimal("16"))])


def test_transactions_with_int_or_float_amounts_are_counted():
    kind = TransactionKind.EXPENSE
    txs = [
        Transaction(kind=kind, amount=50, category="food"),  # type: ignore[arg-type]
        Transaction(kind=kind, amount=50.0, category="food"),  # type: ignore[arg-type]
        Transaction(kind=kind, amount=-1, category="food"),  # type: ignore[arg-type]
    ]
    groups, aggregates = detect(txs)
    assert [(g.category, g.occurrence_count) for g in groups] == [("food", 2)]
    assert isinstance(groups[0].amount, Decimal)
    assert dict(aggregates) == {"food": Decimal("100")}


def test_non_string_dates_do_not_make_a_record_malformed():
    rec = {"type": "expense", "amount": 50, "category": "food", "date": 1735689600000}
    groups, aggregates = detect([rec, dict(rec)])
    assert [(g.category, g.occurrence_count) for g in groups] == [("food", 2)]
    assert groups[0].dates == ("1735689600000", "1735689600000")
    assert aggregates["food"] == Decimal("100")


def test_whitespace_only_category_is_a_category_of_its_own():
    records = [expense(4, " "), expense(4, " "), expense(4, "")]
    groups, aggregates = detect(records)
    assert [(g.category, g.occurrence_count) for g in groups] == [(" ", 2)]
    assert dict(aggregates) == {" ": Decimal("8")}


def test_accepts_generators():
    groups, _ = detect(r for r in scenario_records())
    assert groups[0].occurrence_count == 3


@pytest.mark.parametrize("bad", ["expense 50 food", b"bytes", {"type": "expense"}, 42, None])
def test_wrong_collection_shape_fails_fast(bad):
    with pytest.raises(TypeError):
        detect(bad)


def test_non_record_element_fails_fast():
    with pytest.raises(TypeError, match="position 1"):
        detect([expense(1, "a"), ["expense", 1, "a"]])
