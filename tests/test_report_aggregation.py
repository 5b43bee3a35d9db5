from datetime import date
from decimal import Decimal

from tools.receipt_schema import CATEGORY_LABELS, ReportFilter, Transaction
from tools.report_aggregation import (
    aggregate,
    category_options,
    category_totals,
    comparison_series,
    filter_records,
    month_options,
    monthly_totals,
    total_amount,
)


def txn(amount, category=None, on=None, type=None):
    return Transaction(
        user_id="u1",
        amount=Decimal(str(amount)),
        category=category,
        date=on,
        type=type or ("income" if amount > 0 else "expense"),
    )


RECORDS = (
    txn(100, "income", date(2024, 1, 5)),
    txn(-40, "office", date(2024, 1, 20)),
    txn(-10, "office", date(2024, 2, 3)),
)


def test_category_totals_signed_income_and_expense():
    result = aggregate(RECORDS)

    assert result.category_totals == {"income": 100, "office": -50}
    assert result.income_totals == {"income": 100}
    assert result.expense_totals == {"office": -50}
    assert result.record_count == 3


def test_aggregate_is_idempotent():
    flt = ReportFilter(category="office")
    assert aggregate(RECORDS, flt) == aggregate(RECORDS, flt)


def test_aggregate_does_not_mutate_input():
    records = list(RECORDS)
    before = [r.model_copy() for r in records]
    aggregate(records, ReportFilter(month="2024-01", category="office"))
    assert records == before


def test_monthly_totals_sorted_and_unique():
    records = (
        txn(-5, "meals", date(2024, 11, 1)),
        txn(-7, "meals", date(2023, 12, 31)),
        txn(20, "income", date(2024, 2, 1)),
        txn(-3, "meals", date(2024, 11, 30)),
    )
    totals = monthly_totals(records)

    assert list(totals) == ["2023-12", "2024-02", "2024-11"]
    assert totals["2024-11"] == Decimal("-8")


def test_undated_records_skip_monthly_but_count_in_categories():
    records = RECORDS + (txn(-25, "travel"),)
    result = aggregate(records)

    assert "travel" in result.category_totals
    assert sum(result.monthly_totals.values()) == Decimal("50")


def test_month_filter_overrides_custom_range():
    flt = ReportFilter(month="2024-02", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
    kept = filter_records(RECORDS, flt)

    assert [r.date for r in kept] == [date(2024, 2, 3)]


def test_custom_range_is_inclusive():
    flt = ReportFilter(start_date=date(2024, 1, 5), end_date=date(2024, 1, 20))
    assert len(filter_records(RECORDS, flt)) == 2


def test_half_open_range_keeps_everything():
    flt = ReportFilter(start_date=date(2024, 1, 6))
    assert len(filter_records(RECORDS, flt)) == 3


def test_time_filters_drop_undated_records():
    records = RECORDS + (txn(-25, "travel"),)
    assert len(filter_records(records, ReportFilter(month="2024-01"))) == 2
    assert len(filter_records(records, ReportFilter(start_date=date(2000, 1, 1), end_date=date(2100, 1, 1)))) == 3


def test_missing_category_matches_other():
    records = RECORDS + (txn(-3, None, date(2024, 1, 1)), txn(-4, "", date(2024, 1, 2)))
    kept = filter_records(records, ReportFilter(category="other"))

    assert len(kept) == 2
    assert category_totals(kept) == {"other": Decimal("-7")}


def test_category_filter_applies_with_month():
    result = aggregate(RECORDS, ReportFilter(month="2024-01", category="office"))
    assert result.category_totals == {"office": -40}
    assert result.monthly_totals == {"2024-01": -40}


def test_category_totals_keep_first_seen_order():
    records = (txn(-1, "travel"), txn(-1, "meals"), txn(-1, "travel"))
    assert list(category_totals(records)) == ["travel", "meals"]


def test_zero_amount_in_neither_breakdown():
    result = aggregate((txn(0, "other", type="expense"),))
    assert result.income_totals == {}
    assert result.expense_totals == {}
    assert result.category_totals == {"other": 0}


def test_comparison_series_one_hot():
    labels, series = comparison_series({"office": Decimal("-50"), "income": Decimal("100"), "custom": Decimal("3")})

    assert labels == ["Office Supplies", "Income", "custom"]
    assert [s.label for s in series] == labels
    assert series[0].values == [Decimal("-50"), 0, 0]
    assert series[1].values == [0, Decimal("100"), 0]
    assert series[2].values == [0, 0, Decimal("3")]


def test_month_options_newest_first():
    records = RECORDS + (txn(-1, "meals", date(2023, 7, 4)), txn(-1, "meals"))
    assert month_options(records) == ["2024-02", "2024-01", "2023-07"]


def test_category_options_include_free_text_categories():
    records = RECORDS + (txn(-5, "crypto", date(2024, 1, 9)), txn(-2, "Crypto"), txn(-1, "crypto"), txn(-3))
    options = category_options(records)

    assert options[:len(CATEGORY_LABELS)] == list(CATEGORY_LABELS)
    assert options[len(CATEGORY_LABELS):] == ["crypto", "Crypto"]

    result = aggregate(records, ReportFilter(category="crypto"))
    assert result.category_totals == {"crypto": Decimal("-6")}


def test_total_amount():
    assert total_amount(RECORDS) == Decimal("50")
    assert total_amount(()) == 0
