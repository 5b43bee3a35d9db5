from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from tools.receipt_schema import (
    AggregateResult,
    ReportFilter,
    Transaction,
    TransactionType,
    category_label,
    parse_amount,
    parse_receipt_date,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("01/15/2024", date(2024, 1, 15)),
        ("03-02-24", date(2024, 3, 2)),
        ("2024-01-15", date(2024, 1, 15)),
        ("2024-01-15T10:30:00+00:00", date(2024, 1, 15)),
        (datetime(2024, 5, 6, 7, 8), date(2024, 5, 6)),
        (date(2024, 5, 6), date(2024, 5, 6)),
    ],
)
def test_parse_receipt_date(raw, expected):
    assert parse_receipt_date(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "not a date", "2024-13-45"])
def test_parse_receipt_date_unreadable(raw):
    assert parse_receipt_date(raw) is None


def test_parse_amount():
    assert parse_amount("$1,234.50") == Decimal("1234.50")
    assert parse_amount(" 4.95 ") == Decimal("4.95")
    assert parse_amount(12) == Decimal("12")
    assert parse_amount(0.1) == Decimal("0.1")
    assert parse_amount("abc") is None
    assert parse_amount("") is None
    assert parse_amount(None) is None


def test_category_label_passthrough():
    assert category_label("meals") == "Meals & Entertainment"
    assert category_label("crypto") == "crypto"


def test_signed_follows_type():
    expense = Transaction(user_id="u", amount=Decimal("12.00"), type="expense")
    income = Transaction(user_id="u", amount=Decimal("-12.00"), type="income")

    assert expense.signed().amount == Decimal("-12.00")
    assert income.signed().amount == Decimal("12.00")
    # input untouched
    assert expense.amount == Decimal("12.00")


def test_signed_zero_stays_zero():
    t = Transaction(user_id="u", amount=Decimal("0"), type="expense").signed()
    assert t.amount == 0
    assert not t.amount.is_signed()


def test_from_form_builds_signed_record():
    t = Transaction.from_form(
        user_id="u1",
        type="expense",
        date="01/15/2024",
        amount="$4.95",
        vendor="  STARBUCKS ",
        category="meals",
        notes="",
    )

    assert t.amount == Decimal("-4.95")
    assert t.type is TransactionType.EXPENSE
    assert t.date == date(2024, 1, 15)
    assert t.vendor == "STARBUCKS"
    assert t.notes is None


def test_from_form_rejects_bad_amount():
    with pytest.raises(ValueError):
        Transaction.from_form(user_id="u1", type="income", date=None, amount="ten")


def test_from_form_rejects_unknown_type():
    with pytest.raises(ValueError):
        Transaction.from_form(user_id="u1", type="refund", date=None, amount="1.00")


def test_report_filter_month_format():
    assert ReportFilter(month="2024-02").month == "2024-02"
    with pytest.raises(ValidationError):
        ReportFilter(month="2024-2")
    with pytest.raises(ValidationError):
        ReportFilter(month="2024-13")


def test_money_serializes_as_number():
    result = AggregateResult(category_totals={"office": Decimal("-50.25")})
    assert result.model_dump(mode="json")["category_totals"] == {"office": -50.25}
