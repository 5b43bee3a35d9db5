# src/tools/receipt_schema.py
from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from dateutil import parser as dtparser
from pydantic import BaseModel, Field, PlainSerializer

# Decimal in Python, plain number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

ALL_CATEGORIES = "all"
DEFAULT_CATEGORY = "other"

CATEGORY_LABELS: Dict[str, str] = {
    "business": "Business",
    "travel": "Travel",
    "meals": "Meals & Entertainment",
    "office": "Office Supplies",
    "insurance": "Insurance",
    "subscriptions": "Subscriptions & Software",
    "maintenance": "Maintenance & Repairs",
    "income": "Income",
    "loan": "Loan",
    "interest": "Interest",
    "other": "Other",
}


def category_label(key: str) -> str:
    """Friendly label for a category key; unknown keys pass through."""
    return CATEGORY_LABELS.get(key, key)


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


_ISO_DATE = re.compile(r"^\s*(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})")


def parse_receipt_date(value: Any) -> Optional[dt.date]:
    """
    Normalize a receipt date to a calendar date, or None when it can't be read.
    Handles ISO strings, timestamps and the US-style numeric forms printed on
    receipts (01/15/2024, 03-02-24, 1.2.2024).
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    s = str(value).strip()
    if not s:
        return None
    m = _ISO_DATE.match(s)
    if m:
        y, mo, d = (int(g) for g in m.groups())
        try:
            return dt.date(y, mo, d)
        except ValueError:
            return None
    try:
        return dtparser.parse(s, dayfirst=False).date()
    except (ValueError, OverflowError):
        return None


def parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    s = str(value).replace("$", "").replace(",", "").strip()
    if not s:
        return None
    try:
        amount = Decimal(s)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


class Transaction(BaseModel):
    id: Optional[str] = None
    user_id: str
    date: Optional[dt.date] = None
    amount: Money
    vendor: str = ""
    category: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None
    type: TransactionType
    created_at: Optional[str] = None

    @property
    def category_key(self) -> str:
        return self.category or DEFAULT_CATEGORY

    def signed(self) -> "Transaction":
        """Copy whose amount sign agrees with type (expense <= 0, income >= 0)."""
        magnitude = abs(self.amount)
        amount = -magnitude if self.type is TransactionType.EXPENSE and magnitude else magnitude
        return self.model_copy(update={"amount": amount})

    @classmethod
    def from_form(
        cls,
        *,
        user_id: str,
        type: TransactionType | str,
        date: Any,
        amount: Any,
        vendor: str = "",
        category: Optional[str] = None,
        notes: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> "Transaction":
        parsed = parse_amount(amount)
        if parsed is None:
            raise ValueError(f"Amount {amount!r} is not a number")
        txn = cls(
            user_id=user_id,
            type=TransactionType(type),
            date=parse_receipt_date(date),
            amount=parsed,
            vendor=(vendor or "").strip(),
            category=category or None,
            notes=(notes or "").strip() or None,
            image_url=image_url or None,
        )
        return txn.signed()


class DraftExtraction(BaseModel):
    date: str = ""
    amount: str = ""
    vendor: str = ""
    full_text: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.date or self.amount or self.vendor)


class ReportFilter(BaseModel):
    month: Optional[str] = Field(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")  # "YYYY-MM"
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    category: str = ALL_CATEGORIES


class AggregateResult(BaseModel):
    monthly_totals: Dict[str, Money] = Field(default_factory=dict)
    category_totals: Dict[str, Money] = Field(default_factory=dict)
    income_totals: Dict[str, Money] = Field(default_factory=dict)
    expense_totals: Dict[str, Money] = Field(default_factory=dict)
    record_count: int = 0


class ChartSeries(BaseModel):
    label: str
    values: List[Money]


class CompanySettings(BaseModel):
    user_id: str
    name: str = ""
    info: str = ""


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    created_at: Optional[str] = None
