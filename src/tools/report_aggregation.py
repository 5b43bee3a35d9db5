# src/tools/report_aggregation.py
"""
Report aggregation over a user's stored receipts.

Everything here is a pure function of (records, filter): nothing is cached and
the input sequence is never mutated, so every filter change just recomputes.
"""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from tools.receipt_schema import (
    ALL_CATEGORIES,
    CATEGORY_LABELS,
    AggregateResult,
    ChartSeries,
    ReportFilter,
    Transaction,
    category_label,
)

Sign = Optional[Literal["income", "expense"]]


def month_key(d: dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def filter_records(records: Iterable[Transaction], flt: ReportFilter) -> List[Transaction]:
    """Month beats a custom range; the category filter applies on top of either."""
    out = list(records)
    if flt.month:
        out = [r for r in out if r.date is not None and month_key(r.date) == flt.month]
    elif flt.start_date and flt.end_date:
        out = [r for r in out if r.date is not None and flt.start_date <= r.date <= flt.end_date]

    if flt.category and flt.category != ALL_CATEGORIES:
        out = [r for r in out if r.category_key == flt.category]
    return out


def monthly_totals(records: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Signed sum per YYYY-MM, ascending. Undated records are skipped."""
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for r in records:
        if r.date is None:
            continue
        totals[month_key(r.date)] += r.amount
    return {k: totals[k] for k in sorted(totals)}


def category_totals(records: Iterable[Transaction], sign: Sign = None) -> Dict[str, Decimal]:
    """
    Signed sum per category ("other" when unset), in first-seen order.
    sign="income" keeps amount > 0 only, sign="expense" keeps amount < 0 only;
    expense sums stay negative.
    """
    totals: Dict[str, Decimal] = {}
    for r in records:
        if sign == "income" and r.amount <= 0:
            continue
        if sign == "expense" and r.amount >= 0:
            continue
        key = r.category_key
        totals[key] = totals.get(key, Decimal(0)) + r.amount
    return totals


def aggregate(records: Sequence[Transaction], flt: Optional[ReportFilter] = None) -> AggregateResult:
    filtered = filter_records(records, flt or ReportFilter())
    return AggregateResult(
        monthly_totals=monthly_totals(filtered),
        category_totals=category_totals(filtered),
        income_totals=category_totals(filtered, "income"),
        expense_totals=category_totals(filtered, "expense"),
        record_count=len(filtered),
    )


def comparison_series(totals: Dict[str, Decimal]) -> Tuple[List[str], List[ChartSeries]]:
    """
    One series per category for the comparative bar view. Series i carries its
    total at index i and zero elsewhere, so each category gets its own legend
    entry instead of one stacked series.
    """
    keys = list(totals)
    labels = [category_label(k) for k in keys]
    series = [
        ChartSeries(
            label=labels[i],
            values=[totals[k] if i == j else Decimal(0) for j, k in enumerate(keys)],
        )
        for i in range(len(keys))
    ]
    return labels, series


def labelled(totals: Dict[str, Decimal]) -> Dict[str, Decimal]:
    out: Dict[str, Decimal] = {}
    for k, v in totals.items():
        label = category_label(k)
        out[label] = out.get(label, Decimal(0)) + v
    return out


def month_options(records: Iterable[Transaction]) -> List[str]:
    """Distinct YYYY-MM keys of dated records, newest first."""
    return sorted({month_key(r.date) for r in records if r.date is not None}, reverse=True)


def category_options(records: Iterable[Transaction]) -> List[str]:
    """Known category keys, then any other stored keys in first-seen order."""
    keys = list(CATEGORY_LABELS)
    for r in records:
        if r.category_key not in keys:
            keys.append(r.category_key)
    return keys


def total_amount(records: Iterable[Transaction]) -> Decimal:
    return sum((r.amount for r in records), Decimal(0))
