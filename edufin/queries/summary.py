"""
Expense Summary Engine

DESIGN DECISION: Summaries are computed DETERMINISTICALLY in Python from
the user's expense records, never stored and never estimated.

Arithmetic contract:
- Dates are filtered on a half-open window [date_from, date_to)
- Every sum is a Decimal sum; no float ever enters the arithmetic
- share = category total / total, and 0 when total is 0
- Categories sort by total descending, ties keep first-seen order
- Months sort ascending by their YYYY-MM label
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from edufin.models.expense import (
    CategoryTotal,
    Expense,
    ExpenseCategory,
    ExpenseSummary,
    MonthTotal,
)


ZERO = Decimal("0")


def in_window(
    day: date,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> bool:
    """True if day falls inside [date_from, date_to). Missing bounds are open."""
    if date_from is not None and day < date_from:
        return False
    if date_to is not None and day >= date_to:
        return False
    return True


def month_label(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def summarize(
    expenses: Iterable[Expense],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> ExpenseSummary:
    """
    Compute total, per-category and per-month spend for a date window.

    Args:
        expenses: The owner's expenses, in any order
        date_from: Inclusive lower bound, or None
        date_to: Exclusive upper bound, or None

    Returns:
        ExpenseSummary. An empty window gives a zero summary, not an error.
    """
    total = ZERO
    by_category: dict[ExpenseCategory, Decimal] = {}
    by_month: dict[str, Decimal] = {}

    for expense in expenses:
        if not in_window(expense.date, date_from, date_to):
            continue

        total += expense.amount
        by_category[expense.category] = by_category.get(expense.category, ZERO) + expense.amount
        label = month_label(expense.date)
        by_month[label] = by_month.get(label, ZERO) + expense.amount

    # sorted() is stable, so equal totals stay in first-seen order
    category_totals = [
        CategoryTotal(
            category=category,
            total=amount,
            share=(amount / total) if total else ZERO,
        )
        for category, amount in sorted(by_category.items(), key=lambda item: -item[1])
    ]

    month_totals = [
        MonthTotal(month=label, total=amount)
        for label, amount in sorted(by_month.items())
    ]

    return ExpenseSummary(
        total=total,
        by_category=category_totals,
        by_month=month_totals,
        top_category=category_totals[0] if category_totals else None,
    )
