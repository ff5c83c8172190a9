"""Tests for the expense summary engine."""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from edufin.models import Expense, ExpenseCategory
from edufin.queries import in_window, month_label, summarize


def make_expense(amount, category, day, n=0) -> Expense:
    return Expense(
        id=f"e{n}",
        owner_id="u1",
        amount=Decimal(amount),
        category=category,
        date=day,
        created_at=datetime(2024, 1, 1) + timedelta(seconds=n),
    )


@pytest.fixture
def january_sample():
    return [
        make_expense("50", ExpenseCategory.PURCHASE, date(2024, 1, 5), 1),
        make_expense("30", ExpenseCategory.OTHER, date(2024, 1, 20), 2),
        make_expense("20", ExpenseCategory.PURCHASE, date(2024, 2, 1), 3),
    ]


@pytest.fixture
def mixed_sample():
    return [
        make_expense("19.99", ExpenseCategory.SUBSCRIPTION, date(2023, 12, 3), 1),
        make_expense("5.01", ExpenseCategory.MAINTENANCE, date(2024, 3, 14), 2),
        make_expense("100.00", ExpenseCategory.PURCHASE, date(2024, 1, 31), 3),
        make_expense("0.10", ExpenseCategory.ACCESSORY, date(2024, 1, 1), 4),
        make_expense("0.20", ExpenseCategory.ACCESSORY, date(2024, 2, 29), 5),
        make_expense("33.33", ExpenseCategory.OTHER, date(2023, 12, 31), 6),
    ]


class TestWindow:
    """Tests for the half-open window predicate."""

    def test_lower_bound_is_inclusive(self):
        assert in_window(date(2024, 1, 1), date(2024, 1, 1), date(2024, 2, 1))

    def test_upper_bound_is_exclusive(self):
        assert not in_window(date(2024, 2, 1), date(2024, 1, 1), date(2024, 2, 1))

    def test_missing_bounds_are_open(self):
        assert in_window(date(1999, 1, 1))
        assert in_window(date(1999, 1, 1), date_to=date(2000, 1, 1))
        assert in_window(date(2099, 1, 1), date_from=date(2000, 1, 1))

    def test_month_label(self):
        assert month_label(date(2024, 3, 9)) == "2024-03"


class TestSummarize:
    """Tests for summarize()."""

    def test_documented_example(self, january_sample):
        """January window over the three-expense sample."""
        summary = summarize(january_sample, date(2024, 1, 1), date(2024, 2, 1))

        assert summary.total == Decimal("80")
        assert [(c.category, c.total, c.share) for c in summary.by_category] == [
            (ExpenseCategory.PURCHASE, Decimal("50"), Decimal("0.625")),
            (ExpenseCategory.OTHER, Decimal("30"), Decimal("0.375")),
        ]
        assert [(m.month, m.total) for m in summary.by_month] == [("2024-01", Decimal("80"))]
        assert summary.top_category.category == ExpenseCategory.PURCHASE

    def test_documented_example_json(self, january_sample):
        """The wire shape uses camelCase keys and JSON numbers."""
        data = summarize(january_sample, date(2024, 1, 1), date(2024, 2, 1)).model_dump(mode="json")
        assert data == {
            "total": 80.0,
            "byCategory": [
                {"category": "purchase", "total": 50.0, "share": 0.625},
                {"category": "other", "total": 30.0, "share": 0.375},
            ],
            "byMonth": [{"month": "2024-01", "total": 80.0}],
            "topCategory": {"category": "purchase", "total": 50.0, "share": 0.625},
        }

    def test_empty_input(self):
        summary = summarize([])
        assert summary.total == Decimal("0")
        assert summary.by_category == []
        assert summary.by_month == []
        assert summary.top_category is None

    def test_window_matching_nothing(self, january_sample):
        """A window with no expenses is an empty summary, not an error."""
        summary = summarize(january_sample, date(2030, 1, 1), date(2030, 2, 1))
        assert summary.total == Decimal("0")
        assert summary.top_category is None

    def test_equal_bounds_match_nothing(self, january_sample):
        summary = summarize(january_sample, date(2024, 1, 5), date(2024, 1, 5))
        assert summary.by_category == []

    def test_no_bounds_includes_everything(self, january_sample):
        summary = summarize(january_sample)
        assert summary.total == Decimal("100")
        assert [m.month for m in summary.by_month] == ["2024-01", "2024-02"]
        assert summary.by_category[0].total == Decimal("70")

    def test_expense_on_upper_bound_excluded(self, january_sample):
        summary = summarize(january_sample, date_to=date(2024, 2, 1))
        assert summary.total == Decimal("80")

    def test_expense_on_lower_bound_included(self, january_sample):
        summary = summarize(january_sample, date_from=date(2024, 2, 1))
        assert summary.total == Decimal("20")

    def test_partition_invariants(self, mixed_sample):
        """Category totals and month totals both add up to the total exactly."""
        summary = summarize(mixed_sample)

        assert summary.total == Decimal("158.63")
        assert sum(c.total for c in summary.by_category) == summary.total
        assert sum(m.total for m in summary.by_month) == summary.total

    def test_shares_sum_to_one(self, mixed_sample):
        summary = summarize(mixed_sample)
        shares = sum(c.share for c in summary.by_category)
        assert abs(shares - Decimal("1")) < Decimal("1e-20")
        assert all(Decimal("0") <= c.share <= Decimal("1") for c in summary.by_category)

    def test_decimal_sums_are_exact(self):
        """0.10 + 0.20 is exactly 0.30, not 0.30000000000000004."""
        expenses = [
            make_expense("0.10", ExpenseCategory.OTHER, date(2024, 1, 1), 1),
            make_expense("0.20", ExpenseCategory.OTHER, date(2024, 1, 2), 2),
        ]
        assert summarize(expenses).total == Decimal("0.30")

    def test_zero_total_gives_zero_shares(self):
        expenses = [
            make_expense("0", ExpenseCategory.PURCHASE, date(2024, 1, 1), 1),
            make_expense("0", ExpenseCategory.OTHER, date(2024, 1, 2), 2),
        ]
        summary = summarize(expenses)
        assert summary.total == Decimal("0")
        assert [c.share for c in summary.by_category] == [Decimal("0"), Decimal("0")]
        assert summary.top_category.category == ExpenseCategory.PURCHASE

    def test_categories_sorted_by_total_descending(self, mixed_sample):
        totals = [c.total for c in summarize(mixed_sample).by_category]
        assert totals == sorted(totals, reverse=True)
        assert summarize(mixed_sample).top_category.category == ExpenseCategory.PURCHASE

    def test_ties_keep_first_seen_order(self):
        expenses = [
            make_expense("10", ExpenseCategory.MAINTENANCE, date(2024, 1, 3), 1),
            make_expense("10", ExpenseCategory.ACCESSORY, date(2024, 1, 1), 2),
            make_expense("10", ExpenseCategory.OTHER, date(2024, 1, 2), 3),
        ]
        categories = [c.category for c in summarize(expenses).by_category]
        assert categories == [
            ExpenseCategory.MAINTENANCE,
            ExpenseCategory.ACCESSORY,
            ExpenseCategory.OTHER,
        ]

    def test_months_sorted_ascending_across_years(self, mixed_sample):
        months = [m.month for m in summarize(mixed_sample).by_month]
        assert months == ["2023-12", "2024-01", "2024-02", "2024-03"]

    def test_input_order_does_not_change_totals(self, mixed_sample):
        forward = summarize(mixed_sample)
        backward = summarize(list(reversed(mixed_sample)))
        assert forward.total == backward.total
        assert forward.by_month == backward.by_month
        assert {c.category: c.total for c in forward.by_category} == {
            c.category: c.total for c in backward.by_category
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
