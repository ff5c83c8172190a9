"""Expense summary package."""

from edufin.queries.summary import in_window, month_label, summarize

__all__ = ["in_window", "month_label", "summarize"]
