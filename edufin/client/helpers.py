"""
Client Helpers

Pure functions behind the Streamlit pages: calculators, quiz grading,
goal progress and the date ranges of the expenses page. No I/O here,
so they are tested directly.
"""

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, NamedTuple, Optional, Sequence

from edufin.models import Goal, QuizItem


RANGE_MONTHS = {"1m": 1, "3m": 3, "12m": 12}
RANGE_LABELS = {
    "1m": "This month",
    "3m": "Last 3 months",
    "12m": "Last 12 months",
    "all": "All time",
}

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _month_start(month_index: int) -> date:
    year, month = divmod(month_index, 12)
    return date(year, month + 1, 1)


def range_bounds(range_key: str, today: Optional[date] = None) -> tuple[Optional[date], Optional[date]]:
    """
    (from, to) for one of the expenses page ranges.

    ``to`` is the first day of next month, so the current month is
    included in full. ``from`` is the first day of the month that makes
    the window the requested number of calendar months. "all" has no
    bounds.
    """
    if range_key == "all":
        return None, None
    if range_key not in RANGE_MONTHS:
        raise ValueError(f"Unknown range: {range_key}")

    today = today or date.today()
    current = today.year * 12 + today.month - 1
    months = RANGE_MONTHS[range_key]
    return _month_start(current + 1 - months), _month_start(current + 1)


# =============================================================================
# CALCULATORS
# =============================================================================

def daily_target(target: Decimal, days: Decimal) -> Optional[Decimal]:
    """How much to save per day to reach target in the given days."""
    if target > 0 and days > 0:
        return Decimal(target) / Decimal(days)
    return None


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_duration(days) -> str:
    """
    Human-readable duration, e.g. "1 year, 2 months, 5 days".

    Partial days round up. A year is 365 days and a month 30.
    """
    total = max(0, math.ceil(days))
    years = total // 365
    months = (total % 365) // 30
    rest = total - (years * 365 + months * 30)

    parts = []
    if years > 0:
        parts.append(_plural(years, "year"))
    if months > 0:
        parts.append(_plural(months, "month"))
    if rest > 0 or not parts:
        parts.append(_plural(rest, "day"))
    return ", ".join(parts)


class DurationEstimate(NamedTuple):
    days: Decimal
    total_days: int
    text: str


def savings_duration(per_day: Decimal, price: Decimal) -> Optional[DurationEstimate]:
    """How long saving per_day each day takes to reach price."""
    if per_day > 0 and price > 0:
        days = Decimal(price) / Decimal(per_day)
        return DurationEstimate(days=days, total_days=math.ceil(days), text=format_duration(days))
    return None


# =============================================================================
# QUIZ
# =============================================================================

class QuizResult(NamedTuple):
    score: int
    answered: int
    total: int
    percentage: int

    @property
    def answered_all(self) -> bool:
        return self.total > 0 and self.answered >= self.total


def grade_quiz(items: Sequence[QuizItem], answers: Mapping[str, str]) -> QuizResult:
    """
    Score need/want answers keyed by quiz item id.

    The percentage is of all items, answered or not, rounded half up.
    """
    score = sum(1 for item in items if answers.get(item.id) == item.answer.value)
    answered = sum(1 for item in items if item.id in answers)
    total = len(items)
    percentage = 0
    if total:
        percentage = int(
            (Decimal(score) * HUNDRED / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        )
    return QuizResult(score=score, answered=answered, total=total, percentage=percentage)


def score_message(percentage: int) -> str:
    if percentage >= 90:
        return "Excellent! You know your needs from wants!"
    if percentage >= 70:
        return "Good job! You have solid financial understanding."
    if percentage >= 50:
        return "Not bad! Keep learning about financial basics."
    return "Keep practicing! Financial literacy takes time."


# =============================================================================
# GOALS
# =============================================================================

class GoalProgress(NamedTuple):
    percent: Decimal
    remaining: Decimal

    @property
    def funded(self) -> bool:
        return self.percent >= HUNDRED


def goal_progress(goal: Goal) -> GoalProgress:
    """Percent saved (0 for a zero target) and what is still missing."""
    if goal.target_price > 0:
        percent = goal.saved_amount / goal.target_price * HUNDRED
    else:
        percent = ZERO
    remaining = max(goal.target_price - goal.saved_amount, ZERO)
    return GoalProgress(percent=percent, remaining=remaining)


def add_savings(goal: Goal, amount: Decimal) -> Decimal:
    """New saved amount after adding money; never more than the target."""
    if amount <= 0:
        raise ValueError("Amount to add must be positive")
    return min(goal.saved_amount + Decimal(amount), goal.target_price)
