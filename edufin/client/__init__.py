"""
Client Package

HTTP client for the API plus the pure helpers the Streamlit pages use.
"""

from edufin.client.api_client import ApiClient, ApiError
from edufin.client.helpers import (
    RANGE_LABELS,
    DurationEstimate,
    GoalProgress,
    QuizResult,
    add_savings,
    daily_target,
    format_duration,
    goal_progress,
    grade_quiz,
    range_bounds,
    savings_duration,
    score_message,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "RANGE_LABELS",
    "DurationEstimate",
    "GoalProgress",
    "QuizResult",
    "add_savings",
    "daily_target",
    "format_duration",
    "goal_progress",
    "grade_quiz",
    "range_bounds",
    "savings_duration",
    "score_message",
]
