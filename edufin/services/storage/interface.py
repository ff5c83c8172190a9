"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run against MongoDB in production
2. Use in-memory storage for testing and offline demos
3. Keep business logic decoupled from the driver

Every per-user operation takes the owner's id and scopes by it. A record
that exists but belongs to someone else is reported exactly like one that
does not exist.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

from edufin.models.audit import AuditEvent
from edufin.models.content import QuizItem, Tip
from edufin.models.expense import Expense, ExpenseCategory
from edufin.models.goal import Goal
from edufin.models.user import UserRecord


class UserStorageInterface(ABC):
    """Abstract interface for user accounts."""

    @abstractmethod
    async def create_user(
        self,
        email: str,
        name: str,
        password_hash: str,
    ) -> UserRecord:
        """
        Create a user.

        Raises:
            DuplicateError: If the email is already registered
        """
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Look a user up by (normalized) email."""
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Look a user up by id. Malformed ids simply find nothing."""
        pass

    @abstractmethod
    async def delete_user_by_email(self, email: str) -> bool:
        """Delete a user. Returns False if there was nobody to delete."""
        pass


class ExpenseStorageInterface(ABC):
    """Abstract interface for expense records."""

    @abstractmethod
    async def create_expense(
        self,
        owner_id: str,
        amount: Decimal,
        category: ExpenseCategory,
        expense_date: date,
        note: str = "",
    ) -> Expense:
        """Store a new expense and return it with its id."""
        pass

    @abstractmethod
    async def list_expenses(
        self,
        owner_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Expense]:
        """
        List a user's expenses.

        Args:
            owner_id: Whose expenses
            date_from: Include expenses on or after this date
            date_to: Include expenses strictly before this date
            limit: Maximum number of results, None for all
            offset: Number of results to skip

        Returns:
            Expenses newest first (by date, then by creation time)
        """
        pass

    @abstractmethod
    async def update_expense(
        self,
        owner_id: str,
        expense_id: str,
        changes: dict,
    ) -> Expense:
        """
        Apply field changes to an expense.

        Raises:
            NotFoundError: If the user has no such expense
        """
        pass

    @abstractmethod
    async def delete_expense(self, owner_id: str, expense_id: str) -> None:
        """
        Delete an expense.

        Raises:
            NotFoundError: If the user has no such expense
        """
        pass


class GoalStorageInterface(ABC):
    """Abstract interface for savings goals."""

    @abstractmethod
    async def create_goal(
        self,
        owner_id: str,
        item_name: str,
        target_price: Decimal,
        saved_amount: Decimal = Decimal("0"),
    ) -> Goal:
        pass

    @abstractmethod
    async def list_goals(self, owner_id: str) -> list[Goal]:
        """A user's goals, newest first."""
        pass

    @abstractmethod
    async def update_goal(
        self,
        owner_id: str,
        goal_id: str,
        changes: dict,
    ) -> Goal:
        """
        Raises:
            NotFoundError: If the user has no such goal
        """
        pass

    @abstractmethod
    async def delete_goal(self, owner_id: str, goal_id: str) -> None:
        """
        Raises:
            NotFoundError: If the user has no such goal
        """
        pass

    @abstractmethod
    async def delete_goals_for_owner(self, owner_id: str) -> int:
        """Delete every goal a user has. Returns how many went."""
        pass


class ContentStorageInterface(ABC):
    """
    Abstract interface for shared learning content.

    Content is global, not per user.
    """

    @abstractmethod
    async def list_tips(self) -> list[Tip]:
        pass

    @abstractmethod
    async def list_quiz_items(self) -> list[QuizItem]:
        pass

    @abstractmethod
    async def replace_tips(self, tips: list[dict]) -> int:
        """Replace every tip with the given {text, category} dicts."""
        pass

    @abstractmethod
    async def replace_quiz_items(self, items: list[dict]) -> int:
        """Replace every quiz item with the given {prompt, answer, explanation} dicts."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events, newest first.

        Args:
            limit: Maximum number of events to return
            user_id: Only events triggered by this user
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
