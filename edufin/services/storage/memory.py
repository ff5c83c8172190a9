"""
In-Memory Storage Implementation

Used by the test-suite and by the API when no MongoDB is configured.
Behaves like the MongoDB implementation: same ordering, same owner
scoping, same exceptions. Nothing survives a restart.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from bson import ObjectId

from edufin.models.audit import AuditEvent
from edufin.models.content import QuizItem, Tip
from edufin.models.expense import Expense, ExpenseCategory
from edufin.models.goal import Goal
from edufin.models.user import UserRecord
from edufin.queries.summary import in_window
from edufin.services.storage.interface import (
    AuditStorageInterface,
    ContentStorageInterface,
    DuplicateError,
    ExpenseStorageInterface,
    GoalStorageInterface,
    NotFoundError,
    UserStorageInterface,
)


def _new_id() -> str:
    return str(ObjectId())


def _with_id(doc: dict) -> dict:
    return {**doc, "id": doc.get("id") or _new_id()}


class InMemoryUserStorage(UserStorageInterface):

    def __init__(self):
        self._users: dict[str, UserRecord] = {}

    async def create_user(
        self,
        email: str,
        name: str,
        password_hash: str,
    ) -> UserRecord:
        if await self.get_user_by_email(email):
            raise DuplicateError(f"Email already registered: {email}")
        user = UserRecord(
            id=_new_id(),
            email=email,
            name=name,
            password_hash=password_hash,
        )
        self._users[user.id] = user
        return user

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    async def delete_user_by_email(self, email: str) -> bool:
        user = await self.get_user_by_email(email)
        if user is None:
            return False
        del self._users[user.id]
        return True


class InMemoryExpenseStorage(ExpenseStorageInterface):

    def __init__(self):
        self._expenses: dict[str, Expense] = {}

    def _owned(self, owner_id: str, expense_id: str) -> Expense:
        expense = self._expenses.get(expense_id)
        if expense is None or expense.owner_id != owner_id:
            raise NotFoundError(f"Expense not found: {expense_id}")
        return expense

    async def create_expense(
        self,
        owner_id: str,
        amount: Decimal,
        category: ExpenseCategory,
        expense_date: date,
        note: str = "",
    ) -> Expense:
        expense = Expense(
            id=_new_id(),
            owner_id=owner_id,
            amount=amount,
            category=category,
            date=expense_date,
            note=note,
        )
        self._expenses[expense.id] = expense
        return expense

    async def list_expenses(
        self,
        owner_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Expense]:
        expenses = [
            e for e in reversed(self._expenses.values())
            if e.owner_id == owner_id and in_window(e.date, date_from, date_to)
        ]
        # newest insert first so ties stay newest first
        expenses.sort(key=lambda e: (e.date, e.created_at), reverse=True)
        end = None if limit is None else offset + limit
        return expenses[offset:end]

    async def update_expense(
        self,
        owner_id: str,
        expense_id: str,
        changes: dict,
    ) -> Expense:
        current = self._owned(owner_id, expense_id)
        updated = current.model_copy(
            update={**changes, "updated_at": datetime.utcnow()}
        )
        self._expenses[expense_id] = updated
        return updated

    async def delete_expense(self, owner_id: str, expense_id: str) -> None:
        self._owned(owner_id, expense_id)
        del self._expenses[expense_id]


class InMemoryGoalStorage(GoalStorageInterface):

    def __init__(self):
        self._goals: dict[str, Goal] = {}

    def _owned(self, owner_id: str, goal_id: str) -> Goal:
        goal = self._goals.get(goal_id)
        if goal is None or goal.owner_id != owner_id:
            raise NotFoundError(f"Goal not found: {goal_id}")
        return goal

    async def create_goal(
        self,
        owner_id: str,
        item_name: str,
        target_price: Decimal,
        saved_amount: Decimal = Decimal("0"),
    ) -> Goal:
        goal = Goal(
            id=_new_id(),
            owner_id=owner_id,
            item_name=item_name,
            target_price=target_price,
            saved_amount=saved_amount,
        )
        self._goals[goal.id] = goal
        return goal

    async def list_goals(self, owner_id: str) -> list[Goal]:
        goals = [g for g in reversed(self._goals.values()) if g.owner_id == owner_id]
        goals.sort(key=lambda g: g.created_at, reverse=True)
        return goals

    async def update_goal(
        self,
        owner_id: str,
        goal_id: str,
        changes: dict,
    ) -> Goal:
        current = self._owned(owner_id, goal_id)
        updated = current.model_copy(
            update={**changes, "updated_at": datetime.utcnow()}
        )
        self._goals[goal_id] = updated
        return updated

    async def delete_goal(self, owner_id: str, goal_id: str) -> None:
        self._owned(owner_id, goal_id)
        del self._goals[goal_id]

    async def delete_goals_for_owner(self, owner_id: str) -> int:
        doomed = [g.id for g in self._goals.values() if g.owner_id == owner_id]
        for goal_id in doomed:
            del self._goals[goal_id]
        return len(doomed)


class InMemoryContentStorage(ContentStorageInterface):

    def __init__(
        self,
        tips: Optional[list[dict]] = None,
        quiz_items: Optional[list[dict]] = None,
    ):
        self._tips: list[Tip] = []
        self._quiz: list[QuizItem] = []
        self._load_tips(tips or [])
        self._load_quiz(quiz_items or [])

    def _load_tips(self, tips: list[dict]) -> None:
        self._tips = [Tip(**_with_id(tip)) for tip in tips]

    def _load_quiz(self, items: list[dict]) -> None:
        self._quiz = [QuizItem(**_with_id(item)) for item in items]

    async def list_tips(self) -> list[Tip]:
        return list(self._tips)

    async def list_quiz_items(self) -> list[QuizItem]:
        return list(self._quiz)

    async def replace_tips(self, tips: list[dict]) -> int:
        self._load_tips(tips)
        return len(self._tips)

    async def replace_quiz_items(self, items: list[dict]) -> int:
        self._load_quiz(items)
        return len(self._quiz)


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        events = [e for e in reversed(self._events) if user_id is None or e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
