"""
Tests for the in-memory storage backend.

The API tests run on this backend, so it has to honour the same contract
as MongoDB: owner scoping, newest-first ordering, half-open date filters.
"""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from edufin.auth import verify_password
from edufin.models import AuditEventBuilder, ExpenseCategory, GoalStatus
from edufin.services.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryContentStorage,
    InMemoryExpenseStorage,
    InMemoryGoalStorage,
    InMemoryUserStorage,
    NotFoundError,
)
from edufin.seed import DEMO_EMAIL, DEMO_PASSWORD, seed


def run(coro):
    return asyncio.run(coro)


class TestUserStorage:

    def test_create_and_find(self):
        storage = InMemoryUserStorage()
        user = run(storage.create_user("a@b.c", "Sam", "hash"))
        assert run(storage.get_user_by_email("a@b.c")).id == user.id
        assert run(storage.get_user_by_id(user.id)).email == "a@b.c"

    def test_duplicate_email_rejected(self):
        storage = InMemoryUserStorage()
        run(storage.create_user("a@b.c", "", "hash"))
        with pytest.raises(DuplicateError):
            run(storage.create_user("a@b.c", "", "other"))

    def test_unknown_user(self):
        storage = InMemoryUserStorage()
        assert run(storage.get_user_by_id("nope")) is None
        assert run(storage.get_user_by_email("x@y.z")) is None

    def test_delete(self):
        storage = InMemoryUserStorage()
        run(storage.create_user("a@b.c", "", "hash"))
        assert run(storage.delete_user_by_email("a@b.c")) is True
        assert run(storage.delete_user_by_email("a@b.c")) is False


class TestExpenseStorage:

    @pytest.fixture
    def storage(self):
        storage = InMemoryExpenseStorage()
        for amount, day in (("10", date(2024, 1, 5)), ("20", date(2024, 2, 1)), ("30", date(2024, 1, 20))):
            run(storage.create_expense("u1", Decimal(amount), ExpenseCategory.OTHER, day))
        run(storage.create_expense("u2", Decimal("99"), ExpenseCategory.PURCHASE, date(2024, 1, 10)))
        return storage

    def test_lists_only_owner_expenses_newest_first(self, storage):
        expenses = run(storage.list_expenses("u1"))
        assert [e.amount for e in expenses] == [Decimal("20"), Decimal("30"), Decimal("10")]

    def test_same_day_newest_created_first(self):
        storage = InMemoryExpenseStorage()
        first = run(storage.create_expense("u1", Decimal("1"), ExpenseCategory.OTHER, date(2024, 1, 1)))
        second = run(storage.create_expense("u1", Decimal("2"), ExpenseCategory.OTHER, date(2024, 1, 1)))
        assert [e.id for e in run(storage.list_expenses("u1"))] == [second.id, first.id]

    def test_half_open_date_filter(self, storage):
        expenses = run(storage.list_expenses("u1", date(2024, 1, 5), date(2024, 2, 1)))
        assert sorted(e.amount for e in expenses) == [Decimal("10"), Decimal("30")]

    def test_paging(self, storage):
        assert [e.amount for e in run(storage.list_expenses("u1", limit=2))] == [Decimal("20"), Decimal("30")]
        assert [e.amount for e in run(storage.list_expenses("u1", limit=2, offset=2))] == [Decimal("10")]

    def test_update(self, storage):
        expense = run(storage.list_expenses("u1"))[0]
        updated = run(storage.update_expense("u1", expense.id, {"note": "gift", "amount": Decimal("25")}))
        assert updated.note == "gift"
        assert updated.amount == Decimal("25")
        assert updated.updated_at >= expense.updated_at

    def test_update_other_owner_is_not_found(self, storage):
        expense = run(storage.list_expenses("u2"))[0]
        with pytest.raises(NotFoundError):
            run(storage.update_expense("u1", expense.id, {"note": "mine now"}))

    def test_delete(self, storage):
        expense = run(storage.list_expenses("u1"))[0]
        run(storage.delete_expense("u1", expense.id))
        assert len(run(storage.list_expenses("u1"))) == 2
        with pytest.raises(NotFoundError):
            run(storage.delete_expense("u1", expense.id))


class TestGoalStorage:

    def test_crud(self):
        storage = InMemoryGoalStorage()
        goal = run(storage.create_goal("u1", "Bike", Decimal("300")))
        assert goal.status == GoalStatus.ACTIVE
        assert goal.saved_amount == Decimal("0")

        updated = run(storage.update_goal("u1", goal.id, {"saved_amount": Decimal("50")}))
        assert updated.saved_amount == Decimal("50")

        run(storage.delete_goal("u1", goal.id))
        assert run(storage.list_goals("u1")) == []

    def test_scoped_by_owner(self):
        storage = InMemoryGoalStorage()
        goal = run(storage.create_goal("u1", "Bike", Decimal("300")))
        assert run(storage.list_goals("u2")) == []
        with pytest.raises(NotFoundError):
            run(storage.delete_goal("u2", goal.id))

    def test_delete_goals_for_owner(self):
        storage = InMemoryGoalStorage()
        run(storage.create_goal("u1", "Bike", Decimal("300")))
        run(storage.create_goal("u1", "Phone", Decimal("500")))
        run(storage.create_goal("u2", "Desk", Decimal("100")))
        assert run(storage.delete_goals_for_owner("u1")) == 2
        assert len(run(storage.list_goals("u2"))) == 1


class TestContentStorage:

    def test_tips_get_ids(self):
        storage = InMemoryContentStorage(tips=[{"text": "Save first", "category": "habits"}])
        tips = run(storage.list_tips())
        assert len(tips) == 1
        assert tips[0].id

    def test_replace(self):
        storage = InMemoryContentStorage()
        assert run(storage.replace_tips([{"text": "a"}, {"text": "b"}])) == 2
        assert run(storage.replace_quiz_items([{"prompt": "Coat", "answer": "need"}])) == 1
        assert run(storage.list_quiz_items())[0].answer.value == "need"


class TestAuditStorage:

    def test_recent_events_newest_first(self):
        storage = InMemoryAuditStorage()
        run(storage.append_event(AuditEventBuilder.user_logged_in("u1")))
        run(storage.append_event(AuditEventBuilder.user_logged_in("u2")))
        run(storage.append_event(AuditEventBuilder.goal_deleted("g1", "u1")))

        events = run(storage.get_recent_events(user_id="u1"))
        assert [e.event_type.value for e in events] == ["goal_deleted", "user_logged_in"]
        assert len(run(storage.get_recent_events(limit=1))) == 1


class TestSeed:

    def test_seed_is_repeatable(self):
        users, goals, content = InMemoryUserStorage(), InMemoryGoalStorage(), InMemoryContentStorage()

        run(seed(users, goals, content, bcrypt_rounds=4))
        counts = run(seed(users, goals, content, bcrypt_rounds=4))

        assert counts == {"tips": 4, "quiz_items": 4, "goals": 2}
        demo = run(users.get_user_by_email(DEMO_EMAIL))
        assert verify_password(DEMO_PASSWORD, demo.password_hash)
        assert len(run(goals.list_goals(demo.id))) == 2
        assert len(run(content.list_tips())) == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
