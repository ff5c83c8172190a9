"""
MongoDB Storage Implementation

DESIGN DECISION: MongoDB is the production backend because:
1. Every collection is a flat list of small per-user documents
2. The indexes we need (owner + date) are cheap
3. It's what the hosted deployment already runs

TRADEOFFS:
- Amounts are stored as Decimal128 so they round-trip exactly
- Calendar dates are stored as midnight UTC datetimes (BSON has no date type)
- Aggregation happens in Python (edufin.queries), not in a pipeline,
  so the arithmetic contract lives in one place

The implementation follows the abstract interface, so the API and the
tests never touch the driver directly.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from bson import ObjectId
from bson.decimal128 import Decimal128
from bson.errors import InvalidId
from fastapi.concurrency import run_in_threadpool
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from tenacity import retry, stop_after_attempt, wait_exponential

from edufin.config import MongoSettings, get_settings
from edufin.models.audit import AuditEvent
from edufin.models.content import QuizItem, Tip
from edufin.models.expense import Expense, ExpenseCategory
from edufin.models.goal import Goal
from edufin.models.user import UserRecord
from edufin.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    ContentStorageInterface,
    DuplicateError,
    ExpenseStorageInterface,
    GoalStorageInterface,
    NotFoundError,
    StorageError,
    UserStorageInterface,
)


USERS = "users"
EXPENSES = "expenses"
GOALS = "goals"
TIPS = "tips"
QUIZ_ITEMS = "quiz_items"
AUDIT = "audit_log"


# =============================================================================
# VALUE CONVERSION
# =============================================================================

def _object_id(value: str) -> Optional[ObjectId]:
    """Parse an id, or None if it can't be one of ours."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _to_bson(value: Any) -> Any:
    """Convert a model value to something BSON can store."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return value


def _from_bson(value: Any) -> Any:
    if isinstance(value, Decimal128):
        return value.to_decimal()
    return value


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def _changes_to_bson(changes: dict) -> dict:
    return {key: _to_bson(value) for key, value in changes.items()}


def _doc_to_user(doc: dict) -> UserRecord:
    return UserRecord(
        id=str(doc["_id"]),
        email=doc["email"],
        name=doc.get("name", ""),
        password_hash=doc["password_hash"],
        created_at=doc.get("created_at") or datetime.utcnow(),
    )


def _doc_to_expense(doc: dict) -> Expense:
    return Expense(
        id=str(doc["_id"]),
        owner_id=doc["owner_id"],
        amount=_from_bson(doc["amount"]),
        category=ExpenseCategory(doc.get("category", "other")),
        date=_as_date(doc["date"]),
        note=doc.get("note", ""),
        created_at=doc.get("created_at") or datetime.utcnow(),
        updated_at=doc.get("updated_at") or datetime.utcnow(),
    )


def _doc_to_goal(doc: dict) -> Goal:
    purchase_price = doc.get("purchase_price")
    return Goal(
        id=str(doc["_id"]),
        owner_id=doc["owner_id"],
        item_name=doc["item_name"],
        target_price=_from_bson(doc["target_price"]),
        saved_amount=_from_bson(doc.get("saved_amount", Decimal128("0"))),
        status=doc.get("status", "active"),
        purchase_price=_from_bson(purchase_price) if purchase_price is not None else None,
        purchased_at=_as_date(doc.get("purchased_at")),
        created_at=doc.get("created_at") or datetime.utcnow(),
        updated_at=doc.get("updated_at") or datetime.utcnow(),
    )


def _doc_to_tip(doc: dict) -> Tip:
    return Tip(id=str(doc["_id"]), text=doc["text"], category=doc.get("category"))


def _doc_to_quiz_item(doc: dict) -> QuizItem:
    return QuizItem(
        id=str(doc["_id"]),
        prompt=doc["prompt"],
        answer=doc["answer"],
        explanation=doc.get("explanation"),
    )


def _doc_to_event(doc: dict) -> AuditEvent:
    doc = {key: value for key, value in doc.items() if key != "_id"}
    return AuditEvent(**doc)


# =============================================================================
# CLIENT
# =============================================================================

class MongoConnection:
    """
    Low-level MongoDB client wrapper.

    Handles connection setup, index creation and retry logic.
    """

    def __init__(self, settings: Optional[MongoSettings] = None):
        self._settings = settings or get_settings().mongo
        self._client: Optional[MongoClient] = None
        self._db: Optional[Database] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> Database:
        """
        Establish the connection and make sure indexes exist.

        The ping forces server selection so a bad URI fails here,
        not on the first request.
        """
        if self._db is None:
            try:
                client = MongoClient(
                    self._settings.uri,
                    serverSelectionTimeoutMS=self._settings.server_selection_timeout_ms,
                    tz_aware=False,
                )
                client.admin.command("ping")
                db = client[self._settings.database]
                self._ensure_indexes(db)
            except PyMongoError as e:
                raise ConnectionError(f"Failed to connect to MongoDB: {e}")
            self._client = client
            self._db = db
        return self._db

    def _ensure_indexes(self, db: Database) -> None:
        db[USERS].create_index([("email", ASCENDING)], unique=True)
        db[EXPENSES].create_index([("owner_id", ASCENDING), ("date", DESCENDING)])
        db[EXPENSES].create_index(
            [("owner_id", ASCENDING), ("category", ASCENDING), ("date", DESCENDING)]
        )
        db[GOALS].create_index([("owner_id", ASCENDING), ("created_at", DESCENDING)])
        db[AUDIT].create_index([("timestamp", DESCENDING)])

    def collection(self, name: str) -> Collection:
        return self.connect()[name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None


# =============================================================================
# STORAGE
# =============================================================================
#
# pymongo is synchronous. Every driver call, cursor iteration included,
# runs in the threadpool so a slow or unreachable server never stalls
# the event loop.

class MongoUserStorage(UserStorageInterface):

    def __init__(self, connection: Optional[MongoConnection] = None):
        self._connection = connection or MongoConnection()

    def _users(self) -> Collection:
        return self._connection.collection(USERS)

    async def create_user(
        self,
        email: str,
        name: str,
        password_hash: str,
    ) -> UserRecord:
        doc = {
            "email": email,
            "name": name,
            "password_hash": password_hash,
            "created_at": datetime.utcnow(),
        }
        try:
            result = await run_in_threadpool(lambda: self._users().insert_one(doc))
        except DuplicateKeyError:
            raise DuplicateError(f"Email already registered: {email}")
        except PyMongoError as e:
            raise StorageError(f"Failed to create user: {e}")
        doc["_id"] = result.inserted_id
        return _doc_to_user(doc)

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        try:
            doc = await run_in_threadpool(lambda: self._users().find_one({"email": email}))
        except PyMongoError as e:
            raise StorageError(f"Failed to get user: {e}")
        return _doc_to_user(doc) if doc else None

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        try:
            doc = await run_in_threadpool(lambda: self._users().find_one({"_id": oid}))
        except PyMongoError as e:
            raise StorageError(f"Failed to get user: {e}")
        return _doc_to_user(doc) if doc else None

    async def delete_user_by_email(self, email: str) -> bool:
        try:
            result = await run_in_threadpool(lambda: self._users().delete_one({"email": email}))
        except PyMongoError as e:
            raise StorageError(f"Failed to delete user: {e}")
        return result.deleted_count > 0


class MongoExpenseStorage(ExpenseStorageInterface):

    def __init__(self, connection: Optional[MongoConnection] = None):
        self._connection = connection or MongoConnection()

    def _expenses(self) -> Collection:
        return self._connection.collection(EXPENSES)

    async def create_expense(
        self,
        owner_id: str,
        amount: Decimal,
        category: ExpenseCategory,
        expense_date: date,
        note: str = "",
    ) -> Expense:
        now = datetime.utcnow()
        doc = {
            "owner_id": owner_id,
            "amount": _to_bson(amount),
            "category": _to_bson(category),
            "date": _to_bson(expense_date),
            "note": note,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await run_in_threadpool(lambda: self._expenses().insert_one(doc))
        except PyMongoError as e:
            raise StorageError(f"Failed to save expense: {e}")
        doc["_id"] = result.inserted_id
        return _doc_to_expense(doc)

    async def list_expenses(
        self,
        owner_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Expense]:
        query: dict[str, Any] = {"owner_id": owner_id}
        if date_from or date_to:
            query["date"] = {}
            if date_from:
                query["date"]["$gte"] = _to_bson(date_from)
            if date_to:
                query["date"]["$lt"] = _to_bson(date_to)

        def fetch() -> list[dict]:
            cursor = (
                self._expenses().find(query)
                .sort([("date", DESCENDING), ("created_at", DESCENDING)])
                .skip(offset)
            )
            if limit is not None:
                cursor = cursor.limit(limit)
            return list(cursor)

        try:
            docs = await run_in_threadpool(fetch)
        except PyMongoError as e:
            raise StorageError(f"Failed to list expenses: {e}")
        return [_doc_to_expense(doc) for doc in docs]

    async def update_expense(
        self,
        owner_id: str,
        expense_id: str,
        changes: dict,
    ) -> Expense:
        oid = _object_id(expense_id)
        if oid is None:
            raise NotFoundError(f"Expense not found: {expense_id}")
        update = _changes_to_bson(changes)
        update["updated_at"] = datetime.utcnow()
        try:
            doc = await run_in_threadpool(lambda: self._expenses().find_one_and_update(
                {"_id": oid, "owner_id": owner_id},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            ))
        except PyMongoError as e:
            raise StorageError(f"Failed to update expense: {e}")
        if doc is None:
            raise NotFoundError(f"Expense not found: {expense_id}")
        return _doc_to_expense(doc)

    async def delete_expense(self, owner_id: str, expense_id: str) -> None:
        oid = _object_id(expense_id)
        if oid is None:
            raise NotFoundError(f"Expense not found: {expense_id}")
        try:
            result = await run_in_threadpool(
                lambda: self._expenses().delete_one({"_id": oid, "owner_id": owner_id})
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to delete expense: {e}")
        if result.deleted_count == 0:
            raise NotFoundError(f"Expense not found: {expense_id}")


class MongoGoalStorage(GoalStorageInterface):

    def __init__(self, connection: Optional[MongoConnection] = None):
        self._connection = connection or MongoConnection()

    def _goals(self) -> Collection:
        return self._connection.collection(GOALS)

    async def create_goal(
        self,
        owner_id: str,
        item_name: str,
        target_price: Decimal,
        saved_amount: Decimal = Decimal("0"),
    ) -> Goal:
        now = datetime.utcnow()
        doc = {
            "owner_id": owner_id,
            "item_name": item_name,
            "target_price": _to_bson(target_price),
            "saved_amount": _to_bson(saved_amount),
            "status": "active",
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await run_in_threadpool(lambda: self._goals().insert_one(doc))
        except PyMongoError as e:
            raise StorageError(f"Failed to save goal: {e}")
        doc["_id"] = result.inserted_id
        return _doc_to_goal(doc)

    async def list_goals(self, owner_id: str) -> list[Goal]:
        try:
            docs = await run_in_threadpool(
                lambda: list(self._goals().find({"owner_id": owner_id}).sort("created_at", DESCENDING))
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to list goals: {e}")
        return [_doc_to_goal(doc) for doc in docs]

    async def update_goal(
        self,
        owner_id: str,
        goal_id: str,
        changes: dict,
    ) -> Goal:
        oid = _object_id(goal_id)
        if oid is None:
            raise NotFoundError(f"Goal not found: {goal_id}")
        update = _changes_to_bson(changes)
        update["updated_at"] = datetime.utcnow()
        try:
            doc = await run_in_threadpool(lambda: self._goals().find_one_and_update(
                {"_id": oid, "owner_id": owner_id},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            ))
        except PyMongoError as e:
            raise StorageError(f"Failed to update goal: {e}")
        if doc is None:
            raise NotFoundError(f"Goal not found: {goal_id}")
        return _doc_to_goal(doc)

    async def delete_goal(self, owner_id: str, goal_id: str) -> None:
        oid = _object_id(goal_id)
        if oid is None:
            raise NotFoundError(f"Goal not found: {goal_id}")
        try:
            result = await run_in_threadpool(
                lambda: self._goals().delete_one({"_id": oid, "owner_id": owner_id})
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to delete goal: {e}")
        if result.deleted_count == 0:
            raise NotFoundError(f"Goal not found: {goal_id}")

    async def delete_goals_for_owner(self, owner_id: str) -> int:
        try:
            result = await run_in_threadpool(
                lambda: self._goals().delete_many({"owner_id": owner_id})
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to delete goals: {e}")
        return result.deleted_count


class MongoContentStorage(ContentStorageInterface):

    def __init__(self, connection: Optional[MongoConnection] = None):
        self._connection = connection or MongoConnection()

    async def list_tips(self) -> list[Tip]:
        try:
            docs = await run_in_threadpool(
                lambda: list(self._connection.collection(TIPS).find({}, {"text": 1, "category": 1}))
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to list tips: {e}")
        return [_doc_to_tip(doc) for doc in docs]

    async def list_quiz_items(self) -> list[QuizItem]:
        try:
            docs = await run_in_threadpool(
                lambda: list(self._connection.collection(QUIZ_ITEMS).find({}))
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to list quiz items: {e}")
        return [_doc_to_quiz_item(doc) for doc in docs]

    async def replace_tips(self, tips: list[dict]) -> int:
        return await run_in_threadpool(self._replace, TIPS, tips)

    async def replace_quiz_items(self, items: list[dict]) -> int:
        return await run_in_threadpool(self._replace, QUIZ_ITEMS, items)

    def _replace(self, name: str, docs: list[dict]) -> int:
        collection = self._connection.collection(name)
        try:
            collection.delete_many({})
            if docs:
                collection.insert_many([dict(doc) for doc in docs])
        except PyMongoError as e:
            raise StorageError(f"Failed to replace {name}: {e}")
        return len(docs)


class MongoAuditStorage(AuditStorageInterface):
    """
    MongoDB implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, connection: Optional[MongoConnection] = None):
        self._connection = connection or MongoConnection()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        document = event.to_document()
        try:
            await run_in_threadpool(
                lambda: self._connection.collection(AUDIT).insert_one(document)
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to write audit event: {e}")
        return True

    async def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        query = {"user_id": user_id} if user_id else {}
        try:
            docs = await run_in_threadpool(lambda: list(
                self._connection.collection(AUDIT)
                .find(query)
                .sort("timestamp", DESCENDING)
                .limit(limit)
            ))
        except PyMongoError as e:
            raise StorageError(f"Failed to get audit events: {e}")
        return [_doc_to_event(doc) for doc in docs]
