"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
MongoDB is the production backend; the in-memory backend serves tests
and runs without a database.
"""

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
from edufin.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryContentStorage,
    InMemoryExpenseStorage,
    InMemoryGoalStorage,
    InMemoryUserStorage,
)
from edufin.services.storage.mongo import (
    MongoAuditStorage,
    MongoConnection,
    MongoContentStorage,
    MongoExpenseStorage,
    MongoGoalStorage,
    MongoUserStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ContentStorageInterface",
    "ExpenseStorageInterface",
    "GoalStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryContentStorage",
    "InMemoryExpenseStorage",
    "InMemoryGoalStorage",
    "InMemoryUserStorage",
    # MongoDB implementation
    "MongoAuditStorage",
    "MongoConnection",
    "MongoContentStorage",
    "MongoExpenseStorage",
    "MongoGoalStorage",
    "MongoUserStorage",
]
