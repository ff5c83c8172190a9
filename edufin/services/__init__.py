"""Services package."""

from edufin.services.resources import ResourceCatalog
from edufin.services.storage import (
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

__all__ = [
    # Resource library
    "ResourceCatalog",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "ContentStorageInterface",
    "DuplicateError",
    "ExpenseStorageInterface",
    "GoalStorageInterface",
    "NotFoundError",
    "StorageError",
    "UserStorageInterface",
]
