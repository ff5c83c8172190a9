"""
Data Models Package

This package contains all Pydantic models used in EduFin.
All data flowing through the system must conform to these schemas.
"""

from edufin.models.expense import (
    CategoryTotal,
    DateWindow,
    Expense,
    ExpenseCategory,
    ExpenseCreate,
    ExpensePatch,
    ExpenseSummary,
    Money,
    MonthTotal,
)
from edufin.models.goal import (
    Goal,
    GoalCreate,
    GoalPatch,
    GoalStatus,
    PurchaseRequest,
)
from edufin.models.content import (
    QuizAnswer,
    QuizItem,
    Resource,
    ResourceQuery,
    Tip,
    TipBag,
)
from edufin.models.user import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    PublicUser,
    RegisterRequest,
    TokenPayload,
    UserRecord,
)
from edufin.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CategoryTotal",
    "DateWindow",
    "Expense",
    "ExpenseCategory",
    "ExpenseCreate",
    "ExpensePatch",
    "ExpenseSummary",
    "Money",
    "MonthTotal",
    # Goal models
    "Goal",
    "GoalCreate",
    "GoalPatch",
    "GoalStatus",
    "PurchaseRequest",
    # Content models
    "QuizAnswer",
    "QuizItem",
    "Resource",
    "ResourceQuery",
    "Tip",
    "TipBag",
    # User models
    "AuthResponse",
    "LoginRequest",
    "MeResponse",
    "PublicUser",
    "RegisterRequest",
    "TokenPayload",
    "UserRecord",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
