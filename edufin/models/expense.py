"""
Expense Models

These models define the strict schemas for expense records and the
summary derived from them. They are designed to:
1. Keep money in Decimal from the request body to the summary
2. Reject unknown or malformed fields at the API boundary
3. Serialize to the JSON shape the client expects

DESIGN DECISION: Amounts are Decimal internally and only become JSON
numbers on the way out. Sums are exact; no float accumulation.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


# JSON numbers on the wire, Decimal everywhere else
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    The tracker is about a student's big-ticket items: the thing itself,
    what goes with it, keeping it running, and recurring fees.
    """
    PURCHASE = "purchase"
    ACCESSORY = "accessory"
    MAINTENANCE = "maintenance"
    SUBSCRIPTION = "subscription"
    OTHER = "other"


# =============================================================================
# STORED RECORD
# =============================================================================

class Expense(BaseModel):
    """
    A single expense, owned by exactly one user.

    Only amount, category, date and note are ever edited.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        description="Document id"
    )
    owner_id: str = Field(
        ...,
        description="Id of the user who owns this expense"
    )
    amount: Annotated[
        Money,
        Field(ge=0, decimal_places=2, description="Amount spent")
    ]
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHER,
        description="Expense category"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )
    note: str = Field(
        default="",
        max_length=500,
        description="Free-text note"
    )
    created_at: dt.datetime = Field(
        default_factory=dt.datetime.utcnow
    )
    updated_at: dt.datetime = Field(
        default_factory=dt.datetime.utcnow
    )


# =============================================================================
# REQUEST BODIES
# =============================================================================

class ExpenseCreate(BaseModel):
    """Body of POST /api/expenses."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount spent"
    )
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: Optional[dt.date] = Field(
        default=None,
        description="Defaults to today when omitted"
    )
    note: str = Field(
        default="",
        max_length=500
    )


class ExpensePatch(BaseModel):
    """
    Body of PATCH /api/expenses/{id}.

    Every field is optional; only the ones sent are changed.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        decimal_places=2
    )
    category: Optional[ExpenseCategory] = None
    date: Optional[dt.date] = None
    note: Optional[str] = Field(
        default=None,
        max_length=500
    )

    def changes(self) -> dict:
        """Fields that were actually sent and are not null."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# =============================================================================
# SUMMARY
# =============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class CategoryTotal(_CamelModel):
    """Spend within one category."""

    category: ExpenseCategory
    total: Money
    share: Money = Field(
        ...,
        ge=0,
        le=1,
        description="Fraction of the window's total spend"
    )


class MonthTotal(_CamelModel):
    """Spend within one calendar month."""

    month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Month label, YYYY-MM"
    )
    total: Money


class ExpenseSummary(_CamelModel):
    """
    Summary statistics over a user's expenses in a date window.

    Derived on every request, never persisted.
    """

    total: Money = Decimal("0")
    by_category: list[CategoryTotal] = Field(default_factory=list)
    by_month: list[MonthTotal] = Field(default_factory=list)
    top_category: Optional[CategoryTotal] = None


class DateWindow(BaseModel):
    """
    Half-open date window [date_from, date_to).

    Either bound may be missing. Strings must be ISO calendar dates;
    anything else fails validation instead of being read as "no bound".
    """
    model_config = ConfigDict(extra="forbid")

    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None

    @model_validator(mode='after')
    def validate_order(self) -> 'DateWindow':
        """Reject windows that end before they start."""
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("'to' cannot be before 'from'")
        return self
