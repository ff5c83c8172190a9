"""
Savings Goal Models

A goal is something a student is saving up for. It starts ACTIVE,
becomes PURCHASED when they buy it (recording what they actually paid),
or ARCHIVED when they give up on it.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from edufin.models.expense import Money


class GoalStatus(str, Enum):
    """Lifecycle of a savings goal."""
    ACTIVE = "active"
    PURCHASED = "purchased"
    ARCHIVED = "archived"


class Goal(BaseModel):
    """A stored savings goal."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    owner_id: str
    item_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the user is saving for"
    )
    target_price: Annotated[Money, Field(ge=0, decimal_places=2)]
    saved_amount: Annotated[Money, Field(ge=0, decimal_places=2)] = Decimal("0")
    status: GoalStatus = GoalStatus.ACTIVE
    purchase_price: Optional[Annotated[Money, Field(ge=0, decimal_places=2)]] = None
    purchased_at: Optional[dt.date] = None
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
    updated_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)


class GoalCreate(BaseModel):
    """Body of POST /api/goals."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    item_name: str = Field(..., min_length=1, max_length=200)
    target_price: Decimal = Field(..., ge=0, decimal_places=2)
    saved_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)


class GoalPatch(BaseModel):
    """Body of PATCH /api/goals/{id}."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    item_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    target_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    saved_amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    status: Optional[GoalStatus] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PurchaseRequest(BaseModel):
    """Body of POST /api/goals/{id}/purchase."""
    model_config = ConfigDict(extra="forbid")

    purchase_price: Decimal = Field(..., ge=0, decimal_places=2)
    purchased_at: Optional[dt.date] = Field(
        default=None,
        description="Defaults to today when omitted"
    )
