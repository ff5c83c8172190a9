"""
Learning Content Models

Tips, quiz items and curated resources. All of it is read-only from the
user's point of view; it is seeded or edited by whoever runs the site.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Tip(BaseModel):
    """A saving tip. Immutable once fetched."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    text: str = Field(..., min_length=1)
    category: Optional[str] = None


class QuizAnswer(str, Enum):
    """Every quiz item is either a need or a want."""
    NEED = "need"
    WANT = "want"


class QuizItem(BaseModel):
    """One need-or-want question."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    prompt: str = Field(..., min_length=1)
    answer: QuizAnswer
    explanation: Optional[str] = None


class Resource(BaseModel):
    """An external article, video or tool worth reading."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(..., min_length=1)
    url: str
    summary: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    language: Optional[str] = None
    pinned: bool = False


class ResourceQuery(BaseModel):
    """Filters accepted by GET /api/resources."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    q: str = ""
    category: str = ""
    tag: str = ""
    language: str = ""
    limit: int = 50

    @field_validator('limit')
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        """Out-of-range limits are clamped, not rejected."""
        return max(1, min(100, v))


class TipBag(BaseModel):
    """Persisted tip rotation state for one browser or session."""

    ids: list[str] = Field(
        default_factory=list,
        description="Ids not yet shown this cycle; the next draw takes the last one"
    )
    cycle: list[str] = Field(
        default_factory=list,
        description="Sorted tip ids the bag was built from"
    )
