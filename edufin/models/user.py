"""
User and Authentication Models

The password hash lives on UserRecord only. Everything that leaves the
API uses PublicUser, which has no hash field at all.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PublicUser(BaseModel):
    """A user as the client sees it."""

    id: str
    email: str
    name: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserRecord(PublicUser):
    """A user as storage sees it."""

    password_hash: str = Field(
        ...,
        min_length=1,
        description="bcrypt hash of the password"
    )

    def to_public(self) -> PublicUser:
        return PublicUser(**self.model_dump(exclude={"password_hash"}))


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


class RegisterRequest(BaseModel):
    """Body of POST /api/auth/register."""
    model_config = ConfigDict(extra="forbid")

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field(default="", max_length=100)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class LoginRequest(BaseModel):
    """Body of POST /api/auth/login."""
    model_config = ConfigDict(extra="forbid")

    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthResponse(BaseModel):
    """Token plus the user it was issued to."""

    token: str
    user: PublicUser


class MeResponse(BaseModel):
    user: PublicUser


class TokenPayload(BaseModel):
    """Claims carried by an access token."""

    sub: str = Field(..., description="User id")
    email: str
    exp: Optional[datetime] = None
