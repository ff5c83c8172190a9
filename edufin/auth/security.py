"""
Password Hashing and Access Tokens

Passwords are hashed with bcrypt. Access tokens are HS256 JWTs carrying
the user id (sub) and email, valid for AuthSettings.expires_days.
"""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from pydantic import ValidationError

from edufin.config import AuthSettings
from edufin.models.user import PublicUser, TokenPayload


class AuthenticationError(Exception):
    """Credentials or token were missing, wrong or expired."""
    pass


def hash_password(password: str, rounds: int = 10) -> str:
    """Bcrypt-hash a password. Never store plain text."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash at all
        return False


def create_access_token(user: PublicUser, settings: AuthSettings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.expires_days)
    payload = {
        "sub": user.id,
        "email": user.email,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: AuthSettings) -> TokenPayload:
    """
    Verify a token's signature and expiry.

    Raises:
        AuthenticationError: If the token is invalid or expired
    """
    try:
        claims = jwt.decode(token, settings.secret, algorithms=[settings.algorithm])
        return TokenPayload(**claims)
    except (JWTError, ValidationError) as e:
        raise AuthenticationError("Invalid token") from e
