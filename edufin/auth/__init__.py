"""Authentication package."""

from edufin.auth.security import (
    AuthenticationError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

__all__ = [
    "AuthenticationError",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
