"""
Password hashing and validation using argon2id.

Argon2id is deliberately slow and memory-hard; the cost parameters come from
settings so deployments can raise them and tests can lower them.
"""

from __future__ import annotations

from functools import lru_cache

import argon2

from audiotour.config import get_settings


class PasswordStrengthError(ValueError):
    """Raised when a password does not meet the length policy."""


@lru_cache
def _get_hasher() -> argon2.PasswordHasher:
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.password_hash_time_cost,
        memory_cost=settings.password_hash_memory_cost,
        parallelism=settings.password_hash_parallelism,
        hash_len=32,
        salt_len=16,
        type=argon2.Type.ID,  # argon2id
    )


def reset_hasher() -> None:
    """Drop the cached hasher so changed settings take effect (useful for testing)."""
    _get_hasher.cache_clear()


def hash_password(password: str) -> str:
    """Hash a password using argon2id. Returns the full hash string."""
    return _get_hasher().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its argon2id hash.

    Returns True if the password matches. Never raises on mismatch.
    """
    try:
        return _get_hasher().verify(password_hash, password)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """Check if the hash needs to be updated (parameters changed)."""
    return _get_hasher().check_needs_rehash(password_hash)


def validate_password_strength(password: str) -> None:
    """
    Validate the password length policy.

    Raises PasswordStrengthError if the password is empty, shorter than
    ``password_min_length`` or longer than ``password_max_length``.
    """
    settings = get_settings()
    if not password:
        msg = "Password is required"
        raise PasswordStrengthError(msg)
    if len(password) < settings.password_min_length:
        msg = f"Password must be at least {settings.password_min_length} characters long"
        raise PasswordStrengthError(msg)
    if len(password) > settings.password_max_length:
        msg = f"Password must not exceed {settings.password_max_length} characters"
        raise PasswordStrengthError(msg)
