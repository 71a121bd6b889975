"""
Authentication and account business logic.

Handles registration, login, profile updates and password changes. Uniqueness
pre-checks give friendly errors; the unique index on ``users.email`` remains the
final arbiter when two requests race.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from audiotour.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from audiotour.db.models import User, utcnow
from audiotour.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def _check_password(password: str, field: str) -> None:
    """Apply the password policy, reporting failures as a field-level validation error."""
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(details=[{"field": field, "message": str(e), "type": "password_policy"}]) from e


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def require_user(db: AsyncSession, user_id: int) -> User:
    """Fetch a user by ID or raise NotFoundError."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def _email_taken(db: AsyncSession, email: str, exclude_user_id: int | None = None) -> bool:
    query = select(User.id).where(func.lower(User.email) == email)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query)
    return result.first() is not None


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """
    Register a new user with email + password.

    Raises:
        ValidationError: If the password violates the length policy.
        ConflictError: If the email is already registered.
    """
    _check_password(password, "password")

    email = email.lower().strip()
    if await get_user_by_email(db, email) is not None:
        raise ConflictError("User already exists", "An account with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if not await _email_taken(db, email):
            raise
        raise ConflictError("User already exists", "An account with this email already exists") from e

    logger.info("user_registered", user_id=user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Unknown email and wrong password raise the same InvalidCredentialsError.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed")
        raise InvalidCredentialsError

    # Check if password needs rehash
    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)

    return user


# ---------------------------------------------------------------------------
# Account maintenance
# ---------------------------------------------------------------------------


async def update_profile(
    db: AsyncSession,
    user_id: int,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
) -> User:
    """
    Update profile fields.

    Raises:
        ValidationError: If no field was supplied.
        NotFoundError: If the user no longer exists.
        ConflictError: If the new email belongs to another account.
    """
    if first_name is None and last_name is None and email is None:
        raise ValidationError("No updates provided")

    user = await require_user(db, user_id)

    if email is not None:
        email = email.lower().strip()
        if await _email_taken(db, email, exclude_user_id=user.id):
            raise ConflictError("Email already taken", "Another account is already using this email")
        user.email = email

    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    user.updated_at = utcnow()

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if email is None or not await _email_taken(db, email, exclude_user_id=user_id):
            raise
        raise ConflictError("Email already taken", "Another account is already using this email") from e
    return user


async def change_password(
    db: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
) -> None:
    """
    Replace the password hash after verifying the current password.

    Raises:
        ValidationError: If the new password violates the length policy.
        NotFoundError: If the user no longer exists.
        InvalidCredentialsError: If the current password does not match.
    """
    _check_password(new_password, "new_password")

    user = await require_user(db, user_id)
    if not verify_password(current_password, user.password_hash):
        raise InvalidCredentialsError("Invalid current password", "Current password is incorrect")

    user.password_hash = hash_password(new_password)
    user.updated_at = utcnow()
    await db.flush()
    logger.info("password_changed", user_id=user.id)
