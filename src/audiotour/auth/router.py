"""Authentication router for all /api/auth/* endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from audiotour.auth.dependencies import get_current_identity
from audiotour.auth.jwt import TokenClaims, TokenService, get_token_service
from audiotour.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)
from audiotour.auth.service import (
    authenticate_user,
    change_password,
    register_user,
    require_user,
    update_profile,
)
from audiotour.database import get_session
from audiotour.db.models import User
from audiotour.responses import envelope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse.model_validate(user)


def _issue_token(tokens: TokenService, user: User) -> str:
    """Sign a token carrying the user's current identity claims."""
    return tokens.issue(
        TokenClaims(
            id=user.id,
            email=user.email,
            is_premium=user.is_premium,
            subscription_type=user.subscription_type,
            role=user.role,
        )
    )


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
) -> dict[str, Any]:
    """Register with email + password and receive a token."""
    user = await register_user(
        db,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    await db.commit()
    return envelope(
        {"user": _user_response(user), "token": _issue_token(tokens, user)},
        message="User registered successfully",
    )


@router.post("/login")
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
) -> dict[str, Any]:
    """Login with email + password."""
    user = await authenticate_user(db, body.email, body.password)
    await db.commit()
    return envelope(
        {"user": _user_response(user), "token": _issue_token(tokens, user)},
        message="Login successful",
    )


@router.get("/me")
async def me(
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Get the caller's profile as currently stored."""
    user = await require_user(db, identity.id)
    return envelope({"user": _user_response(user)})


@router.put("/profile")
async def profile(
    body: ProfileUpdateRequest,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Update first_name, last_name and/or email."""
    user = await update_profile(
        db,
        identity.id,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
    )
    await db.commit()
    return envelope({"user": _user_response(user)}, message="Profile updated successfully")


@router.post("/change-password")
async def change_password_endpoint(
    body: ChangePasswordRequest,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Change password (requires the current password)."""
    await change_password(db, identity.id, body.current_password, body.new_password)
    await db.commit()
    return envelope(message="Password changed successfully")
