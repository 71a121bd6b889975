"""Per-user router for all /api/users/* endpoints. Every route requires a token."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from audiotour.auth.dependencies import get_current_identity
from audiotour.auth.jwt import TokenClaims
from audiotour.auth.schemas import UserResponse
from audiotour.database import get_session
from audiotour.responses import envelope
from audiotour.users.schemas import (
    FavoriteResponse,
    ProgressResponse,
    ProgressState,
    ProgressUpdateRequest,
    SubscriptionUpdateRequest,
    UserStats,
)
from audiotour.users.service import (
    add_favorite,
    list_favorites,
    list_progress,
    remove_favorite,
    update_subscription,
    upsert_progress,
    user_stats,
)

router = APIRouter(prefix="/api/users", tags=["Users"])

LocationId = Annotated[int, Path(ge=1, description="Location ID")]


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


@router.get("/favorites")
async def favorites(
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """List the caller's favorite locations."""
    rows = [FavoriteResponse.model_validate(row) for row in await list_favorites(db, identity.id)]
    return envelope(rows, total=len(rows))


@router.post("/favorites/{location_id}", status_code=201)
async def add_favorite_endpoint(
    location_id: LocationId,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Add a location to favorites."""
    await add_favorite(db, identity.id, location_id)
    await db.commit()
    return envelope(message="Location added to favorites")


@router.delete("/favorites/{location_id}")
async def remove_favorite_endpoint(
    location_id: LocationId,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Remove a location from favorites."""
    await remove_favorite(db, identity.id, location_id)
    await db.commit()
    return envelope(message="Location removed from favorites")


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@router.get("/progress")
async def progress(
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """List the caller's listening progress."""
    rows = [ProgressResponse.model_validate(row) for row in await list_progress(db, identity.id)]
    return envelope(rows, total=len(rows))


@router.put("/progress/{location_id}")
async def update_progress_endpoint(
    body: ProgressUpdateRequest,
    location_id: LocationId,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Create or replace progress for a location."""
    state = await upsert_progress(
        db,
        identity.id,
        location_id,
        progress_percentage=body.progress_percentage,
        completed=body.completed,
        last_position=body.last_position,
    )
    await db.commit()
    return envelope(ProgressState.model_validate(state), message="Progress updated successfully")


# ---------------------------------------------------------------------------
# Subscription & stats
# ---------------------------------------------------------------------------


@router.put("/subscription")
async def subscription(
    body: SubscriptionUpdateRequest,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Set subscription_type and is_premium."""
    user = await update_subscription(db, identity.id, body.subscription_type, body.is_premium)
    await db.commit()
    return envelope({"user": UserResponse.model_validate(user)}, message="Subscription updated successfully")


@router.get("/stats")
async def stats(
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Favorites count, progress aggregates and recent activity."""
    return envelope(UserStats.model_validate(await user_stats(db, identity.id)))
