"""
Per-user state: favorites, listening progress, subscription, stats.

Progress writes are a single ``INSERT ... ON CONFLICT DO UPDATE`` so concurrent
updates for the same (user, location) pair can never produce a second row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import case, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from audiotour.auth.service import require_user
from audiotour.db.models import Location, User, UserFavorite, UserProgress, utcnow
from audiotour.errors import ConflictError, NotFoundError
from audiotour.locations.service import location_exists

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

RECENT_ACTIVITY_LIMIT = 5


async def _require_location(db: AsyncSession, location_id: int) -> None:
    if not await location_exists(db, location_id):
        raise NotFoundError("Location not found")


async def _require_references(db: AsyncSession, user_id: int, location_id: int) -> None:
    """Re-check both parents after an integrity failure; a missing one is a 404, not a conflict."""
    await _require_location(db, location_id)
    await require_user(db, user_id)


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


async def list_favorites(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """Favorited locations, most recently favorited first."""
    result = await db.execute(
        select(Location, UserFavorite.created_at.label("favorited_at"))
        .join(UserFavorite, UserFavorite.location_id == Location.id)
        .where(UserFavorite.user_id == user_id)
        .order_by(UserFavorite.created_at.desc(), UserFavorite.id.desc())
    )
    return [
        {
            "id": location.id,
            "name": location.name,
            "description": location.description,
            "category": location.category,
            "duration": location.duration,
            "rating": location.rating,
            "listeners": location.listeners,
            "is_premium": location.is_premium,
            "image_url": location.image_url,
            "audio_url": location.audio_url,
            "latitude": location.latitude,
            "longitude": location.longitude,
            "favorited_at": favorited_at,
        }
        for location, favorited_at in result.all()
    ]


async def add_favorite(db: AsyncSession, user_id: int, location_id: int) -> None:
    """
    Favorite a location.

    Raises:
        NotFoundError: If the location (or user) does not exist.
        ConflictError: If it is already a favorite.
    """
    await _require_location(db, location_id)

    existing = await db.execute(
        select(UserFavorite.id)
        .where(UserFavorite.user_id == user_id)
        .where(UserFavorite.location_id == location_id)
    )
    if existing.first() is not None:
        raise ConflictError("Location already in favorites")

    db.add(UserFavorite(user_id=user_id, location_id=location_id))
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        # FK violation if the location was deleted after the check above
        await _require_references(db, user_id, location_id)
        # Otherwise lost a race with an identical request
        raise ConflictError("Location already in favorites") from e
    logger.info("favorite_added", user_id=user_id, location_id=location_id)


async def remove_favorite(db: AsyncSession, user_id: int, location_id: int) -> None:
    """
    Remove a favorite.

    Raises:
        NotFoundError: If the location was not a favorite.
    """
    result = await db.execute(
        delete(UserFavorite)
        .where(UserFavorite.user_id == user_id)
        .where(UserFavorite.location_id == location_id)
    )
    if result.rowcount == 0:
        raise NotFoundError("Favorite not found")
    logger.info("favorite_removed", user_id=user_id, location_id=location_id)


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


async def list_progress(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """Progress rows with a location summary, most recently updated first."""
    result = await db.execute(
        select(
            Location.id,
            Location.name,
            Location.category,
            Location.duration,
            Location.image_url,
            UserProgress.progress_percentage,
            UserProgress.completed,
            UserProgress.last_position,
            UserProgress.updated_at,
        )
        .join(UserProgress, UserProgress.location_id == Location.id)
        .where(UserProgress.user_id == user_id)
        .order_by(UserProgress.updated_at.desc(), UserProgress.id.desc())
    )
    return [dict(row._mapping) for row in result]


def _insert_for(db: AsyncSession):  # noqa: ANN202
    """Dialect-specific INSERT construct that supports ON CONFLICT."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def upsert_progress(
    db: AsyncSession,
    user_id: int,
    location_id: int,
    progress_percentage: int,
    completed: bool = False,
    last_position: int = 0,
) -> dict[str, Any]:
    """
    Create or replace the progress row for (user, location) in one statement.

    Raises:
        NotFoundError: If the location does not exist.
    """
    await _require_location(db, location_id)

    now = utcnow()
    insert = _insert_for(db)
    stmt = insert(UserProgress).values(
        user_id=user_id,
        location_id=location_id,
        progress_percentage=progress_percentage,
        completed=completed,
        last_position=last_position,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "location_id"],
        set_={
            "progress_percentage": stmt.excluded.progress_percentage,
            "completed": stmt.excluded.completed,
            "last_position": stmt.excluded.last_position,
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(
        UserProgress.progress_percentage,
        UserProgress.completed,
        UserProgress.last_position,
        UserProgress.updated_at,
    )
    try:
        result = await db.execute(stmt)
    except IntegrityError:
        await db.rollback()
        await _require_references(db, user_id, location_id)
        raise
    row = result.one()
    logger.info(
        "progress_upserted",
        user_id=user_id,
        location_id=location_id,
        progress_percentage=progress_percentage,
        completed=completed,
    )
    return dict(row._mapping)


# ---------------------------------------------------------------------------
# Subscription
# ---------------------------------------------------------------------------


async def update_subscription(
    db: AsyncSession,
    user_id: int,
    subscription_type: str,
    is_premium: bool,
) -> User:
    """Store subscription_type and is_premium exactly as given."""
    user = await require_user(db, user_id)
    user.subscription_type = subscription_type
    user.is_premium = is_premium
    user.updated_at = utcnow()
    await db.flush()
    logger.info(
        "subscription_updated",
        user_id=user_id,
        subscription_type=subscription_type,
        is_premium=is_premium,
    )
    return user


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


async def user_stats(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Favorites count, progress aggregates, and the most recent activity."""
    favorites_count = (
        await db.execute(select(func.count(UserFavorite.id)).where(UserFavorite.user_id == user_id))
    ).scalar_one()

    progress = (
        await db.execute(
            select(
                func.count(UserProgress.id),
                func.count(case((UserProgress.completed.is_(True), 1))),
                func.avg(UserProgress.progress_percentage),
            ).where(UserProgress.user_id == user_id)
        )
    ).one()
    total_started, completed_count, avg_progress = progress

    recent = await db.execute(
        select(
            Location.name,
            Location.category,
            UserProgress.progress_percentage,
            UserProgress.completed,
            UserProgress.updated_at,
        )
        .join(Location, UserProgress.location_id == Location.id)
        .where(UserProgress.user_id == user_id)
        .order_by(UserProgress.updated_at.desc(), UserProgress.id.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    )

    return {
        "favorites_count": favorites_count,
        "total_started": total_started or 0,
        "completed_count": completed_count or 0,
        "average_progress": round(float(avg_progress or 0), 1),
        "recent_activity": [dict(row._mapping) for row in recent],
    }
