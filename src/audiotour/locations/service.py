"""Location catalogue business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, func, select

from audiotour.db.models import Location, utcnow
from audiotour.errors import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from audiotour.locations.schemas import LocationCreate, LocationReplace

logger = structlog.get_logger()


async def list_locations(
    db: AsyncSession,
    category: str | None = None,
    is_premium: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Location]:
    """
    Fetch a page of locations, newest first.

    Args:
        db: Database session.
        category: Optional exact category filter; empty means no filter.
        is_premium: Optional premium flag filter.
        limit: Max rows to return.
        offset: Rows to skip.
    """
    query = select(Location).order_by(Location.created_at.desc(), Location.id.desc())
    if category:
        query = query.where(Location.category == category)
    if is_premium is not None:
        query = query.where(Location.is_premium.is_(is_premium))

    result = await db.execute(query.limit(limit).offset(offset))
    return list(result.scalars().all())


async def get_location(db: AsyncSession, location_id: int) -> Location:
    """Fetch a location by ID or raise NotFoundError."""
    location = await db.get(Location, location_id)
    if location is None:
        raise NotFoundError("Location not found")
    return location


async def location_exists(db: AsyncSession, location_id: int) -> bool:
    result = await db.execute(select(Location.id).where(Location.id == location_id))
    return result.first() is not None


async def create_location(db: AsyncSession, data: LocationCreate, created_by: int) -> Location:
    """Insert a new location owned by ``created_by``."""
    location = Location(**data.model_dump(), created_by=created_by)
    db.add(location)
    await db.flush()
    logger.info("location_created", location_id=location.id, created_by=created_by)
    return location


async def replace_location(db: AsyncSession, location_id: int, data: LocationReplace) -> Location:
    """
    Overwrite every editable field of an existing location.

    Raises:
        NotFoundError: If the location does not exist.
    """
    location = await get_location(db, location_id)
    for field, value in data.model_dump().items():
        setattr(location, field, value)
    location.updated_at = utcnow()
    await db.flush()
    logger.info("location_updated", location_id=location_id)
    return location


async def delete_location(db: AsyncSession, location_id: int) -> None:
    """
    Delete a location. Favorites and progress rows go with it (ON DELETE CASCADE).

    Raises:
        NotFoundError: If the location does not exist.
    """
    result = await db.execute(delete(Location).where(Location.id == location_id))
    if result.rowcount == 0:
        raise NotFoundError("Location not found")
    logger.info("location_deleted", location_id=location_id)


async def location_stats(db: AsyncSession) -> dict[str, Any]:
    """
    Catalogue overview.

    A rating of 0 means "not rated yet", so those rows are left out of the
    average rather than pulling it down.
    """
    total = (await db.execute(select(func.count(Location.id)))).scalar_one()
    premium = (
        await db.execute(select(func.count(Location.id)).where(Location.is_premium.is_(True)))
    ).scalar_one()
    avg_rating = (
        await db.execute(select(func.avg(Location.rating)).where(Location.rating > 0))
    ).scalar_one()

    count = func.count(Location.id).label("count")
    categories = await db.execute(
        select(Location.category, count).group_by(Location.category).order_by(count.desc(), Location.category)
    )

    return {
        "total_locations": total,
        "premium_locations": premium,
        "free_locations": total - premium,
        "average_rating": round(float(avg_rating or 0), 1),
        "categories": [{"category": category, "count": n} for category, n in categories],
    }
