"""Default catalogue: four Istanbul landmarks inserted into an empty locations table."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from audiotour.db.models import Location, utcnow

logger = logging.getLogger(__name__)

LOCATION_SEED_DATA: list[dict] = [
    {
        "name": "Hagia Sophia",
        "description": "A masterpiece of Byzantine architecture that has served as both a cathedral and mosque...",
        "category": "Architecture",
        "duration": "8 min",
        "rating": 4.9,
        "listeners": 2100,
        "is_premium": False,
        "image_url": "https://images.unsplash.com/photo-1541432901042-2d8bd64b4a9b?w=800",
        "latitude": 41.0086,
        "longitude": 28.9802,
    },
    {
        "name": "Blue Mosque",
        "description": "The Sultan Ahmed Mosque, known as the Blue Mosque for its beautiful blue tiles...",
        "category": "Religion",
        "duration": "6 min",
        "rating": 4.8,
        "listeners": 1850,
        "is_premium": False,
        "image_url": "https://images.unsplash.com/photo-1524231757912-21f4fe3a7200?w=800",
        "latitude": 41.0054,
        "longitude": 28.9768,
    },
    {
        "name": "Topkapi Palace",
        "description": "Former residence of Ottoman sultans, now a museum showcasing imperial collections...",
        "category": "History",
        "duration": "12 min",
        "rating": 4.7,
        "listeners": 1650,
        "is_premium": True,
        "image_url": "https://images.unsplash.com/photo-1570939274717-7eda259b50ed?w=800",
        "latitude": 41.0115,
        "longitude": 28.9833,
    },
    {
        "name": "Galata Tower",
        "description": "A medieval stone tower offering panoramic views of Istanbul and the Golden Horn...",
        "category": "Architecture",
        "duration": "10 min",
        "rating": 4.7,
        "listeners": 1800,
        "is_premium": False,
        "image_url": "https://images.unsplash.com/photo-1524231757912-21f4fe3a7200?w=800",
        "latitude": 41.0256,
        "longitude": 28.9744,
    },
]


async def seed_locations(db: AsyncSession) -> int:
    """Insert the default locations if the table is empty. Returns number of rows inserted."""
    existing = (await db.execute(select(func.count(Location.id)))).scalar_one()
    if existing:
        return 0

    # Earlier entries get later timestamps so newest-first listing keeps the seed order
    base = utcnow()
    for offset, location_data in enumerate(LOCATION_SEED_DATA):
        stamp = base - timedelta(microseconds=offset)
        db.add(Location(**location_data, created_at=stamp, updated_at=stamp))

    await db.commit()
    logger.info("Seeded %d default locations", len(LOCATION_SEED_DATA))
    return len(LOCATION_SEED_DATA)
