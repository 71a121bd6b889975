"""Location catalogue router for all /api/locations* endpoints.

``/stats/overview`` is registered ahead of ``/{location_id}`` so the literal
path always wins the match.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from audiotour.auth.dependencies import get_admin_identity, get_optional_identity
from audiotour.auth.jwt import TokenClaims
from audiotour.database import get_session
from audiotour.locations.schemas import (
    LocationCreate,
    LocationReplace,
    LocationResponse,
    LocationStats,
)
from audiotour.locations.service import (
    create_location,
    delete_location,
    get_location,
    list_locations,
    location_stats,
    replace_location,
)
from audiotour.responses import envelope

router = APIRouter(prefix="/api/locations", tags=["Locations"])

LocationId = Annotated[int, Path(ge=1, description="Location ID")]

MAX_PAGE_SIZE = 100


@router.get("")
async def list_endpoint(
    category: str | None = Query(None),
    is_premium: bool | None = Query(None),
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
    _identity: TokenClaims | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """List locations, newest first, with optional category / premium filters."""
    limit = min(limit, MAX_PAGE_SIZE)
    rows = await list_locations(db, category=category, is_premium=is_premium, limit=limit, offset=offset)
    data = [LocationResponse.model_validate(row) for row in rows]
    return envelope(data, total=len(data), limit=limit, offset=offset)


@router.get("/stats/overview")
async def stats_overview(
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Catalogue counts, category distribution, and average rating."""
    stats = await location_stats(db)
    return envelope(LocationStats.model_validate(stats))


@router.get("/{location_id}")
async def get_endpoint(
    location_id: LocationId,
    _identity: TokenClaims | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Get a single location."""
    location = await get_location(db, location_id)
    return envelope(LocationResponse.model_validate(location))


@router.post("", status_code=201)
async def create_endpoint(
    body: LocationCreate,
    identity: TokenClaims = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Create a location."""
    location = await create_location(db, body, created_by=identity.id)
    await db.commit()
    return envelope(LocationResponse.model_validate(location), message="Location created successfully")


@router.put("/{location_id}")
async def replace_endpoint(
    body: LocationReplace,
    location_id: LocationId,
    _identity: TokenClaims = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Replace every field of a location."""
    location = await replace_location(db, location_id, body)
    await db.commit()
    return envelope(LocationResponse.model_validate(location), message="Location updated successfully")


@router.delete("/{location_id}")
async def delete_endpoint(
    location_id: LocationId,
    _identity: TokenClaims = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Delete a location along with its favorites and progress rows."""
    await delete_location(db, location_id)
    await db.commit()
    return envelope(message="Location deleted successfully")
