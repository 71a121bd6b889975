"""Request/response schemas for the location catalogue."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, StringConstraints

Category = Literal["Architecture", "Religion", "History", "Culture", "Nature"]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Duration = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]


class LocationCreate(BaseModel):
    """New location. Omitted optional fields take catalogue defaults."""

    name: Name
    description: str | None = Field(None, max_length=2000)
    category: Category = "Architecture"
    duration: Duration | None = None
    rating: float = Field(0.0, ge=0, le=5)
    listeners: int = Field(0, ge=0)
    is_premium: bool = False
    image_url: str | None = None
    audio_url: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class LocationReplace(BaseModel):
    """Full replacement of a location: every field must be sent, nullable ones may be null."""

    name: Name
    description: str | None = Field(..., max_length=2000)
    category: Category
    duration: Duration | None
    rating: float = Field(..., ge=0, le=5)
    listeners: int = Field(..., ge=0)
    is_premium: bool
    image_url: str | None
    audio_url: str | None
    latitude: float | None = Field(..., ge=-90, le=90)
    longitude: float | None = Field(..., ge=-180, le=180)


class LocationResponse(BaseModel):
    """A catalogue entry as returned by the API."""

    id: int
    name: str
    description: str | None = None
    category: str
    duration: str | None = None
    rating: float
    listeners: int
    is_premium: bool
    image_url: str | None = None
    audio_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class CategoryCount(BaseModel):
    category: str
    count: int


class LocationStats(BaseModel):
    """Catalogue overview."""

    total_locations: int
    premium_locations: int
    free_locations: int
    average_rating: float
    categories: list[CategoryCount]
