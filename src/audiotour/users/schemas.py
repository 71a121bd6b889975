"""Request/response schemas for per-user endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ProgressUpdateRequest(BaseModel):
    """Listening progress for one location."""

    progress_percentage: int = Field(..., ge=0, le=100)
    completed: bool = False
    last_position: int = Field(0, ge=0)


class SubscriptionUpdateRequest(BaseModel):
    """
    Subscription change.

    ``is_premium`` is stored as sent and is not derived from ``subscription_type``,
    so a client can store e.g. ``free`` with ``is_premium=true``.
    """

    subscription_type: Literal["free", "premium", "pro"]
    is_premium: bool


class FavoriteResponse(BaseModel):
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
    favorited_at: datetime


class ProgressResponse(BaseModel):
    """Progress row joined with a summary of its location."""

    id: int
    name: str
    category: str
    duration: str | None = None
    image_url: str | None = None
    progress_percentage: int
    completed: bool
    last_position: int
    updated_at: datetime


class ProgressState(BaseModel):
    """Stored progress after an upsert."""

    progress_percentage: int
    completed: bool
    last_position: int
    updated_at: datetime


class RecentActivity(BaseModel):
    name: str
    category: str
    progress_percentage: int
    completed: bool
    updated_at: datetime


class UserStats(BaseModel):
    favorites_count: int
    total_started: int
    completed_count: int
    average_progress: float
    recent_activity: list[RecentActivity]
