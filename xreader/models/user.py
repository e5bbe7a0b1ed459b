"""Pydantic model for normalized user profiles."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    """Normalized user profile."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    name: str
    description: str | None = None
    followers_count: int | None = None
    following_count: int | None = None
    is_blue_verified: bool | None = None
    profile_image_url: str | None = None
    created_at: str | None = None
