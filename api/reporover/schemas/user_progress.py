"""
User progress schemas.
"""
from pydantic import Field, computed_field
from typing import Optional
from datetime import datetime, date
from reporover.schemas.utils import CamelModel
from reporover.services.progression_service import level_for_xp


class UserProgressResponse(CamelModel):
    """User progress response schema. ``level`` is derived from ``total_xp``."""
    id: int
    user_id: int
    total_xp: int
    streak_days: int
    last_active_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def level(self) -> int:
        return level_for_xp(self.total_xp)


class CreateUserProgressRequest(CamelModel):
    """Request schema for creating the caller's progress row."""
    total_xp: int = Field(0, ge=0)
    streak_days: int = Field(0, ge=0)
    last_active_date: Optional[date] = None


class UpdateUserProgressRequest(CamelModel):
    """Request schema for updating the caller's progress row. Level cannot be set directly."""
    total_xp: Optional[int] = Field(None, ge=0)
    streak_days: Optional[int] = Field(None, ge=0)
    last_active_date: Optional[date] = None


class DeleteUserProgressResponse(CamelModel):
    message: str
    user_progress: UserProgressResponse
