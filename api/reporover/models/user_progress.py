"""
UserProgress model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, date
from reporover.models.types import UTCDateTime, utc_now


class UserProgress(SQLModel, table=True):
    """UserProgress table - per-user running totals.

    Level is not stored; it is derived from total_xp by
    ``progression_service.level_for_xp`` so the two can never drift.
    """
    __tablename__ = "user_progress"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True, ondelete="CASCADE")
    total_xp: int = Field(default=0)
    streak_days: int = Field(default=0)
    last_active_date: Optional[date] = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
