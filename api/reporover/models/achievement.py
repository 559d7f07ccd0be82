"""
Achievement and UserAchievement models.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
from reporover.models.types import UTCDateTime, utc_now
from sqlalchemy import UniqueConstraint


class Achievement(SQLModel, table=True):
    """Achievement table - static reward definitions."""
    __tablename__ = "achievement"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    xp_reward: int
    requirement_type: str = Field(index=True)  # See RequirementType
    requirement_value: int  # Threshold the user's stat must reach
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    user_achievements: List["UserAchievement"] = Relationship(
        back_populates="achievement",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

class UserAchievement(SQLModel, table=True):
    """UserAchievement junction table - achievements a user has unlocked."""
    __tablename__ = "user_achievement"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement_user_achievement"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    achievement_id: int = Field(foreign_key="achievement.id", index=True, ondelete="CASCADE")
    earned_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    achievement: "Achievement" = Relationship(back_populates="user_achievements")
