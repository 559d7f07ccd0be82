"""
Achievement and user achievement schemas.
"""
from pydantic import Field
from typing import Dict, List, Optional
from datetime import datetime
from reporover.schemas.utils import CamelModel, RequiredStr, OptionalStr, UtcDatetime


class AchievementResponse(CamelModel):
    """Achievement response schema."""
    id: int
    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    xp_reward: int
    requirement_type: str
    requirement_value: int
    created_at: datetime


class CreateAchievementRequest(CamelModel):
    """Request schema for creating an achievement."""
    title: RequiredStr
    description: OptionalStr = None
    icon: OptionalStr = None
    xp_reward: int = Field(..., ge=0)
    requirement_type: RequiredStr
    requirement_value: int = Field(..., ge=0)


class UpdateAchievementRequest(CamelModel):
    """Request schema for updating an achievement."""
    title: Optional[RequiredStr] = None
    description: OptionalStr = None
    icon: OptionalStr = None
    xp_reward: Optional[int] = Field(None, ge=0)
    requirement_type: Optional[RequiredStr] = None
    requirement_value: Optional[int] = Field(None, ge=0)


class DeleteAchievementResponse(CamelModel):
    message: str
    achievement: AchievementResponse


class UserAchievementResponse(CamelModel):
    """User achievement response schema."""
    id: int
    user_id: int
    achievement_id: int
    earned_at: datetime
    created_at: datetime


class CreateUserAchievementRequest(CamelModel):
    """Request schema for recording an unlocked achievement for the caller."""
    achievement_id: int = Field(..., gt=0)


class UpdateUserAchievementRequest(CamelModel):
    earned_at: Optional[UtcDatetime] = None


class DeleteUserAchievementResponse(CamelModel):
    message: str
    user_achievement: UserAchievementResponse


class EvaluateAchievementsResponse(CamelModel):
    """Result of evaluating the caller's stats against every achievement."""
    unlocked: List[UserAchievementResponse]
    stats: Dict[str, int]
