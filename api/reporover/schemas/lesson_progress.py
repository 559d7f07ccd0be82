"""
Lesson progress schemas.
"""
from pydantic import Field
from typing import List, Optional
from datetime import datetime
from reporover.models.enums import LessonStatus
from reporover.schemas.utils import CamelModel, UtcDatetime


class LessonProgressResponse(CamelModel):
    """Lesson progress response schema."""
    id: int
    user_id: int
    lesson_id: int
    status: LessonStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class CreateLessonProgressRequest(CamelModel):
    """Request schema for creating a progress row for the caller."""
    lesson_id: int = Field(..., gt=0)
    status: LessonStatus
    started_at: Optional[UtcDatetime] = None
    completed_at: Optional[UtcDatetime] = None


class UpdateLessonProgressRequest(CamelModel):
    """Request schema for updating a progress row. Only provided fields change."""
    status: Optional[LessonStatus] = None
    started_at: Optional[UtcDatetime] = None
    completed_at: Optional[UtcDatetime] = None


class DeleteLessonProgressResponse(CamelModel):
    message: str
    lesson_progress: LessonProgressResponse


class CompleteLessonRequest(CamelModel):
    """Request to mark a lesson completed for the caller."""
    lesson_id: int = Field(..., gt=0)


class CompleteLessonResponse(CamelModel):
    """Result of a lesson completion."""
    lesson_progress: LessonProgressResponse
    xp_awarded: int = Field(..., description="XP credited by this call (0 on repeat completion)")
    already_completed: bool
    total_xp: int
    level: int
    unlocked_achievement_ids: List[int] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "lessonProgress": {
                    "id": 1,
                    "userId": 1,
                    "lessonId": 3,
                    "status": "completed",
                    "startedAt": "2024-01-01T10:00:00",
                    "completedAt": "2024-01-01T10:20:00",
                    "createdAt": "2024-01-01T10:00:00",
                    "updatedAt": "2024-01-01T10:20:00"
                },
                "xpAwarded": 50,
                "alreadyCompleted": False,
                "totalXp": 150,
                "level": 2,
                "unlockedAchievementIds": [1]
            }
        }
