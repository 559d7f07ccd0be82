"""
Lesson schemas.
"""
from pydantic import Field
from typing import Optional
from datetime import datetime
from reporover.schemas.utils import CamelModel, RequiredStr, OptionalStr


class LessonResponse(CamelModel):
    """Lesson response schema."""
    id: int
    learning_path_id: int
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    difficulty: str
    xp_reward: int
    order_index: int
    estimated_minutes: int
    created_at: datetime


class CreateLessonRequest(CamelModel):
    """Request schema for creating a lesson."""
    learning_path_id: int = Field(..., gt=0)
    title: RequiredStr
    description: OptionalStr = None
    content: Optional[str] = None
    difficulty: RequiredStr
    xp_reward: int = Field(..., ge=0)
    order_index: int = Field(..., ge=0)
    estimated_minutes: int = Field(..., gt=0)


class UpdateLessonRequest(CamelModel):
    """Request schema for updating a lesson."""
    learning_path_id: Optional[int] = Field(None, gt=0)
    title: Optional[RequiredStr] = None
    description: OptionalStr = None
    content: Optional[str] = None
    difficulty: Optional[RequiredStr] = None
    xp_reward: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    estimated_minutes: Optional[int] = Field(None, gt=0)


class DeleteLessonResponse(CamelModel):
    message: str
    lesson: LessonResponse
