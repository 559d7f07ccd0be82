"""
Learning path schemas.
"""
from pydantic import Field
from typing import Optional
from datetime import datetime
from reporover.schemas.utils import CamelModel, RequiredStr, OptionalStr


class LearningPathResponse(CamelModel):
    """Learning path response schema."""
    id: int
    title: str
    description: Optional[str] = None
    difficulty: str
    estimated_hours: int
    icon: Optional[str] = None
    order_index: int
    created_at: datetime


class CreateLearningPathRequest(CamelModel):
    """Request schema for creating a learning path."""
    title: RequiredStr
    description: OptionalStr = None
    difficulty: RequiredStr  # beginner / intermediate / advanced by convention
    estimated_hours: int = Field(..., gt=0)
    icon: OptionalStr = None
    order_index: int = Field(..., ge=0)


class UpdateLearningPathRequest(CamelModel):
    """Request schema for updating a learning path. Only provided fields change."""
    title: Optional[RequiredStr] = None
    description: OptionalStr = None
    difficulty: Optional[RequiredStr] = None
    estimated_hours: Optional[int] = Field(None, gt=0)
    icon: OptionalStr = None
    order_index: Optional[int] = Field(None, ge=0)


class DeleteLearningPathResponse(CamelModel):
    message: str
    learning_path: LearningPathResponse
