"""
LearningPath model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from reporover.models.types import UTCDateTime, utc_now

if TYPE_CHECKING:
    from reporover.models.lesson import Lesson


class LearningPath(SQLModel, table=True):
    """LearningPath table - ordered collection of lessons under one theme."""
    __tablename__ = "learning_path"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    difficulty: str  # beginner / intermediate / advanced, not enforced
    estimated_hours: int
    icon: Optional[str] = None  # Single emoji character
    order_index: int
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    lessons: List["Lesson"] = Relationship(
        back_populates="learning_path",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Lesson.order_index"},
    )
