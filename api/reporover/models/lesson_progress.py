"""
LessonProgress model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from reporover.models.types import UTCDateTime, utc_now
from sqlalchemy import UniqueConstraint
from reporover.models.enums import LessonStatus

if TYPE_CHECKING:
    from reporover.models.lesson import Lesson


class LessonProgress(SQLModel, table=True):
    """LessonProgress table - one row per (user, lesson)."""
    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_progress_user_lesson"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    lesson_id: int = Field(foreign_key="lesson.id", index=True, ondelete="CASCADE")
    status: str = Field(default=LessonStatus.NOT_STARTED.value)  # not_started / in_progress / completed
    started_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    completed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    lesson: "Lesson" = Relationship(back_populates="progress_records")
