"""
Lesson model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from reporover.models.types import UTCDateTime, utc_now

if TYPE_CHECKING:
    from reporover.models.learning_path import LearningPath
    from reporover.models.quiz import Quiz
    from reporover.models.lesson_progress import LessonProgress


class Lesson(SQLModel, table=True):
    """Lesson table - one unit of content inside a learning path."""
    __tablename__ = "lesson"

    id: Optional[int] = Field(default=None, primary_key=True)
    learning_path_id: int = Field(foreign_key="learning_path.id", index=True, ondelete="CASCADE")
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    difficulty: str
    xp_reward: int
    order_index: int
    estimated_minutes: int
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    learning_path: "LearningPath" = Relationship(back_populates="lessons")
    quizzes: List["Quiz"] = Relationship(
        back_populates="lesson",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    progress_records: List["LessonProgress"] = Relationship(
        back_populates="lesson",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
