"""
Quiz and QuizAttempt models.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from reporover.models.types import UTCDateTime, utc_now
from sqlalchemy import Column, JSON

if TYPE_CHECKING:
    from reporover.models.lesson import Lesson


class Quiz(SQLModel, table=True):
    """Quiz table - a multiple-choice question attached to a lesson."""
    __tablename__ = "quiz"

    id: Optional[int] = Field(default=None, primary_key=True)
    lesson_id: int = Field(foreign_key="lesson.id", index=True, ondelete="CASCADE")
    question: str
    options: List[str] = Field(sa_column=Column(JSON, nullable=False))  # Ordered answer options
    correct_answer: str
    explanation: Optional[str] = None
    difficulty: str
    xp_reward: int
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    lesson: "Lesson" = Relationship(back_populates="quizzes")
    attempts: List["QuizAttempt"] = Relationship(
        back_populates="quiz",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class QuizAttempt(SQLModel, table=True):
    """QuizAttempt table - append-only history of submitted answers."""
    __tablename__ = "quiz_attempt"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    quiz_id: int = Field(foreign_key="quiz.id", index=True, ondelete="CASCADE")
    user_answer: str
    is_correct: bool  # Computed server-side against Quiz.correct_answer
    attempted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Relationships
    quiz: "Quiz" = Relationship(back_populates="attempts")
