"""
Quiz and quiz attempt schemas.
"""
from pydantic import Field
from typing import List, Optional
from datetime import datetime
from reporover.schemas.utils import CamelModel, RequiredStr, OptionalStr, StringList


class QuizResponse(CamelModel):
    """Quiz response schema."""
    id: int
    lesson_id: int
    question: str
    options: List[str]
    correct_answer: str
    explanation: Optional[str] = None
    difficulty: str
    xp_reward: int
    created_at: datetime


class CreateQuizRequest(CamelModel):
    """Request schema for creating a quiz. ``options`` may be a list or a JSON-encoded list."""
    lesson_id: int = Field(..., gt=0)
    question: RequiredStr
    options: StringList = Field(..., min_length=2)
    correct_answer: RequiredStr
    explanation: OptionalStr = None
    difficulty: RequiredStr
    xp_reward: int = Field(..., ge=0)


class UpdateQuizRequest(CamelModel):
    """Request schema for updating a quiz."""
    lesson_id: Optional[int] = Field(None, gt=0)
    question: Optional[RequiredStr] = None
    options: Optional[StringList] = Field(None, min_length=2)
    correct_answer: Optional[RequiredStr] = None
    explanation: OptionalStr = None
    difficulty: Optional[RequiredStr] = None
    xp_reward: Optional[int] = Field(None, ge=0)


class DeleteQuizResponse(CamelModel):
    message: str
    quiz: QuizResponse


class QuizAttemptResponse(CamelModel):
    """Quiz attempt response schema."""
    id: int
    user_id: int
    quiz_id: int
    user_answer: str
    is_correct: bool
    attempted_at: datetime
    created_at: datetime


class CreateQuizAttemptRequest(CamelModel):
    """
    Request schema for submitting an answer.

    Correctness is always computed on the server; an ``isCorrect`` sent by
    the client is ignored.
    """
    quiz_id: int = Field(..., gt=0)
    user_answer: RequiredStr


class QuizAttemptResultResponse(QuizAttemptResponse):
    """A stored attempt plus the progression it caused."""
    xp_awarded: int = Field(..., description="XP credited by this attempt (0 unless it is the first correct answer)")
    total_xp: int
    level: int
    unlocked_achievement_ids: List[int] = Field(default_factory=list)
