"""
AI explanation and quiz generation schemas.
"""
from pydantic import Field, model_validator
from typing import List, Optional
from datetime import datetime
from reporover.schemas.utils import CamelModel, OptionalStr, RequiredStr


class ExplainCodeRequest(CamelModel):
    code: OptionalStr = None
    language: OptionalStr = None
    question: OptionalStr = None


class ExplainCodeResponse(CamelModel):
    explanation: str
    language: Optional[str] = None
    timestamp: datetime


class AIStatusResponse(CamelModel):
    status: str
    model: str
    features: List[str]


class GenerateQuizRequest(CamelModel):
    """Either ``code`` or ``topic`` must be provided; code takes precedence."""
    code: OptionalStr = None
    topic: OptionalStr = None
    language: OptionalStr = None
    difficulty: str = "medium"


class GeneratedQuestion(CamelModel):
    """One multiple-choice question as returned by the provider."""
    question: RequiredStr
    options: List[str] = Field(..., min_length=4, max_length=4)
    correct_answer: int = Field(..., ge=0)
    explanation: str = ""

    @model_validator(mode="after")
    def check_answer_index(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correctAnswer must index into options")
        return self


class QuizMetadata(CamelModel):
    topic: str
    difficulty: str
    generated_at: datetime


class GenerateQuizResponse(CamelModel):
    questions: List[GeneratedQuestion]
    metadata: QuizMetadata
