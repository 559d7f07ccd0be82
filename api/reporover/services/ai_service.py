"""
AI tutoring: code explanations and generated practice quizzes.

Nothing generated here is persisted.
"""
import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from reporover.core.config import settings
from reporover.core.exceptions import GenerationFailedError, ValidationError
from reporover.models.types import utc_now
from reporover.schemas.ai import (
    AIStatusResponse,
    ExplainCodeResponse,
    GeneratedQuestion,
    GenerateQuizResponse,
    QuizMetadata,
)
from reporover.services import llm_service, prompt_service

logger = logging.getLogger(__name__)

AI_FEATURES = ["code-explanation", "question-answering", "concept-breakdown"]


def get_status() -> AIStatusResponse:
    return AIStatusResponse(
        status="ready" if llm_service.is_configured() else "unconfigured",
        model=settings.gemini_model,
        features=AI_FEATURES,
    )


def explain_code(code: Optional[str], language: Optional[str] = None, question: Optional[str] = None) -> ExplainCodeResponse:
    """
    Ask the model to explain a code snippet.

    Raises:
        ValidationError: If no code is given
        ConfigurationError: If the AI provider is not configured
        UpstreamError: If the provider call fails
    """
    if not code:
        raise ValidationError("Code is required", "MISSING_CODE")

    prompt = prompt_service.generate_explain_prompt(code, language, question)
    explanation, _ = llm_service.call_gemini_text(prompt)
    return ExplainCodeResponse(
        explanation=explanation,
        language=language,
        timestamp=utc_now(),
    )


def parse_quiz_questions(text: str, count: int = prompt_service.QUIZ_QUESTION_COUNT) -> List[GeneratedQuestion]:
    """
    Parse model output into exactly ``count`` validated questions.

    Extra questions are dropped.

    Raises:
        GenerationFailedError: If the output holds fewer than ``count`` valid questions
    """
    raw: Any = llm_service.extract_json_array(text)
    if len(raw) < count:
        raise GenerationFailedError(f"Expected {count} questions, got {len(raw)}")

    try:
        questions = [GeneratedQuestion.model_validate(item) for item in raw[:count]]
    except PydanticValidationError as e:
        logger.error(f"AI quiz questions failed validation: {e}")
        raise GenerationFailedError("AI returned malformed quiz questions") from e
    return questions


def generate_quiz(
    code: Optional[str] = None,
    topic: Optional[str] = None,
    language: Optional[str] = None,
    difficulty: str = "medium"
) -> GenerateQuizResponse:
    """
    Generate a practice quiz about code or a topic.

    Raises:
        ValidationError: If neither code nor topic is given
        ConfigurationError: If the AI provider is not configured
        UpstreamError: If the provider call fails
        GenerationFailedError: If the provider output cannot be parsed
    """
    if not code and not topic:
        raise ValidationError("Either code or topic is required", "MISSING_INPUT")

    prompt = prompt_service.generate_quiz_prompt(code, topic, language, difficulty)
    text, _ = llm_service.call_gemini_text(prompt)
    questions = parse_quiz_questions(text)

    metadata_topic = topic or f"{language or 'code'} code analysis"
    logger.info(f"Generated {len(questions)} quiz questions for '{metadata_topic}'")
    return GenerateQuizResponse(
        questions=questions,
        metadata=QuizMetadata(
            topic=metadata_topic,
            difficulty=difficulty,
            generated_at=utc_now(),
        ),
    )
