"""
Quizzes endpoint.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.models import Lesson, Quiz, User
from reporover.schemas.quiz import (
    QuizResponse,
    CreateQuizRequest,
    UpdateQuizRequest,
    DeleteQuizResponse
)
from reporover.services import record_service
from reporover.services.record_service import Pagination
from reporover.api.v1.endpoints.request_helpers import (
    get_current_user,
    get_pagination,
    parse_id,
    require_id
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["quizzes"])

REQUIRED_FIELDS = ("lesson_id", "question", "options", "correct_answer", "difficulty", "xp_reward")


@router.get("", response_model=Union[QuizResponse, List[QuizResponse]])
async def get_quizzes(
    id: Optional[str] = None,
    lesson_id: Optional[str] = Query(None, alias="lessonId"),
    search: Optional[str] = None,
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get one quiz by ``id`` or a list, newest first."""
    quiz_id = parse_id(id)
    if quiz_id is not None:
        quiz = record_service.get_or_404(session, Quiz, quiz_id, "QUIZ_NOT_FOUND", "Quiz")
        return QuizResponse.model_validate(quiz)

    query = select(Quiz)
    parsed_lesson_id = parse_id(lesson_id, "INVALID_LESSON_ID", "lessonId")
    if parsed_lesson_id is not None:
        query = query.where(Quiz.lesson_id == parsed_lesson_id)
    if search:
        query = query.where(Quiz.question.ilike(f"%{search}%"))

    query = query.order_by(Quiz.created_at.desc(), Quiz.id.desc())
    quizzes = session.exec(pagination.apply(query)).all()
    return [QuizResponse.model_validate(quiz) for quiz in quizzes]


@router.post("", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    request: CreateQuizRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Create a quiz for an existing lesson."""
    record_service.get_or_404(session, Lesson, request.lesson_id, "LESSON_NOT_FOUND", "Lesson")
    quiz = Quiz(**request.model_dump())
    record_service.save(session, quiz)
    logger.info(f"User {current_user.id} created quiz {quiz.id} for lesson {quiz.lesson_id}")
    return QuizResponse.model_validate(quiz)


@router.put("", response_model=QuizResponse)
async def update_quiz(
    request: UpdateQuizRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Update a quiz. Only provided fields change."""
    quiz = record_service.get_or_404(session, Quiz, require_id(id), "QUIZ_NOT_FOUND", "Quiz")
    changes = record_service.changed_fields(request, REQUIRED_FIELDS)
    if "lesson_id" in changes:
        record_service.get_or_404(session, Lesson, changes["lesson_id"], "LESSON_NOT_FOUND", "Lesson")
    if record_service.apply_changes(quiz, changes):
        record_service.save(session, quiz)
    return QuizResponse.model_validate(quiz)


@router.delete("", response_model=DeleteQuizResponse)
async def delete_quiz(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete a quiz together with its attempts."""
    quiz = record_service.get_or_404(session, Quiz, require_id(id), "QUIZ_NOT_FOUND", "Quiz")
    deleted = QuizResponse.model_validate(quiz)
    record_service.delete(session, quiz)
    logger.info(f"User {current_user.id} deleted quiz {deleted.id}")
    return DeleteQuizResponse(message="Quiz deleted successfully", quiz=deleted)
