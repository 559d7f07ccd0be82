"""
Quiz attempts endpoint.

Attempts are owned by the caller and graded on the server. They are
append-only: PUT and DELETE answer 405.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.core.exceptions import MethodNotAllowedError
from reporover.models import QuizAttempt, User
from reporover.schemas.quiz import (
    QuizAttemptResponse,
    QuizAttemptResultResponse,
    CreateQuizAttemptRequest
)
from reporover.services import record_service
from reporover.services.progression_service import level_for_xp, record_quiz_attempt
from reporover.services.record_service import Pagination
from reporover.api.v1.endpoints.request_helpers import (
    check_user_filter,
    forbid_identity_in_body,
    get_current_user,
    get_pagination,
    parse_id
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz-attempts", tags=["quiz-attempts"])


@router.get("", response_model=Union[QuizAttemptResponse, List[QuizAttemptResponse]])
async def get_quiz_attempts(
    id: Optional[str] = None,
    quiz_id: Optional[str] = Query(None, alias="quizId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get one of the caller's attempts by ``id`` or a list, newest first."""
    attempt_id = parse_id(id)
    if attempt_id is not None:
        attempt = record_service.get_owned_or_404(
            session, QuizAttempt, attempt_id, current_user.id, "QUIZ_ATTEMPT_NOT_FOUND", "Quiz attempt"
        )
        return QuizAttemptResponse.model_validate(attempt)

    check_user_filter(user_id, current_user)
    query = select(QuizAttempt).where(QuizAttempt.user_id == current_user.id)
    parsed_quiz_id = parse_id(quiz_id, "INVALID_QUIZ_ID", "quizId")
    if parsed_quiz_id is not None:
        query = query.where(QuizAttempt.quiz_id == parsed_quiz_id)

    query = query.order_by(QuizAttempt.attempted_at.desc(), QuizAttempt.id.desc())
    attempts = session.exec(pagination.apply(query)).all()
    return [QuizAttemptResponse.model_validate(attempt) for attempt in attempts]


@router.post("", response_model=QuizAttemptResultResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz_attempt(
    request: CreateQuizAttemptRequest,
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Submit an answer. The first correct answer to a quiz credits its XP."""
    result = record_quiz_attempt(session, current_user.id, request.quiz_id, request.user_answer)
    return QuizAttemptResultResponse(
        **QuizAttemptResponse.model_validate(result.attempt).model_dump(),
        xp_awarded=result.xp_awarded,
        total_xp=result.user_progress.total_xp,
        level=level_for_xp(result.user_progress.total_xp),
        unlocked_achievement_ids=[ua.achievement_id for ua in result.unlocked]
    )


@router.put("")
async def update_quiz_attempt(current_user: User = Depends(get_current_user)):
    """Attempts are history and cannot be changed."""
    raise MethodNotAllowedError("Quiz attempts cannot be modified", "QUIZ_ATTEMPT_IMMUTABLE")


@router.delete("")
async def delete_quiz_attempt(current_user: User = Depends(get_current_user)):
    """Attempts are history and cannot be deleted."""
    raise MethodNotAllowedError("Quiz attempts cannot be deleted", "QUIZ_ATTEMPT_IMMUTABLE")
