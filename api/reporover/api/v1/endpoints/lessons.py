"""
Lessons endpoint.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.models import LearningPath, Lesson, User
from reporover.schemas.lesson import (
    LessonResponse,
    CreateLessonRequest,
    UpdateLessonRequest,
    DeleteLessonResponse
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

router = APIRouter(prefix="/lessons", tags=["lessons"])

REQUIRED_FIELDS = ("learning_path_id", "title", "difficulty", "xp_reward", "order_index", "estimated_minutes")


@router.get("", response_model=Union[LessonResponse, List[LessonResponse]])
async def get_lessons(
    id: Optional[str] = None,
    learning_path_id: Optional[str] = Query(None, alias="learningPathId"),
    search: Optional[str] = None,
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get one lesson by ``id`` or a list ordered by position within the path."""
    lesson_id = parse_id(id)
    if lesson_id is not None:
        lesson = record_service.get_or_404(session, Lesson, lesson_id, "LESSON_NOT_FOUND", "Lesson")
        return LessonResponse.model_validate(lesson)

    query = select(Lesson)
    path_id = parse_id(learning_path_id, "INVALID_LEARNING_PATH_ID", "learningPathId")
    if path_id is not None:
        query = query.where(Lesson.learning_path_id == path_id)
    if search:
        query = query.where(Lesson.title.ilike(f"%{search}%"))

    query = query.order_by(Lesson.order_index.asc(), Lesson.id)
    lessons = session.exec(pagination.apply(query)).all()
    return [LessonResponse.model_validate(lesson) for lesson in lessons]


@router.post("", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    request: CreateLessonRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Create a lesson inside an existing learning path."""
    record_service.get_or_404(session, LearningPath, request.learning_path_id, "LEARNING_PATH_NOT_FOUND", "Learning path")
    lesson = Lesson(**request.model_dump())
    record_service.save(session, lesson)
    logger.info(f"User {current_user.id} created lesson {lesson.id} in path {lesson.learning_path_id}")
    return LessonResponse.model_validate(lesson)


@router.put("", response_model=LessonResponse)
async def update_lesson(
    request: UpdateLessonRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Update a lesson. Moving it to another path requires that path to exist."""
    lesson = record_service.get_or_404(session, Lesson, require_id(id), "LESSON_NOT_FOUND", "Lesson")
    changes = record_service.changed_fields(request, REQUIRED_FIELDS)
    if "learning_path_id" in changes:
        record_service.get_or_404(session, LearningPath, changes["learning_path_id"], "LEARNING_PATH_NOT_FOUND", "Learning path")
    if record_service.apply_changes(lesson, changes):
        record_service.save(session, lesson)
    return LessonResponse.model_validate(lesson)


@router.delete("", response_model=DeleteLessonResponse)
async def delete_lesson(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete a lesson together with its quizzes and progress rows."""
    lesson = record_service.get_or_404(session, Lesson, require_id(id), "LESSON_NOT_FOUND", "Lesson")
    deleted = LessonResponse.model_validate(lesson)
    record_service.delete(session, lesson)
    logger.info(f"User {current_user.id} deleted lesson {deleted.id}")
    return DeleteLessonResponse(message="Lesson deleted successfully", lesson=deleted)
