"""
Lesson progress endpoints.

Progress rows are owned by the caller. Any transition to ``completed`` goes
through ``progression_service.complete_lesson`` so XP is credited exactly once
per (user, lesson).
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.core.exceptions import ConflictError, ValidationError
from reporover.models import Lesson, LessonProgress, LessonStatus, User
from reporover.models.types import utc_now
from reporover.schemas.lesson_progress import (
    LessonProgressResponse,
    CreateLessonProgressRequest,
    UpdateLessonProgressRequest,
    DeleteLessonProgressResponse,
    CompleteLessonRequest,
    CompleteLessonResponse
)
from reporover.services import record_service
from reporover.services.progression_service import complete_lesson, level_for_xp
from reporover.services.record_service import Pagination
from reporover.api.v1.endpoints.request_helpers import (
    check_user_filter,
    forbid_identity_in_body,
    get_current_user,
    get_pagination,
    parse_id,
    require_id
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lesson-progress", tags=["lesson-progress"])


def _parse_status(value: Optional[str]) -> Optional[LessonStatus]:
    if value is None:
        return None
    try:
        return LessonStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value}", "INVALID_STATUS")


def _get_progress_row(session: Session, progress_id: int, user: User) -> LessonProgress:
    return record_service.get_owned_or_404(
        session, LessonProgress, progress_id, user.id, "LESSON_PROGRESS_NOT_FOUND", "Lesson progress"
    )


@router.get("", response_model=Union[LessonProgressResponse, List[LessonProgressResponse]])
async def get_lesson_progress(
    id: Optional[str] = None,
    lesson_id: Optional[str] = Query(None, alias="lessonId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    user_id: Optional[str] = Query(None, alias="userId"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get one of the caller's progress rows by ``id`` or a filtered list."""
    progress_id = parse_id(id)
    if progress_id is not None:
        return LessonProgressResponse.model_validate(_get_progress_row(session, progress_id, current_user))

    check_user_filter(user_id, current_user)
    query = select(LessonProgress).where(LessonProgress.user_id == current_user.id)
    parsed_lesson_id = parse_id(lesson_id, "INVALID_LESSON_ID", "lessonId")
    if parsed_lesson_id is not None:
        query = query.where(LessonProgress.lesson_id == parsed_lesson_id)
    parsed_status = _parse_status(status_filter)
    if parsed_status is not None:
        query = query.where(LessonProgress.status == parsed_status.value)

    query = query.order_by(LessonProgress.updated_at.desc(), LessonProgress.id.desc())
    rows = session.exec(pagination.apply(query)).all()
    return [LessonProgressResponse.model_validate(row) for row in rows]


@router.post("/complete", response_model=CompleteLessonResponse)
async def complete_lesson_endpoint(
    request: CompleteLessonRequest,
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """
    Mark a lesson completed for the caller and credit its XP.

    Calling this again for the same lesson credits nothing and reports
    ``alreadyCompleted: true``.
    """
    result = complete_lesson(session, current_user.id, request.lesson_id)
    return CompleteLessonResponse(
        lesson_progress=LessonProgressResponse.model_validate(result.lesson_progress),
        xp_awarded=result.xp_awarded,
        already_completed=result.already_completed,
        total_xp=result.user_progress.total_xp,
        level=level_for_xp(result.user_progress.total_xp),
        unlocked_achievement_ids=[ua.achievement_id for ua in result.unlocked]
    )


@router.post("", response_model=LessonProgressResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson_progress(
    request: CreateLessonProgressRequest,
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Create the caller's progress row for a lesson."""
    record_service.get_or_404(session, Lesson, request.lesson_id, "LESSON_NOT_FOUND", "Lesson")
    existing = session.exec(
        select(LessonProgress).where(
            LessonProgress.user_id == current_user.id,
            LessonProgress.lesson_id == request.lesson_id
        )
    ).first()
    if existing:
        raise ConflictError("Progress for this lesson already exists", "LESSON_PROGRESS_EXISTS")

    if request.status == LessonStatus.COMPLETED:
        result = complete_lesson(
            session, current_user.id, request.lesson_id,
            started_at=request.started_at, completed_at=request.completed_at
        )
        return LessonProgressResponse.model_validate(result.lesson_progress)

    row = LessonProgress(
        user_id=current_user.id,
        lesson_id=request.lesson_id,
        status=request.status.value,
        started_at=request.started_at,
        completed_at=request.completed_at
    )
    record_service.save(session, row)
    return LessonProgressResponse.model_validate(row)


@router.put("", response_model=LessonProgressResponse)
async def update_lesson_progress(
    request: UpdateLessonProgressRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """
    Update the caller's progress row.

    A completed row stays completed; moving it to ``completed`` credits the
    lesson's XP.
    """
    row = _get_progress_row(session, require_id(id), current_user)
    changes = record_service.changed_fields(request, ("status",))
    new_status = changes.pop("status", None)
    was_completed = row.status == LessonStatus.COMPLETED.value

    if new_status is not None and was_completed and new_status != LessonStatus.COMPLETED:
        raise ValidationError("A completed lesson cannot change status", "INVALID_STATUS_TRANSITION")

    if new_status == LessonStatus.COMPLETED and not was_completed:
        result = complete_lesson(
            session, current_user.id, row.lesson_id,
            started_at=changes.get("started_at"), completed_at=changes.get("completed_at")
        )
        return LessonProgressResponse.model_validate(result.lesson_progress)

    if new_status is not None:
        changes["status"] = new_status.value
    if record_service.apply_changes(row, changes):
        row.updated_at = utc_now()
        record_service.save(session, row)
    return LessonProgressResponse.model_validate(row)


@router.delete("", response_model=DeleteLessonProgressResponse)
async def delete_lesson_progress(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete one of the caller's progress rows. Completed rows are permanent."""
    row = _get_progress_row(session, require_id(id), current_user)
    if row.status == LessonStatus.COMPLETED.value:
        raise ConflictError("Completed lesson progress cannot be deleted", "LESSON_COMPLETED")
    deleted = LessonProgressResponse.model_validate(row)
    record_service.delete(session, row)
    return DeleteLessonProgressResponse(message="Lesson progress deleted successfully", lesson_progress=deleted)
