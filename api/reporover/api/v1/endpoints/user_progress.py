"""
User progress endpoint.

Each user has at most one progress row. ``level`` is never stored; responses
derive it from ``totalXp``.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.core.exceptions import ConflictError
from reporover.models import User, UserProgress
from reporover.models.types import utc_now
from reporover.schemas.user_progress import (
    UserProgressResponse,
    CreateUserProgressRequest,
    UpdateUserProgressRequest,
    DeleteUserProgressResponse
)
from reporover.services import record_service
from reporover.api.v1.endpoints.request_helpers import (
    check_user_filter,
    forbid_identity_in_body,
    get_current_user,
    parse_id,
    require_id
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user-progress", tags=["user-progress"])

REQUIRED_FIELDS = ("total_xp", "streak_days")


def _get_progress(session: Session, progress_id: int, user: User) -> UserProgress:
    return record_service.get_owned_or_404(
        session, UserProgress, progress_id, user.id, "USER_PROGRESS_NOT_FOUND", "User progress"
    )


@router.get("", response_model=Union[UserProgressResponse, List[UserProgressResponse]])
async def get_user_progress(
    id: Optional[str] = None,
    user_id: Optional[str] = Query(None, alias="userId"),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get the caller's progress row by ``id``, or a list holding the caller's row."""
    progress_id = parse_id(id)
    if progress_id is not None:
        return UserProgressResponse.model_validate(_get_progress(session, progress_id, current_user))

    check_user_filter(user_id, current_user)
    rows = session.exec(select(UserProgress).where(UserProgress.user_id == current_user.id)).all()
    return [UserProgressResponse.model_validate(row) for row in rows]


@router.post("", response_model=UserProgressResponse, status_code=status.HTTP_201_CREATED)
async def create_user_progress(
    request: CreateUserProgressRequest,
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Create the caller's progress row."""
    existing = session.exec(select(UserProgress).where(UserProgress.user_id == current_user.id)).first()
    if existing:
        raise ConflictError("User progress already exists", "USER_PROGRESS_EXISTS")

    progress = UserProgress(user_id=current_user.id, **request.model_dump())
    record_service.save(session, progress)
    return UserProgressResponse.model_validate(progress)


@router.put("", response_model=UserProgressResponse)
async def update_user_progress(
    request: UpdateUserProgressRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Update the caller's progress row. Only provided fields change."""
    progress = _get_progress(session, require_id(id), current_user)
    changes = record_service.changed_fields(request, REQUIRED_FIELDS)
    if record_service.apply_changes(progress, changes):
        progress.updated_at = utc_now()
        record_service.save(session, progress)
    return UserProgressResponse.model_validate(progress)


@router.delete("", response_model=DeleteUserProgressResponse)
async def delete_user_progress(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete the caller's progress row."""
    progress = _get_progress(session, require_id(id), current_user)
    deleted = UserProgressResponse.model_validate(progress)
    record_service.delete(session, progress)
    return DeleteUserProgressResponse(message="User progress deleted successfully", user_progress=deleted)
