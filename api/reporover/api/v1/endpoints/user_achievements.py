"""
User achievements endpoint.
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
from reporover.models import Achievement, User, UserAchievement
from reporover.models.types import utc_now
from reporover.schemas.achievement import (
    UserAchievementResponse,
    CreateUserAchievementRequest,
    UpdateUserAchievementRequest,
    DeleteUserAchievementResponse
)
from reporover.services import record_service
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

router = APIRouter(prefix="/user-achievements", tags=["user-achievements"])


def _get_user_achievement(session: Session, record_id: int, user: User) -> UserAchievement:
    return record_service.get_owned_or_404(
        session, UserAchievement, record_id, user.id, "USER_ACHIEVEMENT_NOT_FOUND", "User achievement"
    )


@router.get("", response_model=Union[UserAchievementResponse, List[UserAchievementResponse]])
async def get_user_achievements(
    id: Optional[str] = None,
    achievement_id: Optional[str] = Query(None, alias="achievementId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get one of the caller's unlocked achievements by ``id`` or a list, most recent first."""
    record_id = parse_id(id)
    if record_id is not None:
        return UserAchievementResponse.model_validate(_get_user_achievement(session, record_id, current_user))

    check_user_filter(user_id, current_user)
    query = select(UserAchievement).where(UserAchievement.user_id == current_user.id)
    parsed_achievement_id = parse_id(achievement_id, "INVALID_ACHIEVEMENT_ID", "achievementId")
    if parsed_achievement_id is not None:
        query = query.where(UserAchievement.achievement_id == parsed_achievement_id)

    query = query.order_by(UserAchievement.earned_at.desc(), UserAchievement.id.desc())
    records = session.exec(pagination.apply(query)).all()
    return [UserAchievementResponse.model_validate(record) for record in records]


@router.post("", response_model=UserAchievementResponse, status_code=status.HTTP_201_CREATED)
async def create_user_achievement(
    request: CreateUserAchievementRequest,
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Record an unlocked achievement for the caller."""
    record_service.get_or_404(session, Achievement, request.achievement_id, "ACHIEVEMENT_NOT_FOUND", "Achievement")
    existing = session.exec(
        select(UserAchievement).where(
            UserAchievement.user_id == current_user.id,
            UserAchievement.achievement_id == request.achievement_id
        )
    ).first()
    if existing:
        raise ConflictError("Achievement already unlocked", "ACHIEVEMENT_ALREADY_UNLOCKED")

    now = utc_now()
    record = UserAchievement(
        user_id=current_user.id,
        achievement_id=request.achievement_id,
        earned_at=now,
        created_at=now
    )
    record_service.save(session, record)
    logger.info(f"User {current_user.id} recorded achievement {record.achievement_id}")
    return UserAchievementResponse.model_validate(record)


@router.put("", response_model=UserAchievementResponse)
async def update_user_achievement(
    request: UpdateUserAchievementRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Update when an achievement was earned."""
    record = _get_user_achievement(session, require_id(id), current_user)
    changes = record_service.changed_fields(request, ("earned_at",))
    if record_service.apply_changes(record, changes):
        record_service.save(session, record)
    return UserAchievementResponse.model_validate(record)


@router.delete("", response_model=DeleteUserAchievementResponse)
async def delete_user_achievement(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete one of the caller's unlocked achievements."""
    record = _get_user_achievement(session, require_id(id), current_user)
    deleted = UserAchievementResponse.model_validate(record)
    record_service.delete(session, record)
    return DeleteUserAchievementResponse(message="User achievement deleted successfully", user_achievement=deleted)
