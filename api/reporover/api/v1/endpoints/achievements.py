"""
Achievements endpoint.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select, or_
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.models import Achievement, User
from reporover.schemas.achievement import (
    AchievementResponse,
    CreateAchievementRequest,
    UpdateAchievementRequest,
    DeleteAchievementResponse,
    EvaluateAchievementsResponse,
    UserAchievementResponse
)
from reporover.services import record_service
from reporover.services.progression_service import evaluate_achievements
from reporover.services.record_service import Pagination
from reporover.api.v1.endpoints.request_helpers import (
    get_current_user,
    get_pagination,
    parse_id,
    require_id
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/achievements", tags=["achievements"])

REQUIRED_FIELDS = ("title", "xp_reward", "requirement_type", "requirement_value")


@router.get("", response_model=Union[AchievementResponse, List[AchievementResponse]])
async def get_achievements(
    id: Optional[str] = None,
    search: Optional[str] = None,
    requirement_type: Optional[str] = Query(None, alias="requirementType"),
    pagination: Pagination = Depends(get_pagination),
    session: Session = Depends(get_session)
):
    """Get one achievement by ``id`` or a list, newest first."""
    achievement_id = parse_id(id)
    if achievement_id is not None:
        achievement = record_service.get_or_404(session, Achievement, achievement_id, "ACHIEVEMENT_NOT_FOUND", "Achievement")
        return AchievementResponse.model_validate(achievement)

    query = select(Achievement)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Achievement.title.ilike(pattern), Achievement.description.ilike(pattern)))
    if requirement_type:
        query = query.where(Achievement.requirement_type == requirement_type)

    query = query.order_by(Achievement.created_at.desc(), Achievement.id.desc())
    achievements = session.exec(pagination.apply(query)).all()
    return [AchievementResponse.model_validate(achievement) for achievement in achievements]


@router.post("/evaluate", response_model=EvaluateAchievementsResponse)
async def evaluate_user_achievements(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Unlock every achievement the caller's current stats have reached."""
    evaluation = evaluate_achievements(session, current_user.id)
    return EvaluateAchievementsResponse(
        unlocked=[UserAchievementResponse.model_validate(ua) for ua in evaluation.unlocked],
        stats=evaluation.stats
    )


@router.post("", response_model=AchievementResponse, status_code=status.HTTP_201_CREATED)
async def create_achievement(
    request: CreateAchievementRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Create a new achievement definition."""
    achievement = Achievement(**request.model_dump())
    record_service.save(session, achievement)
    logger.info(f"User {current_user.id} created achievement {achievement.id}")
    return AchievementResponse.model_validate(achievement)


@router.put("", response_model=AchievementResponse)
async def update_achievement(
    request: UpdateAchievementRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Update an achievement definition. Existing unlocks are kept."""
    achievement = record_service.get_or_404(session, Achievement, require_id(id), "ACHIEVEMENT_NOT_FOUND", "Achievement")
    changes = record_service.changed_fields(request, REQUIRED_FIELDS)
    if record_service.apply_changes(achievement, changes):
        record_service.save(session, achievement)
    return AchievementResponse.model_validate(achievement)


@router.delete("", response_model=DeleteAchievementResponse)
async def delete_achievement(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete an achievement definition together with its unlocks."""
    achievement = record_service.get_or_404(session, Achievement, require_id(id), "ACHIEVEMENT_NOT_FOUND", "Achievement")
    deleted = AchievementResponse.model_validate(achievement)
    record_service.delete(session, achievement)
    logger.info(f"User {current_user.id} deleted achievement {deleted.id}")
    return DeleteAchievementResponse(message="Achievement deleted successfully", achievement=deleted)
