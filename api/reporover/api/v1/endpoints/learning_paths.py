"""
Learning paths endpoint.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select, or_
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.models import LearningPath, User
from reporover.schemas.learning_path import (
    LearningPathResponse,
    CreateLearningPathRequest,
    UpdateLearningPathRequest,
    DeleteLearningPathResponse
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

router = APIRouter(prefix="/learning-paths", tags=["learning-paths"])

SORT_COLUMNS = {
    "orderIndex": LearningPath.order_index,
    "createdAt": LearningPath.created_at,
    "title": LearningPath.title,
    "difficulty": LearningPath.difficulty,
    "estimatedHours": LearningPath.estimated_hours,
}

REQUIRED_FIELDS = ("title", "difficulty", "estimated_hours", "order_index")


@router.get("", response_model=Union[LearningPathResponse, List[LearningPathResponse]])
async def get_learning_paths(
    id: Optional[str] = None,
    search: Optional[str] = None,
    difficulty: Optional[str] = None,
    sort: str = "orderIndex",
    order: str = "asc",
    pagination: Pagination = Depends(get_pagination),
    session: Session = Depends(get_session)
):
    """
    Get one learning path by ``id`` or a filtered list.

    Lists are sorted by ``sort`` (orderIndex, createdAt, title, difficulty,
    estimatedHours; unknown values fall back to orderIndex) in ``order``.
    """
    path_id = parse_id(id)
    if path_id is not None:
        path = record_service.get_or_404(session, LearningPath, path_id, "LEARNING_PATH_NOT_FOUND", "Learning path")
        return LearningPathResponse.model_validate(path)

    query = select(LearningPath)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(LearningPath.title.ilike(pattern), LearningPath.description.ilike(pattern)))
    if difficulty:
        query = query.where(LearningPath.difficulty == difficulty)

    column = SORT_COLUMNS.get(sort, LearningPath.order_index)
    query = query.order_by(column.desc() if order == "desc" else column.asc(), LearningPath.id)
    paths = session.exec(pagination.apply(query)).all()
    return [LearningPathResponse.model_validate(path) for path in paths]


@router.post("", response_model=LearningPathResponse, status_code=status.HTTP_201_CREATED)
async def create_learning_path(
    request: CreateLearningPathRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Create a new learning path."""
    path = LearningPath(**request.model_dump())
    record_service.save(session, path)
    logger.info(f"User {current_user.id} created learning path {path.id}")
    return LearningPathResponse.model_validate(path)


@router.put("", response_model=LearningPathResponse)
async def update_learning_path(
    request: UpdateLearningPathRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Update a learning path. Only provided fields change."""
    path = record_service.get_or_404(session, LearningPath, require_id(id), "LEARNING_PATH_NOT_FOUND", "Learning path")
    changes = record_service.changed_fields(request, REQUIRED_FIELDS)
    if record_service.apply_changes(path, changes):
        record_service.save(session, path)
    return LearningPathResponse.model_validate(path)


@router.delete("", response_model=DeleteLearningPathResponse)
async def delete_learning_path(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete a learning path together with its lessons and their quizzes."""
    path = record_service.get_or_404(session, LearningPath, require_id(id), "LEARNING_PATH_NOT_FOUND", "Learning path")
    deleted = LearningPathResponse.model_validate(path)
    record_service.delete(session, path)
    logger.info(f"User {current_user.id} deleted learning path {deleted.id}")
    return DeleteLearningPathResponse(message="Learning path deleted successfully", learning_path=deleted)
