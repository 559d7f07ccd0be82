"""
Saved repositories endpoint.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select, or_
from typing import List, Optional, Union
import logging

from reporover.core.database import get_session
from reporover.models import Repository, User
from reporover.schemas.repository import (
    RepositoryResponse,
    CreateRepositoryRequest,
    UpdateRepositoryRequest,
    DeleteRepositoryResponse
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

router = APIRouter(prefix="/repositories", tags=["repositories"])

REQUIRED_FIELDS = ("github_url", "repo_name", "stars")


def _get_repository(session: Session, repository_id: int, user: User) -> Repository:
    return record_service.get_owned_or_404(
        session, Repository, repository_id, user.id, "REPOSITORY_NOT_FOUND", "Repository"
    )


@router.get("", response_model=Union[RepositoryResponse, List[RepositoryResponse]])
async def get_repositories(
    id: Optional[str] = None,
    search: Optional[str] = None,
    language: Optional[str] = None,
    user_id: Optional[str] = Query(None, alias="userId"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get one of the caller's saved repositories by ``id`` or a list, newest first."""
    repository_id = parse_id(id)
    if repository_id is not None:
        return RepositoryResponse.model_validate(_get_repository(session, repository_id, current_user))

    check_user_filter(user_id, current_user)
    query = select(Repository).where(Repository.user_id == current_user.id)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Repository.repo_name.ilike(pattern), Repository.description.ilike(pattern)))
    if language:
        query = query.where(Repository.language == language)

    query = query.order_by(Repository.created_at.desc(), Repository.id.desc())
    repositories = session.exec(pagination.apply(query)).all()
    return [RepositoryResponse.model_validate(repository) for repository in repositories]


@router.post("", response_model=RepositoryResponse, status_code=status.HTTP_201_CREATED)
async def create_repository(
    request: CreateRepositoryRequest,
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Save an analysis result for the caller."""
    repository = Repository(user_id=current_user.id, **request.model_dump())
    record_service.save(session, repository)
    logger.info(f"User {current_user.id} saved repository {repository.repo_name} ({repository.id})")
    return RepositoryResponse.model_validate(repository)


@router.put("", response_model=RepositoryResponse)
async def update_repository(
    request: UpdateRepositoryRequest,
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    _: None = Depends(forbid_identity_in_body),
    session: Session = Depends(get_session)
):
    """Update one of the caller's saved repositories."""
    repository = _get_repository(session, require_id(id), current_user)
    changes = record_service.changed_fields(request, REQUIRED_FIELDS)
    if record_service.apply_changes(repository, changes):
        record_service.save(session, repository)
    return RepositoryResponse.model_validate(repository)


@router.delete("", response_model=DeleteRepositoryResponse)
async def delete_repository(
    id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Delete one of the caller's saved repositories."""
    repository = _get_repository(session, require_id(id), current_user)
    deleted = RepositoryResponse.model_validate(repository)
    record_service.delete(session, repository)
    return DeleteRepositoryResponse(message="Repository deleted successfully", repository=deleted)
