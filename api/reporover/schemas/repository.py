"""
Saved repository schemas.
"""
from pydantic import Field
from typing import Any, Dict, Optional
from datetime import datetime
from reporover.schemas.utils import CamelModel, RequiredStr, OptionalStr, UtcDatetime


class RepositoryResponse(CamelModel):
    """Saved repository response schema."""
    id: int
    user_id: int
    github_url: str
    repo_name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int
    analyzed_at: Optional[datetime] = None
    analysis_data: Optional[Dict[str, Any]] = None
    created_at: datetime


class CreateRepositoryRequest(CamelModel):
    """Request schema for saving an analysis result."""
    github_url: RequiredStr
    repo_name: RequiredStr
    description: OptionalStr = None
    language: OptionalStr = None
    stars: int = Field(0, ge=0)
    analyzed_at: Optional[UtcDatetime] = None
    analysis_data: Optional[Dict[str, Any]] = None


class UpdateRepositoryRequest(CamelModel):
    """Request schema for updating a saved repository."""
    github_url: Optional[RequiredStr] = None
    repo_name: Optional[RequiredStr] = None
    description: OptionalStr = None
    language: OptionalStr = None
    stars: Optional[int] = Field(None, ge=0)
    analyzed_at: Optional[UtcDatetime] = None
    analysis_data: Optional[Dict[str, Any]] = None


class DeleteRepositoryResponse(CamelModel):
    message: str
    repository: RepositoryResponse
