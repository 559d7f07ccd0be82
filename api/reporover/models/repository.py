"""
Repository model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional, Any, Dict
from datetime import datetime
from reporover.models.types import UTCDateTime, utc_now
from sqlalchemy import Column, JSON


class Repository(SQLModel, table=True):
    """Repository table - a saved snapshot of one GitHub analysis."""
    __tablename__ = "repository"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    github_url: str
    repo_name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = Field(default=0)
    analyzed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    analysis_data: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
