"""
GitHub analysis schemas.
"""
from typing import Dict, List, Optional
from reporover.schemas.utils import CamelModel, RequiredStr


class AnalyzeRepositoryRequest(CamelModel):
    github_url: RequiredStr


class CommitSummary(CamelModel):
    sha: str
    message: str
    author: Optional[str] = None
    date: Optional[str] = None


class FileEntry(CamelModel):
    path: str
    type: str
    size: Optional[int] = None


class RepositoryAnalysis(CamelModel):
    """Summary merged from the repository, languages, readme, commits and tree lookups."""
    name: str
    full_name: str
    description: Optional[str] = None
    owner: str
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    language: str = "Unknown"
    languages: Dict[str, int] = {}
    topics: List[str] = []
    license: str = "No license"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    size: int = 0
    default_branch: Optional[str] = None
    readme: str = ""
    recent_commits: List[CommitSummary] = []
    file_count: int = 0
    file_structure: List[FileEntry] = []
