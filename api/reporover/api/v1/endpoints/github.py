"""
GitHub analysis endpoint.

Analysis results are returned to the caller and never stored; saving is an
explicit ``POST /repositories``.
"""
from fastapi import APIRouter, Depends
import logging

from reporover.models import User
from reporover.schemas.github import AnalyzeRepositoryRequest, RepositoryAnalysis
from reporover.services.github_service import analyze_repository
from reporover.api.v1.endpoints.request_helpers import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/github", tags=["github"])


@router.post("/analyze", response_model=RepositoryAnalysis)
def analyze(
    request: AnalyzeRepositoryRequest,
    current_user: User = Depends(get_current_user)
):
    """Analyze a public GitHub repository by URL."""
    logger.info(f"User {current_user.id} analyzing {request.github_url}")
    return RepositoryAnalysis.model_validate(analyze_repository(request.github_url))
