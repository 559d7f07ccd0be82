"""
AI tutor endpoints: code explanation and quiz generation.
"""
from fastapi import APIRouter, Depends
import logging

from reporover.models import User
from reporover.schemas.ai import (
    AIStatusResponse,
    ExplainCodeRequest,
    ExplainCodeResponse,
    GenerateQuizRequest,
    GenerateQuizResponse
)
from reporover.services import ai_service
from reporover.api.v1.endpoints.request_helpers import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


@router.get("/explain-code", response_model=AIStatusResponse)
async def explain_code_status(current_user: User = Depends(get_current_user)):
    """Report whether the AI tutor is available and what it can do."""
    return ai_service.get_status()


@router.post("/explain-code", response_model=ExplainCodeResponse)
def explain_code(
    request: ExplainCodeRequest,
    current_user: User = Depends(get_current_user)
):
    """Explain a code snippet, optionally answering a question about it."""
    return ai_service.explain_code(request.code, request.language, request.question)


@router.post("/generate-quiz", response_model=GenerateQuizResponse)
def generate_quiz(
    request: GenerateQuizRequest,
    current_user: User = Depends(get_current_user)
):
    """Generate three practice questions about code or a topic."""
    return ai_service.generate_quiz(request.code, request.topic, request.language, request.difficulty)
