"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from reporover.api.v1.endpoints import (
    auth, learning_paths, lessons, quizzes, quiz_attempts, lesson_progress,
    achievements, user_achievements, user_progress, repositories, github, ai
)

api_router = APIRouter()

# Include all endpoint routers
# Note: Each router already defines its own prefix, so we don't add another one here
api_router.include_router(auth.router)
api_router.include_router(learning_paths.router)
api_router.include_router(lessons.router)
api_router.include_router(quizzes.router)
api_router.include_router(quiz_attempts.router)
api_router.include_router(lesson_progress.router)
api_router.include_router(achievements.router)
api_router.include_router(user_achievements.router)
api_router.include_router(user_progress.router)
api_router.include_router(repositories.router)
api_router.include_router(github.router)
api_router.include_router(ai.router)
