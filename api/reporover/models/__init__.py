"""
Models package - imports all models so they register with SQLModel metadata.
"""
from reporover.models.enums import LessonStatus, RequirementType
from reporover.models.user import User, AuthSession
from reporover.models.learning_path import LearningPath
from reporover.models.lesson import Lesson
from reporover.models.quiz import Quiz, QuizAttempt
from reporover.models.lesson_progress import LessonProgress
from reporover.models.achievement import Achievement, UserAchievement
from reporover.models.user_progress import UserProgress
from reporover.models.repository import Repository

__all__ = [
    'LessonStatus',
    'RequirementType',
    'User',
    'AuthSession',
    'LearningPath',
    'Lesson',
    'Quiz',
    'QuizAttempt',
    'LessonProgress',
    'Achievement',
    'UserAchievement',
    'UserProgress',
    'Repository',
]
