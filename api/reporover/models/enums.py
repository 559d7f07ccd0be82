"""
Model enums.
"""
from enum import Enum


class LessonStatus(str, Enum):
    """Status enum for LessonProgress."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RequirementType(str, Enum):
    """Achievement requirement types understood by the achievement evaluator."""
    LESSONS_COMPLETED = "lessons_completed"
    QUIZZES_COMPLETED = "quizzes_completed"
    CORRECT_ANSWERS_STREAK = "correct_answers_streak"
    STREAK_DAYS = "streak_days"
    TOTAL_XP = "total_xp"
    LEVEL_REACHED = "level_reached"
    PATHS_COMPLETED = "paths_completed"
