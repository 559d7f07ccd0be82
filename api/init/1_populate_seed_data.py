"""
Script to populate the achievement catalogue and the starter learning paths.

Rows are matched by title, so running the script again only inserts what is
missing.
"""
import sys
from typing import Dict
from sqlmodel import Session, select
from reporover.core.database import engine, init_db
from reporover.models import Achievement, LearningPath, RequirementType
import logging

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


ACHIEVEMENTS = [
    {"title": "First Steps", "description": "Complete your first lesson", "icon": "🎯",
     "xp_reward": 50, "requirement_type": RequirementType.LESSONS_COMPLETED, "requirement_value": 1},
    {"title": "Early Bird", "description": "Complete 5 lessons", "icon": "🌅",
     "xp_reward": 100, "requirement_type": RequirementType.LESSONS_COMPLETED, "requirement_value": 5},
    {"title": "Dedicated Learner", "description": "Complete 10 lessons", "icon": "📚",
     "xp_reward": 200, "requirement_type": RequirementType.LESSONS_COMPLETED, "requirement_value": 10},
    {"title": "Week Warrior", "description": "Maintain a 7-day learning streak", "icon": "🔥",
     "xp_reward": 150, "requirement_type": RequirementType.STREAK_DAYS, "requirement_value": 7},
    {"title": "Consistency King", "description": "Maintain a 30-day learning streak", "icon": "👑",
     "xp_reward": 500, "requirement_type": RequirementType.STREAK_DAYS, "requirement_value": 30},
    {"title": "Quiz Master", "description": "Complete 20 quizzes", "icon": "🧠",
     "xp_reward": 200, "requirement_type": RequirementType.QUIZZES_COMPLETED, "requirement_value": 20},
    {"title": "Perfect Score", "description": "Get 10 quiz questions correct in a row", "icon": "💯",
     "xp_reward": 250, "requirement_type": RequirementType.CORRECT_ANSWERS_STREAK, "requirement_value": 10},
    {"title": "XP Hunter", "description": "Earn 1000 total XP", "icon": "⭐",
     "xp_reward": 300, "requirement_type": RequirementType.TOTAL_XP, "requirement_value": 1000},
    {"title": "Level Up", "description": "Reach level 5", "icon": "🚀",
     "xp_reward": 200, "requirement_type": RequirementType.LEVEL_REACHED, "requirement_value": 5},
    {"title": "Path Completed", "description": "Complete an entire learning path", "icon": "🏆",
     "xp_reward": 400, "requirement_type": RequirementType.PATHS_COMPLETED, "requirement_value": 1},
]

LEARNING_PATHS = [
    {
        "title": "JavaScript Basics",
        "description": "Master the fundamentals of JavaScript programming including variables, functions, loops, and DOM manipulation",
        "difficulty": "beginner",
        "estimated_hours": 12,
        "icon": "🟨",
        "order_index": 1,
    },
    {
        "title": "Python Fundamentals",
        "description": "Learn Python from scratch with hands-on exercises covering data types, control flow, functions, and object-oriented programming",
        "difficulty": "beginner",
        "estimated_hours": 15,
        "icon": "🐍",
        "order_index": 2,
    },
    {
        "title": "React Mastery",
        "description": "Build modern web applications with React including hooks, state management, routing, and performance optimization",
        "difficulty": "intermediate",
        "estimated_hours": 20,
        "icon": "⚛️",
        "order_index": 3,
    },
]


def populate_seed_data(session: Session) -> Dict[str, int]:
    """
    Insert seed achievements and learning paths that are not present yet.

    Returns:
        Dict with the number of inserted achievements and learning paths
    """
    existing_achievements = set(session.exec(select(Achievement.title)).all())
    added_achievements = 0
    for data in ACHIEVEMENTS:
        if data["title"] in existing_achievements:
            continue
        session.add(Achievement(**{**data, "requirement_type": data["requirement_type"].value}))
        added_achievements += 1

    existing_paths = set(session.exec(select(LearningPath.title)).all())
    added_paths = 0
    for data in LEARNING_PATHS:
        if data["title"] in existing_paths:
            continue
        session.add(LearningPath(**data))
        added_paths += 1

    session.commit()
    logger.info(f"Inserted {added_achievements} achievements and {added_paths} learning paths")
    return {"achievements": added_achievements, "learning_paths": added_paths}


if __name__ == "__main__":
    logger.info("Starting seed data population...")
    try:
        init_db()
        with Session(engine) as session:
            populate_seed_data(session)
        logger.info("Successfully completed!")
    except Exception as e:
        logger.error("Error during seed data population: %s", e, exc_info=True)
        sys.exit(1)
