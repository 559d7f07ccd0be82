"""
Progression bookkeeping: XP, levels, day streaks and achievement unlocks.

This module is the single place where XP is credited and achievements are
unlocked. Endpoints and presentation code only read the derived values.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Dict, Iterable, List, Optional, Set
from sqlmodel import Session, select
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from reporover.core.exceptions import ConflictError, NotFoundError, ValidationError
from reporover.models.enums import LessonStatus, RequirementType
from reporover.models.types import as_utc, utc_now
from reporover.models import (
    Achievement,
    Lesson,
    LessonProgress,
    Quiz,
    QuizAttempt,
    UserAchievement,
    UserProgress,
)

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100


def level_for_xp(total_xp: int) -> int:
    """Level 1 covers 0-99 XP, level 2 covers 100-199 XP, and so on."""
    return max(total_xp, 0) // XP_PER_LEVEL + 1


def answers_match(submitted: str, correct: str) -> bool:
    return submitted.strip() == correct.strip()


@dataclass
class CompletionResult:
    lesson_progress: LessonProgress
    user_progress: UserProgress
    xp_awarded: int
    already_completed: bool
    unlocked: List[UserAchievement] = field(default_factory=list)


@dataclass
class AttemptResult:
    attempt: QuizAttempt
    user_progress: UserProgress
    xp_awarded: int
    unlocked: List[UserAchievement] = field(default_factory=list)


@dataclass
class AchievementEvaluation:
    unlocked: List[UserAchievement]
    stats: Dict[str, int]


def get_or_create_user_progress(
    session: Session,
    user_id: int,
    lock: bool = False
) -> UserProgress:
    """
    Return the user's progress row, creating an empty one if needed.

    Args:
        session: Database session
        user_id: Owner of the row
        lock: Select the row FOR UPDATE (ignored by SQLite)
    """
    query = select(UserProgress).where(UserProgress.user_id == user_id)
    if lock:
        query = query.with_for_update()
    progress = session.exec(query).first()
    if progress is None:
        progress = UserProgress(user_id=user_id, total_xp=0, streak_days=0)
        session.add(progress)
        session.flush()
    return progress


def record_activity(progress: UserProgress, today: Optional[date] = None) -> None:
    """
    Update the day streak for activity on ``today``.

    Same day keeps the streak and the next calendar day extends it. A gap,
    or a last active date after ``today``, restarts it at 1.
    """
    today = today or utc_now().date()
    last = progress.last_active_date
    if last == today:
        return
    if last is not None and (today - last).days == 1:
        progress.streak_days += 1
    else:
        progress.streak_days = 1
    progress.last_active_date = today
    progress.updated_at = utc_now()


def credit_xp(session: Session, progress: UserProgress, amount: int) -> None:
    """Atomically add ``amount`` XP to the progress row and reload it."""
    if amount <= 0:
        return
    session.exec(
        update(UserProgress)
        .where(UserProgress.id == progress.id)
        .values(total_xp=UserProgress.total_xp + amount, updated_at=utc_now())
    )
    session.refresh(progress)


def collect_user_stats(session: Session, user_id: int) -> Dict[str, int]:
    """
    Aggregate the counters achievements are defined against.

    Returns:
        Dict keyed by RequirementType values.
    """
    lessons_completed = session.exec(
        select(func.count(LessonProgress.id)).where(
            LessonProgress.user_id == user_id,
            LessonProgress.status == LessonStatus.COMPLETED.value
        )
    ).one()

    quizzes_completed = session.exec(
        select(func.count(func.distinct(QuizAttempt.quiz_id))).where(
            QuizAttempt.user_id == user_id
        )
    ).one()

    # Current run of consecutive correct answers, newest first
    results = session.exec(
        select(QuizAttempt.is_correct)
        .where(QuizAttempt.user_id == user_id)
        .order_by(QuizAttempt.attempted_at.desc(), QuizAttempt.id.desc())  # type: ignore[attr-defined]
    ).all()
    correct_streak = 0
    for is_correct in results:
        if not is_correct:
            break
        correct_streak += 1

    # A path counts once every one of its lessons is completed
    lessons_per_path = dict(session.exec(
        select(Lesson.learning_path_id, func.count(Lesson.id)).group_by(Lesson.learning_path_id)
    ).all())
    completed_per_path = dict(session.exec(
        select(Lesson.learning_path_id, func.count(LessonProgress.id))
        .join(LessonProgress, LessonProgress.lesson_id == Lesson.id)
        .where(
            LessonProgress.user_id == user_id,
            LessonProgress.status == LessonStatus.COMPLETED.value
        )
        .group_by(Lesson.learning_path_id)
    ).all())
    paths_completed = sum(
        1 for path_id, total in lessons_per_path.items()
        if total > 0 and completed_per_path.get(path_id, 0) >= total
    )

    progress = session.exec(
        select(UserProgress).where(UserProgress.user_id == user_id)
    ).first()
    total_xp = progress.total_xp if progress else 0
    streak_days = progress.streak_days if progress else 0

    return {
        RequirementType.LESSONS_COMPLETED.value: lessons_completed,
        RequirementType.QUIZZES_COMPLETED.value: quizzes_completed,
        RequirementType.CORRECT_ANSWERS_STREAK.value: correct_streak,
        RequirementType.STREAK_DAYS.value: streak_days,
        RequirementType.TOTAL_XP.value: total_xp,
        RequirementType.LEVEL_REACHED.value: level_for_xp(total_xp),
        RequirementType.PATHS_COMPLETED.value: paths_completed,
    }


def newly_crossed(
    stats: Dict[str, int],
    achievements: Iterable[Achievement],
    unlocked_ids: Set[int]
) -> List[int]:
    """
    Ids of achievements whose threshold the stats reach and that are not unlocked yet.

    Unknown requirement types never unlock.
    """
    crossed = []
    for achievement in achievements:
        if achievement.id in unlocked_ids:
            continue
        value = stats.get(achievement.requirement_type)
        if value is None:
            logger.warning(
                f"Achievement {achievement.id} has unknown requirement type "
                f"'{achievement.requirement_type}'"
            )
            continue
        if value >= achievement.requirement_value:
            crossed.append(achievement.id)
    return crossed


def _unlock_new_achievements(session: Session, user_id: int) -> AchievementEvaluation:
    """Insert missing UserAchievement rows inside the caller's transaction (no commit)."""
    session.flush()
    stats = collect_user_stats(session, user_id)
    achievements = session.exec(select(Achievement)).all()
    unlocked_ids = set(session.exec(
        select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id)
    ).all())

    now = utc_now()
    unlocked = []
    for achievement_id in newly_crossed(stats, achievements, unlocked_ids):
        user_achievement = UserAchievement(
            user_id=user_id,
            achievement_id=achievement_id,
            earned_at=now,
            created_at=now
        )
        session.add(user_achievement)
        unlocked.append(user_achievement)
    if unlocked:
        session.flush()
    return AchievementEvaluation(unlocked=unlocked, stats=stats)


def evaluate_achievements(session: Session, user_id: int) -> AchievementEvaluation:
    """
    Unlock every achievement the user's current stats have crossed.

    Idempotent: running it twice on unchanged state unlocks nothing the
    second time, and previously unlocked achievements are never removed.
    """
    try:
        evaluation = _unlock_new_achievements(session, user_id)
        session.commit()
    except IntegrityError:
        # A concurrent evaluation inserted the same rows first
        session.rollback()
        logger.warning(f"Concurrent achievement evaluation for user {user_id}; keeping existing unlocks")
        return AchievementEvaluation(unlocked=[], stats=collect_user_stats(session, user_id))

    for user_achievement in evaluation.unlocked:
        session.refresh(user_achievement)
    if evaluation.unlocked:
        logger.info(
            f"User {user_id} unlocked achievements "
            f"{[ua.achievement_id for ua in evaluation.unlocked]}"
        )
    return evaluation


def complete_lesson(
    session: Session,
    user_id: int,
    lesson_id: int,
    started_at: Optional[datetime] = None,
    completed_at: Optional[datetime] = None
) -> CompletionResult:
    """
    Mark a lesson completed and credit its XP in one transaction.

    Repeat completion is a no-op: nothing is credited and the existing
    progress row is returned with ``already_completed=True``. The day streak
    always advances on the server's date, whatever ``completed_at`` says.

    Raises:
        NotFoundError: If the lesson does not exist
        ValidationError: If ``completed_at`` lies in the future
        ConflictError: If a concurrent request completed the lesson first
    """
    now = utc_now()
    started_at = as_utc(started_at)
    completed_at = as_utc(completed_at)
    if completed_at is not None and completed_at > now:
        raise ValidationError("completedAt cannot be in the future", "INVALID_COMPLETED_AT")

    lesson = session.get(Lesson, lesson_id)
    if not lesson:
        raise NotFoundError("Lesson not found", "LESSON_NOT_FOUND")

    row = session.exec(
        select(LessonProgress).where(
            LessonProgress.user_id == user_id,
            LessonProgress.lesson_id == lesson_id
        ).with_for_update()
    ).first()

    if row is not None and row.status == LessonStatus.COMPLETED.value:
        progress = get_or_create_user_progress(session, user_id)
        session.commit()
        return CompletionResult(
            lesson_progress=row,
            user_progress=progress,
            xp_awarded=0,
            already_completed=True
        )

    completed_at = completed_at or now
    try:
        if row is None:
            row = LessonProgress(
                user_id=user_id,
                lesson_id=lesson_id,
                status=LessonStatus.COMPLETED.value,
                started_at=started_at or completed_at,
                completed_at=completed_at,
                created_at=now,
                updated_at=now
            )
            session.add(row)
        else:
            row.status = LessonStatus.COMPLETED.value
            row.started_at = started_at or row.started_at or completed_at
            row.completed_at = completed_at
            row.updated_at = now
            session.add(row)

        progress = get_or_create_user_progress(session, user_id, lock=True)
        credit_xp(session, progress, lesson.xp_reward)
        record_activity(progress, now.date())
        session.add(progress)

        evaluation = _unlock_new_achievements(session, user_id)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Concurrent completion of lesson {lesson_id} by user {user_id}: {e}")
        raise ConflictError("Lesson completion conflicted with another request", "CONFLICT") from e
    except Exception:
        session.rollback()
        raise

    session.refresh(row)
    session.refresh(progress)
    for user_achievement in evaluation.unlocked:
        session.refresh(user_achievement)

    logger.info(
        f"User {user_id} completed lesson {lesson_id}: +{lesson.xp_reward} XP "
        f"(total {progress.total_xp}, level {level_for_xp(progress.total_xp)})"
    )
    return CompletionResult(
        lesson_progress=row,
        user_progress=progress,
        xp_awarded=lesson.xp_reward,
        already_completed=False,
        unlocked=evaluation.unlocked
    )


def record_quiz_attempt(
    session: Session,
    user_id: int,
    quiz_id: int,
    answer: str
) -> AttemptResult:
    """
    Store an answer with server-computed correctness.

    Attempts are append-only history. The first correct attempt on a quiz
    credits the quiz's XP; later correct attempts are recorded without credit.

    Raises:
        NotFoundError: If the quiz does not exist
        ConflictError: If a concurrent request for the same user won the race
    """
    quiz = session.get(Quiz, quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found", "QUIZ_NOT_FOUND")

    is_correct = answers_match(answer, quiz.correct_answer)
    now = utc_now()
    try:
        # The progress row lock serializes this user's submissions
        progress = get_or_create_user_progress(session, user_id, lock=True)
        already_solved = session.exec(
            select(QuizAttempt.id).where(
                QuizAttempt.user_id == user_id,
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.is_correct == True  # noqa: E712
            )
        ).first() is not None

        attempt = QuizAttempt(
            user_id=user_id,
            quiz_id=quiz_id,
            user_answer=answer,
            is_correct=is_correct,
            attempted_at=now,
            created_at=now
        )
        session.add(attempt)

        xp_awarded = quiz.xp_reward if is_correct and not already_solved else 0
        credit_xp(session, progress, xp_awarded)
        record_activity(progress, now.date())
        session.add(progress)

        evaluation = _unlock_new_achievements(session, user_id)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Concurrent quiz attempt on quiz {quiz_id} by user {user_id}: {e}")
        raise ConflictError("Quiz attempt conflicted with another request", "CONFLICT") from e
    except Exception:
        session.rollback()
        raise

    session.refresh(attempt)
    session.refresh(progress)
    for user_achievement in evaluation.unlocked:
        session.refresh(user_achievement)

    logger.info(
        f"User {user_id} answered quiz {quiz_id} "
        f"({'correct' if is_correct else 'incorrect'}, +{xp_awarded} XP)"
    )
    return AttemptResult(
        attempt=attempt,
        user_progress=progress,
        xp_awarded=xp_awarded,
        unlocked=evaluation.unlocked
    )
