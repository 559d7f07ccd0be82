from datetime import date, timedelta
from unittest.mock import patch

import pytest
from sqlmodel import select

from reporover.core.config import settings
from reporover.models import Achievement, LessonProgress, QuizAttempt, UserProgress
from reporover.models.types import utc_now
from reporover.services import progression_service
from reporover.services.progression_service import level_for_xp, newly_crossed, record_activity

API = settings.api_v1_prefix


@pytest.mark.parametrize("xp, level", [(0, 1), (50, 1), (99, 1), (100, 2), (199, 2), (250, 3)])
def test_level_for_xp(xp, level):
    assert level_for_xp(xp) == level


def test_streak_rules():
    progress = UserProgress(user_id=1, total_xp=0, streak_days=0)
    record_activity(progress, date(2024, 3, 1))
    assert progress.streak_days == 1

    record_activity(progress, date(2024, 3, 1))
    assert progress.streak_days == 1

    record_activity(progress, date(2024, 3, 2))
    assert progress.streak_days == 2

    record_activity(progress, date(2024, 3, 5))
    assert progress.streak_days == 1
    assert progress.last_active_date == date(2024, 3, 5)


def test_newly_crossed_skips_unlocked_and_unknown():
    achievements = [
        Achievement(id=1, title="First Steps", xp_reward=50, requirement_type="lessons_completed", requirement_value=1),
        Achievement(id=2, title="Early Bird", xp_reward=100, requirement_type="lessons_completed", requirement_value=5),
        Achievement(id=3, title="XP Hunter", xp_reward=300, requirement_type="total_xp", requirement_value=100),
        Achievement(id=4, title="Mystery", xp_reward=1, requirement_type="moon_phase", requirement_value=0),
    ]
    stats = {"lessons_completed": 1, "total_xp": 150}
    assert newly_crossed(stats, achievements, set()) == [1, 3]
    assert newly_crossed(stats, achievements, {1}) == [3]


def _complete(client, headers, lesson_id):
    response = client.post(f"{API}/lesson-progress/complete", json={"lessonId": lesson_id}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def _user_progress(client, headers):
    rows = client.get(f"{API}/user-progress", headers=headers).json()
    assert len(rows) == 1
    return rows[0]


def test_js_basics_end_to_end(client, auth, make_path, make_lesson):
    path = make_path(title="JS Basics", difficulty="beginner", estimatedHours=12, orderIndex=1)
    first = make_lesson(path["id"], xpReward=50)
    second = make_lesson(path["id"], title="Functions", xpReward=50, orderIndex=2)

    result = _complete(client, auth, first["id"])
    assert result["xpAwarded"] == 50
    assert result["lessonProgress"]["status"] == "completed"
    progress = _user_progress(client, auth)
    assert progress["totalXp"] == 50
    assert progress["level"] == 1

    _complete(client, auth, second["id"])
    progress = _user_progress(client, auth)
    assert progress["totalXp"] == 100
    assert progress["level"] == 2
    assert progress["streakDays"] == 1


def test_repeat_completion_credits_nothing(client, auth, make_path, make_lesson):
    lesson = make_lesson(make_path()["id"], xpReward=40)
    _complete(client, auth, lesson["id"])
    again = _complete(client, auth, lesson["id"])
    assert again["xpAwarded"] == 0
    assert again["alreadyCompleted"] is True
    assert again["totalXp"] == 40
    assert _user_progress(client, auth)["totalXp"] == 40
    assert len(client.get(f"{API}/lesson-progress", headers=auth).json()) == 1


def test_complete_unknown_lesson(client, auth):
    response = client.post(f"{API}/lesson-progress/complete", json={"lessonId": 404}, headers=auth)
    assert response.status_code == 404
    assert response.json()["code"] == "LESSON_NOT_FOUND"


def test_progress_update_to_completed_credits_once(client, auth, make_path, make_lesson):
    lesson = make_lesson(make_path()["id"], xpReward=30)
    created = client.post(f"{API}/lesson-progress", json={"lessonId": lesson["id"], "status": "in_progress"}, headers=auth)
    assert created.status_code == 201
    row_id = created.json()["id"]

    response = client.put(f"{API}/lesson-progress", params={"id": row_id}, json={"status": "completed"}, headers=auth)
    assert response.status_code == 200
    assert response.json()["completedAt"] is not None
    assert response.json()["startedAt"] is not None
    assert _user_progress(client, auth)["totalXp"] == 30

    # A completed lesson cannot go back or be deleted to earn its XP again
    response = client.put(f"{API}/lesson-progress", params={"id": row_id}, json={"status": "in_progress"}, headers=auth)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATUS_TRANSITION"
    response = client.delete(f"{API}/lesson-progress", params={"id": row_id}, headers=auth)
    assert response.status_code == 409

    response = client.put(f"{API}/lesson-progress", params={"id": row_id}, json={"status": "completed"}, headers=auth)
    assert response.status_code == 200
    assert _user_progress(client, auth)["totalXp"] == 30


def test_duplicate_progress_row_conflicts(client, auth, make_path, make_lesson):
    lesson = make_lesson(make_path()["id"])
    body = {"lessonId": lesson["id"], "status": "not_started"}
    assert client.post(f"{API}/lesson-progress", json=body, headers=auth).status_code == 201
    response = client.post(f"{API}/lesson-progress", json=body, headers=auth)
    assert response.status_code == 409
    assert response.json()["code"] == "LESSON_PROGRESS_EXISTS"


def test_progress_status_filter(client, auth, make_path, make_lesson):
    path = make_path()
    done = make_lesson(path["id"], title="Done")
    started = make_lesson(path["id"], title="Started", orderIndex=2)
    _complete(client, auth, done["id"])
    client.post(f"{API}/lesson-progress", json={"lessonId": started["id"], "status": "in_progress"}, headers=auth)

    rows = client.get(f"{API}/lesson-progress", params={"status": "completed"}, headers=auth).json()
    assert [row["lessonId"] for row in rows] == [done["id"]]

    response = client.get(f"{API}/lesson-progress", params={"status": "finished"}, headers=auth)
    assert response.json()["code"] == "INVALID_STATUS"


def test_quiz_correctness_is_computed_by_server(client, auth, make_path, make_lesson, make_quiz):
    quiz = make_quiz(make_lesson(make_path()["id"])["id"], correctAnswer="const", xpReward=10)

    response = client.post(f"{API}/quiz-attempts", json={
        "quizId": quiz["id"], "userAnswer": "var", "isCorrect": True,
    }, headers=auth)
    assert response.status_code == 201
    assert response.json()["isCorrect"] is False
    assert _user_progress(client, auth)["totalXp"] == 0

    response = client.post(f"{API}/quiz-attempts", json={"quizId": quiz["id"], "userAnswer": " const "}, headers=auth)
    assert response.json()["isCorrect"] is True
    assert _user_progress(client, auth)["totalXp"] == 10

    # Only the first correct answer earns XP
    client.post(f"{API}/quiz-attempts", json={"quizId": quiz["id"], "userAnswer": "const"}, headers=auth)
    assert _user_progress(client, auth)["totalXp"] == 10
    assert len(client.get(f"{API}/quiz-attempts", params={"quizId": quiz["id"]}, headers=auth).json()) == 3


def test_attempt_for_unknown_quiz(client, auth):
    response = client.post(f"{API}/quiz-attempts", json={"quizId": 12345, "userAnswer": "x"}, headers=auth)
    assert response.status_code == 404
    assert response.json()["code"] == "QUIZ_NOT_FOUND"


def test_attempts_are_append_only(client, auth, make_path, make_lesson, make_quiz):
    quiz = make_quiz(make_lesson(make_path()["id"])["id"], correctAnswer="const", xpReward=10)

    for _ in range(3):
        attempt = client.post(f"{API}/quiz-attempts", json={"quizId": quiz["id"], "userAnswer": "const"}, headers=auth).json()

        response = client.delete(f"{API}/quiz-attempts", params={"id": attempt["id"]}, headers=auth)
        assert response.status_code == 405
        assert response.json()["code"] == "QUIZ_ATTEMPT_IMMUTABLE"

        response = client.put(f"{API}/quiz-attempts", params={"id": attempt["id"]}, json={"userAnswer": "var"}, headers=auth)
        assert response.status_code == 405

    assert _user_progress(client, auth)["totalXp"] == 10
    history = client.get(f"{API}/quiz-attempts", params={"quizId": quiz["id"]}, headers=auth).json()
    assert [a["isCorrect"] for a in history] == [True, True, True]


def test_attempt_reports_progression(client, auth, make_path, make_lesson, make_quiz):
    quiz = make_quiz(make_lesson(make_path()["id"])["id"], correctAnswer="const", xpReward=120)

    first = client.post(f"{API}/quiz-attempts", json={"quizId": quiz["id"], "userAnswer": "const"}, headers=auth).json()
    assert first["xpAwarded"] == 120
    assert first["totalXp"] == 120
    assert first["level"] == 2
    assert first["unlockedAchievementIds"] == []

    second = client.post(f"{API}/quiz-attempts", json={"quizId": quiz["id"], "userAnswer": "const"}, headers=auth).json()
    assert second["xpAwarded"] == 0
    assert second["totalXp"] == 120


def test_attempt_failure_rolls_back(session, make_user, client, make_path, make_lesson, make_quiz):
    _, user = make_user()
    quiz = make_quiz(make_lesson(make_path()["id"])["id"], correctAnswer="const")

    with patch.object(progression_service, "_unlock_new_achievements", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            progression_service.record_quiz_attempt(session, user["id"], quiz["id"], "const")

    assert session.exec(select(QuizAttempt).where(QuizAttempt.user_id == user["id"])).all() == []
    assert session.exec(select(UserProgress).where(UserProgress.user_id == user["id"])).first() is None



def _create_achievement(client, headers, **overrides):
    payload = {
        "title": "First Steps",
        "description": "Complete your first lesson",
        "icon": "🎯",
        "xpReward": 50,
        "requirementType": "lessons_completed",
        "requirementValue": 1,
    }
    payload.update(overrides)
    response = client.post(f"{API}/achievements", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_completion_unlocks_achievements_once(client, auth, make_path, make_lesson):
    first_steps = _create_achievement(client, auth)
    _create_achievement(client, auth, title="Early Bird", requirementValue=5)
    lesson = make_lesson(make_path()["id"])

    result = _complete(client, auth, lesson["id"])
    assert result["unlockedAchievementIds"] == [first_steps["id"]]
    # Achievement rewards are descriptive; only the lesson XP is credited
    assert result["totalXp"] == 50

    evaluation = client.post(f"{API}/achievements/evaluate", headers=auth)
    assert evaluation.status_code == 200
    assert evaluation.json()["unlocked"] == []
    assert evaluation.json()["stats"]["lessons_completed"] == 1

    unlocked = client.get(f"{API}/user-achievements", headers=auth).json()
    assert [ua["achievementId"] for ua in unlocked] == [first_steps["id"]]


def test_evaluate_is_idempotent(client, session, make_user):
    headers, user = make_user()
    _create_achievement(client, headers, title="Level Up", requirementType="level_reached", requirementValue=2)
    session.add(UserProgress(user_id=user["id"], total_xp=150, streak_days=1))
    session.commit()

    first = client.post(f"{API}/achievements/evaluate", headers=headers).json()
    assert len(first["unlocked"]) == 1
    assert first["stats"]["level_reached"] == 2

    second = client.post(f"{API}/achievements/evaluate", headers=headers).json()
    assert second["unlocked"] == []
    assert len(client.get(f"{API}/user-achievements", headers=headers).json()) == 1


def test_path_completion_counts_whole_paths(session, make_user, client, make_path, make_lesson):
    headers, user = make_user()
    path = make_path()
    first = make_lesson(path["id"])
    second = make_lesson(path["id"], title="Loops", orderIndex=2)

    _complete(client, headers, first["id"])
    assert progression_service.collect_user_stats(session, user["id"])["paths_completed"] == 0
    _complete(client, headers, second["id"])
    assert progression_service.collect_user_stats(session, user["id"])["paths_completed"] == 1


def test_manual_user_achievement_requires_achievement(client, auth):
    response = client.post(f"{API}/user-achievements", json={"achievementId": 77}, headers=auth)
    assert response.status_code == 404
    assert response.json()["code"] == "ACHIEVEMENT_NOT_FOUND"

    achievement = _create_achievement(client, auth)
    assert client.post(f"{API}/user-achievements", json={"achievementId": achievement["id"]}, headers=auth).status_code == 201
    response = client.post(f"{API}/user-achievements", json={"achievementId": achievement["id"]}, headers=auth)
    assert response.status_code == 409


def test_user_progress_level_is_derived(client, auth):
    response = client.post(f"{API}/user-progress", json={"totalXp": 340, "level": 99}, headers=auth)
    assert response.status_code == 201
    assert response.json()["level"] == 4

    row_id = response.json()["id"]
    response = client.put(f"{API}/user-progress", params={"id": row_id}, json={"totalXp": 99}, headers=auth)
    assert response.json()["level"] == 1

    response = client.post(f"{API}/user-progress", json={}, headers=auth)
    assert response.status_code == 409


def test_completion_records_activity_date(client, auth, make_path, make_lesson):
    lesson = make_lesson(make_path()["id"])
    _complete(client, auth, lesson["id"])
    assert _user_progress(client, auth)["lastActiveDate"] == utc_now().date().isoformat()


def test_streak_recovers_from_future_last_active_date():
    progress = UserProgress(user_id=1, total_xp=0, streak_days=40, last_active_date=date(2099, 1, 1))
    record_activity(progress, date(2024, 3, 1))
    assert progress.streak_days == 1
    assert progress.last_active_date == date(2024, 3, 1)


def test_future_completion_time_is_rejected(client, auth, make_path, make_lesson):
    lesson = make_lesson(make_path()["id"])
    response = client.post(f"{API}/lesson-progress", json={
        "lessonId": lesson["id"], "status": "completed", "completedAt": "2099-01-01T00:00:00Z",
    }, headers=auth)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_COMPLETED_AT"

    row = client.post(f"{API}/lesson-progress", json={"lessonId": lesson["id"], "status": "in_progress"}, headers=auth).json()
    response = client.put(f"{API}/lesson-progress", params={"id": row["id"]}, json={
        "status": "completed", "completedAt": "2099-01-01T00:00:00",
    }, headers=auth)
    assert response.status_code == 400
    assert client.get(f"{API}/user-progress", headers=auth).json() == []


def test_streak_uses_server_date(client, auth, make_path, make_lesson):
    path = make_path()
    backdated = make_lesson(path["id"], title="Yesterday")
    today = make_lesson(path["id"], title="Today", orderIndex=2)
    yesterday = (utc_now() - timedelta(days=1)).isoformat()

    response = client.post(f"{API}/lesson-progress", json={
        "lessonId": backdated["id"], "status": "completed", "completedAt": yesterday,
    }, headers=auth)
    assert response.status_code == 201
    _complete(client, auth, today["id"])

    progress = _user_progress(client, auth)
    assert progress["lastActiveDate"] == utc_now().date().isoformat()
    assert progress["streakDays"] == 1


def test_unlocked_achievements_survive_stat_drops(client, auth):
    _create_achievement(client, auth, title="Level Up", requirementType="level_reached", requirementValue=2)
    row = client.post(f"{API}/user-progress", json={"totalXp": 150}, headers=auth).json()
    assert len(client.post(f"{API}/achievements/evaluate", headers=auth).json()["unlocked"]) == 1

    client.put(f"{API}/user-progress", params={"id": row["id"]}, json={"totalXp": 0}, headers=auth)
    evaluation = client.post(f"{API}/achievements/evaluate", headers=auth).json()
    assert evaluation["stats"]["level_reached"] == 1
    assert evaluation["unlocked"] == []
    assert len(client.get(f"{API}/user-achievements", headers=auth).json()) == 1


def test_completion_failure_rolls_back(session, make_user, client, make_path, make_lesson):
    _, user = make_user()
    lesson = make_lesson(make_path()["id"], xpReward=50)

    with patch.object(progression_service, "_unlock_new_achievements", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            progression_service.complete_lesson(session, user["id"], lesson["id"])

    assert session.exec(select(LessonProgress).where(LessonProgress.user_id == user["id"])).all() == []
    assert session.exec(select(UserProgress).where(UserProgress.user_id == user["id"])).first() is None

    result = progression_service.complete_lesson(session, user["id"], lesson["id"])
    assert result.xp_awarded == 50
    assert result.user_progress.total_xp == 50


def test_timestamps_are_utc(client, auth, make_path, make_lesson):
    lesson = make_lesson(make_path()["id"])
    result = _complete(client, auth, lesson["id"])
    completed_at = result["lessonProgress"]["completedAt"]
    assert completed_at.endswith("Z") or completed_at.endswith("+00:00")
