import itertools
import json
import os

import pytest
import requests

# Settings are read at import time; point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from reporover.core.config import settings  # noqa: E402
from reporover.core.database import get_session  # noqa: E402
from reporover.main import app  # noqa: E402
import reporover.models.user as user_model  # noqa: E402

API = settings.api_v1_prefix


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Keep tests fast and offline regardless of the developer's environment."""
    monkeypatch.setattr(settings, "google_gemini_api_key", "")
    monkeypatch.setattr(settings, "github_token", "")
    monkeypatch.setattr(settings, "http_max_retries", 0)
    monkeypatch.setattr(user_model, "PBKDF2_ITERATIONS", 1000)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Register a fresh user; returns (auth headers, user json)."""
    counter = itertools.count(1)

    def _make(name=None):
        n = next(counter)
        response = client.post(f"{API}/auth/register", json={
            "name": name or f"Learner {n}",
            "email": f"learner{n}@reporover.dev",
            "password": "correct horse battery",
        })
        assert response.status_code == 201, response.text
        data = response.json()
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _make


@pytest.fixture
def auth(make_user):
    headers, _ = make_user()
    return headers


@pytest.fixture
def make_path(client, auth):
    def _make(**overrides):
        payload = {
            "title": "JS Basics",
            "description": "Variables, functions and loops",
            "difficulty": "beginner",
            "estimatedHours": 12,
            "icon": "🟨",
            "orderIndex": 1,
        }
        payload.update(overrides)
        response = client.post(f"{API}/learning-paths", json=payload, headers=auth)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_lesson(client, auth):
    def _make(learning_path_id, **overrides):
        payload = {
            "learningPathId": learning_path_id,
            "title": "Variables",
            "description": "let, const and var",
            "content": "# Variables",
            "difficulty": "beginner",
            "xpReward": 50,
            "orderIndex": 1,
            "estimatedMinutes": 15,
        }
        payload.update(overrides)
        response = client.post(f"{API}/lessons", json=payload, headers=auth)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_quiz(client, auth):
    def _make(lesson_id, **overrides):
        payload = {
            "lessonId": lesson_id,
            "question": "Which keyword declares a constant?",
            "options": ["var", "let", "const", "static"],
            "correctAnswer": "const",
            "explanation": "const bindings cannot be reassigned",
            "difficulty": "easy",
            "xpReward": 10,
        }
        payload.update(overrides)
        response = client.post(f"{API}/quizzes", json=payload, headers=auth)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_response():
    """Build a real ``requests.Response`` carrying a JSON payload."""
    def _make(status_code=200, payload=None, url="https://api.github.com/"):
        response = requests.Response()
        response.status_code = status_code
        response.url = url
        response.encoding = "utf-8"
        response._content = json.dumps(payload).encode("utf-8") if payload is not None else b""
        return response

    return _make
