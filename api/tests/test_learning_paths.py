from reporover.services.record_service import clamp_pagination
from reporover.core.config import settings

API = settings.api_v1_prefix


def test_create_and_get_learning_path(client, make_path):
    path = make_path()
    assert path["title"] == "JS Basics"
    assert path["estimatedHours"] == 12

    # Reads are public
    response = client.get(f"{API}/learning-paths", params={"id": path["id"]})
    assert response.status_code == 200
    assert response.json() == path


def test_write_requires_authentication(client):
    response = client.post(f"{API}/learning-paths", json={
        "title": "Go", "difficulty": "beginner", "estimatedHours": 3, "orderIndex": 1,
    })
    assert response.status_code == 401


def test_create_validates_body(client, auth):
    response = client.post(f"{API}/learning-paths", json={
        "title": "   ", "difficulty": "beginner", "estimatedHours": 3, "orderIndex": 1,
    }, headers=auth)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_list_sorting_and_filters(client, make_path):
    make_path(title="Python Fundamentals", orderIndex=2, estimatedHours=15)
    make_path(title="React Mastery", orderIndex=3, difficulty="intermediate", estimatedHours=20)
    make_path(title="JavaScript Basics", orderIndex=1, estimatedHours=12)

    titles = [p["title"] for p in client.get(f"{API}/learning-paths").json()]
    assert titles == ["JavaScript Basics", "Python Fundamentals", "React Mastery"]

    by_hours = client.get(f"{API}/learning-paths", params={"sort": "estimatedHours", "order": "desc"}).json()
    assert [p["estimatedHours"] for p in by_hours] == [20, 15, 12]

    beginner = client.get(f"{API}/learning-paths", params={"difficulty": "beginner"}).json()
    assert {p["title"] for p in beginner} == {"JavaScript Basics", "Python Fundamentals"}

    search = client.get(f"{API}/learning-paths", params={"search": "react"}).json()
    assert [p["title"] for p in search] == ["React Mastery"]


def test_pagination_is_clamped(client, make_path):
    for i in range(3):
        make_path(title=f"Path {i}", orderIndex=i)

    assert len(client.get(f"{API}/learning-paths", params={"limit": 0}).json()) == 1
    assert len(client.get(f"{API}/learning-paths", params={"limit": 1000}).json()) == 3
    assert len(client.get(f"{API}/learning-paths", params={"offset": -5}).json()) == 3
    assert [p["title"] for p in client.get(f"{API}/learning-paths", params={"limit": 1, "offset": 2}).json()] == ["Path 2"]


def test_pagination_rejects_non_integers(client):
    response = client.get(f"{API}/learning-paths", params={"limit": "ten"})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PAGINATION"


def test_clamp_pagination_bounds():
    assert clamp_pagination(None, None).limit == 10
    assert clamp_pagination(500, 0).limit == 100
    assert clamp_pagination(-1, -1).limit == 1
    assert clamp_pagination(5, -1).offset == 0


def test_invalid_and_unknown_ids(client):
    response = client.get(f"{API}/learning-paths", params={"id": "abc"})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ID"

    response = client.get(f"{API}/learning-paths", params={"id": 999})
    assert response.status_code == 404
    assert response.json()["code"] == "LEARNING_PATH_NOT_FOUND"


def test_partial_update(client, auth, make_path):
    path = make_path()
    response = client.put(f"{API}/learning-paths", params={"id": path["id"]}, json={"estimatedHours": 20}, headers=auth)
    assert response.status_code == 200
    updated = response.json()
    assert updated["estimatedHours"] == 20
    assert updated["title"] == path["title"]


def test_empty_update_is_noop(client, auth, make_path):
    path = make_path()
    response = client.put(f"{API}/learning-paths", params={"id": path["id"]}, json={}, headers=auth)
    assert response.status_code == 200
    assert response.json() == path


def test_update_cannot_null_required_field(client, auth, make_path):
    path = make_path()
    response = client.put(f"{API}/learning-paths", params={"id": path["id"]}, json={"title": None}, headers=auth)
    assert response.status_code == 400


def test_delete_returns_deleted_record_and_cascades(client, auth, make_path, make_lesson):
    path = make_path()
    lesson = make_lesson(path["id"])

    response = client.delete(f"{API}/learning-paths", params={"id": path["id"]}, headers=auth)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Learning path deleted successfully"
    assert body["learningPath"]["id"] == path["id"]

    assert client.get(f"{API}/learning-paths", params={"id": path["id"]}).status_code == 404
    assert client.get(f"{API}/lessons", params={"id": lesson["id"]}, headers=auth).status_code == 404
