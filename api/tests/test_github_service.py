import base64
from unittest.mock import patch

import pytest
import requests

from reporover.core.config import settings
from reporover.core.exceptions import UpstreamError, ValidationError
from reporover.services import github_service
from reporover.services.http_client import send_request

API = settings.api_v1_prefix

REPO = {
    "name": "hello-world",
    "full_name": "octocat/hello-world",
    "description": "My first repository",
    "stargazers_count": 42,
    "forks_count": 7,
    "watchers_count": 42,
    "open_issues_count": 1,
    "language": "Python",
    "topics": ["demo"],
    "license": {"name": "MIT License"},
    "created_at": "2020-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
    "size": 108,
    "default_branch": "main",
}


@pytest.mark.parametrize("url, expected", [
    ("https://github.com/octocat/hello-world", ("octocat", "hello-world")),
    ("https://github.com/octocat/hello-world.git", ("octocat", "hello-world")),
    ("https://github.com/octocat/hello-world/tree/main/src", ("octocat", "hello-world")),
    ("git@github.com:octocat/hello-world.git", ("octocat", "hello-world")),
])
def test_parse_repository_url(url, expected):
    assert github_service.parse_repository_url(url) == expected


@pytest.mark.parametrize("url", ["", "https://gitlab.com/octocat/hello-world", "github.com/octocat"])
def test_parse_repository_url_rejects_non_github(url):
    with pytest.raises(ValidationError) as exc_info:
        github_service.parse_repository_url(url)
    assert exc_info.value.code == "INVALID_GITHUB_URL"


def _router(make_response, routes):
    """Fake ``requests.request`` answering by URL suffix."""
    calls = []

    def _request(method, url, **kwargs):
        calls.append((method, url, kwargs))
        for suffix, result in routes.items():
            if url.endswith(suffix):
                if isinstance(result, Exception):
                    raise result
                status_code, payload = result
                return make_response(status_code, payload, url=url)
        return make_response(404, {"message": "Not Found"}, url=url)

    return _request, calls


def test_analyze_merges_all_lookups(make_response):
    readme = base64.b64encode(("# Hello\n" + "x" * 6000).encode()).decode()
    commits = [
        {"sha": f"sha{i}", "commit": {"message": f"commit {i}", "author": {"name": "Octo", "date": "2024-01-01"}}}
        for i in range(10)
    ]
    tree = {"tree": [{"path": f"file{i}.py", "type": "blob", "size": i} for i in range(150)]}
    fake, calls = _router(make_response, {
        "/repos/octocat/hello-world": (200, REPO),
        "/languages": (200, {"Python": 1000, "Shell": 20}),
        "/readme": (200, {"content": readme}),
        "/commits": (200, commits),
        "/git/trees/main": (200, tree),
    })

    with patch("reporover.services.http_client.requests.request", side_effect=fake):
        analysis = github_service.analyze_repository("https://github.com/octocat/hello-world")

    assert analysis["stars"] == 42
    assert analysis["language"] == "Python"
    assert analysis["languages"] == {"Python": 1000, "Shell": 20}
    assert analysis["license"] == "MIT License"
    assert analysis["readme"].startswith("# Hello")
    assert len(analysis["readme"]) == 5000
    assert [c["sha"] for c in analysis["recent_commits"]] == ["sha0", "sha1", "sha2", "sha3", "sha4"]
    assert analysis["file_count"] == 150
    assert len(analysis["file_structure"]) == 100

    headers = calls[0][2]["headers"]
    assert headers["Accept"] == "application/vnd.github.v3+json"
    assert headers["User-Agent"] == "RepoRoverAI"
    assert "Authorization" not in headers
    commit_call = next(call for call in calls if call[1].endswith("/commits"))
    assert commit_call[2]["params"] == {"per_page": 10}
    assert all(call[2]["timeout"] == settings.http_timeout_seconds for call in calls)


def test_token_is_sent_when_configured(monkeypatch, make_response):
    monkeypatch.setattr(settings, "github_token", "ghp_secret")
    fake, calls = _router(make_response, {"/repos/octocat/hello-world": (200, REPO)})
    with patch("reporover.services.http_client.requests.request", side_effect=fake):
        github_service.analyze_repository("https://github.com/octocat/hello-world")
    assert calls[0][2]["headers"]["Authorization"] == "token ghp_secret"


def test_optional_lookups_degrade_to_empty(make_response):
    fake, _ = _router(make_response, {
        "/repos/octocat/hello-world": (200, {**REPO, "license": None}),
        "/languages": requests.ConnectionError("connection reset"),
        "/readme": (404, {"message": "Not Found"}),
        "/commits": (409, {"message": "Git Repository is empty."}),
        "/git/trees/main": (500, {"message": "boom"}),
    })
    with patch("reporover.services.http_client.requests.request", side_effect=fake):
        analysis = github_service.analyze_repository("https://github.com/octocat/hello-world")

    assert analysis["languages"] == {}
    assert analysis["language"] == "Python"
    assert analysis["readme"] == ""
    assert analysis["recent_commits"] == []
    assert analysis["file_count"] == 0
    assert analysis["file_structure"] == []
    assert analysis["license"] == "No license"


def test_missing_repository_carries_upstream_status(make_response):
    fake, _ = _router(make_response, {})
    with patch("reporover.services.http_client.requests.request", side_effect=fake):
        with pytest.raises(UpstreamError) as exc_info:
            github_service.analyze_repository("https://github.com/octocat/missing")
    assert exc_info.value.status_code == 404
    assert exc_info.value.code == "GITHUB_REQUEST_FAILED"


def test_analyze_endpoint_404_persists_nothing(client, auth, make_response):
    fake, _ = _router(make_response, {})
    with patch("reporover.services.http_client.requests.request", side_effect=fake):
        response = client.post(f"{API}/github/analyze", json={"githubUrl": "https://github.com/octocat/missing"}, headers=auth)

    assert response.status_code == 404
    assert response.json()["code"] == "GITHUB_REQUEST_FAILED"
    assert client.get(f"{API}/repositories", headers=auth).json() == []


def test_analyze_endpoint_returns_camel_case(client, auth, make_response):
    fake, _ = _router(make_response, {"/repos/octocat/hello-world": (200, REPO)})
    with patch("reporover.services.http_client.requests.request", side_effect=fake):
        response = client.post(f"{API}/github/analyze", json={"githubUrl": "https://github.com/octocat/hello-world"}, headers=auth)

    assert response.status_code == 200
    body = response.json()
    assert body["fullName"] == "octocat/hello-world"
    assert body["openIssues"] == 1
    assert body["defaultBranch"] == "main"


def test_analyze_endpoint_rejects_bad_url(client, auth):
    response = client.post(f"{API}/github/analyze", json={"githubUrl": "not a url"}, headers=auth)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_GITHUB_URL"


def test_analyze_requires_authentication(client):
    response = client.post(f"{API}/github/analyze", json={"githubUrl": "https://github.com/a/b"})
    assert response.status_code == 401


def test_transient_failures_are_retried(monkeypatch, make_response):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    responses = iter([
        requests.ConnectionError("reset"),
        make_response(503, {"message": "unavailable"}),
        make_response(200, {"ok": True}),
    ])

    def fake(method, url, **kwargs):
        result = next(responses)
        if isinstance(result, Exception):
            raise result
        return result

    with patch("reporover.services.http_client.requests.request", side_effect=fake) as mocked:
        response = send_request("GET", "https://api.github.com/rate_limit", max_retries=2)
    assert response.status_code == 200
    assert mocked.call_count == 3


def test_client_errors_fail_fast(monkeypatch, make_response):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    with patch(
        "reporover.services.http_client.requests.request",
        return_value=make_response(404, {"message": "Not Found"}),
    ) as mocked:
        response = send_request("GET", "https://api.github.com/repos/a/b", max_retries=3)
    assert response.status_code == 404
    assert mocked.call_count == 1


def test_retries_are_bounded(monkeypatch, make_response):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    with patch(
        "reporover.services.http_client.requests.request",
        return_value=make_response(502, {"message": "Bad Gateway"}),
    ) as mocked:
        response = send_request("GET", "https://api.github.com/repos/a/b", max_retries=2)
    assert response.status_code == 502
    assert mocked.call_count == 3
