"""
GitHub repository analysis.

Builds a one-shot summary of a public repository from five GitHub REST
lookups. Only the repository metadata lookup is required; languages,
README, commits and the file tree degrade to empty sections on failure.
Nothing is persisted here.
"""
import base64
import logging
import re
from typing import Any, Dict, Optional, Tuple

import requests

from reporover.core.config import settings
from reporover.core.exceptions import UpstreamError, ValidationError
from reporover.services.http_client import send_request

logger = logging.getLogger(__name__)

GITHUB_URL_PATTERN = re.compile(r"github\.com[/:]([^/\s]+)/([^/\s?#]+)", re.IGNORECASE)

README_MAX_CHARS = 5000
COMMITS_FETCHED = 10
COMMITS_KEPT = 5
TREE_ENTRIES_KEPT = 100


def parse_repository_url(url: str) -> Tuple[str, str]:
    """
    Extract (owner, repo) from a GitHub URL.

    Accepts https and ssh forms, trailing paths and a ``.git`` suffix.

    Raises:
        ValidationError: If the URL does not name a GitHub repository
    """
    match = GITHUB_URL_PATTERN.search(url or "")
    if not match:
        raise ValidationError("Invalid GitHub URL format", "INVALID_GITHUB_URL")
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[:-4]
    if not owner or not repo:
        raise ValidationError("Invalid GitHub URL format", "INVALID_GITHUB_URL")
    return owner, repo


def _headers() -> Dict[str, str]:
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": "RepoRoverAI",
    }
    if settings.github_token:
        headers["Authorization"] = f"token {settings.github_token}"
    return headers


def _get(path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
    return send_request(
        "GET",
        f"{settings.github_api_url.rstrip('/')}{path}",
        headers=_headers(),
        params=params,
    )


def _fetch_optional(path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
    """Fetch a JSON document, returning None instead of raising on any failure."""
    try:
        response = _get(path, params)
        if not response.ok:
            logger.info(f"Optional GitHub lookup {path} returned {response.status_code}")
            return None
        return response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Optional GitHub lookup {path} failed: {e}")
        return None


def fetch_repository(owner: str, repo: str) -> Dict[str, Any]:
    """
    Fetch the repository metadata document.

    Raises:
        UpstreamError: Carrying GitHub's status code when the lookup fails
    """
    try:
        response = _get(f"/repos/{owner}/{repo}")
    except requests.RequestException as e:
        logger.error(f"GitHub request for {owner}/{repo} failed: {e}")
        raise UpstreamError(f"GitHub request failed: {e}", "GITHUB_UNREACHABLE") from e

    if not response.ok:
        detail = response.text[:500] if response.text else ""
        logger.warning(f"GitHub returned {response.status_code} for {owner}/{repo}")
        message = (
            "Repository not found" if response.status_code == 404
            else "Failed to fetch repository data"
        )
        raise UpstreamError(
            f"{message}: {detail}" if detail else message,
            "GITHUB_REQUEST_FAILED",
            status_code=response.status_code,
        )
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError("GitHub returned an unreadable response", "GITHUB_REQUEST_FAILED") from e


def decode_readme(readme_data: Optional[Dict[str, Any]]) -> str:
    if not readme_data or not readme_data.get("content"):
        return ""
    try:
        text = base64.b64decode(readme_data["content"]).decode("utf-8", errors="replace")
    except (ValueError, TypeError) as e:
        logger.warning(f"README could not be decoded: {e}")
        return ""
    return text[:README_MAX_CHARS]


def summarize_commits(commits: Any) -> list:
    if not isinstance(commits, list):
        return []
    summary = []
    for item in commits[:COMMITS_KEPT]:
        commit = item.get("commit") or {}
        author = commit.get("author") or {}
        summary.append({
            "sha": item.get("sha", ""),
            "message": commit.get("message", ""),
            "author": author.get("name"),
            "date": author.get("date"),
        })
    return summary


def summarize_tree(tree: Any) -> Tuple[int, list]:
    entries = tree.get("tree") if isinstance(tree, dict) else None
    if not isinstance(entries, list):
        return 0, []
    structure = [
        {"path": entry.get("path", ""), "type": entry.get("type", ""), "size": entry.get("size")}
        for entry in entries[:TREE_ENTRIES_KEPT]
    ]
    return len(entries), structure


def analyze_repository(url: str) -> Dict[str, Any]:
    """
    Analyze a public GitHub repository.

    Args:
        url: Repository URL, e.g. https://github.com/owner/repo

    Returns:
        Summary dict matching ``RepositoryAnalysis``

    Raises:
        ValidationError: If the URL is not a GitHub repository URL
        UpstreamError: If the repository metadata lookup fails
    """
    owner, repo = parse_repository_url(url)
    repo_data = fetch_repository(owner, repo)

    languages = _fetch_optional(f"/repos/{owner}/{repo}/languages")
    if not isinstance(languages, dict):
        languages = {}
    primary_language = next(iter(languages), None) or repo_data.get("language") or "Unknown"

    readme = decode_readme(_fetch_optional(f"/repos/{owner}/{repo}/readme"))
    commits = summarize_commits(
        _fetch_optional(f"/repos/{owner}/{repo}/commits", params={"per_page": COMMITS_FETCHED})
    )

    default_branch = repo_data.get("default_branch")
    file_count, file_structure = 0, []
    if default_branch:
        file_count, file_structure = summarize_tree(
            _fetch_optional(
                f"/repos/{owner}/{repo}/git/trees/{default_branch}",
                params={"recursive": 1},
            )
        )

    license_info = repo_data.get("license") or {}
    logger.info(f"Analyzed {owner}/{repo}: {file_count} files, {len(commits)} recent commits")
    return {
        "name": repo_data.get("name", repo),
        "full_name": repo_data.get("full_name", f"{owner}/{repo}"),
        "description": repo_data.get("description"),
        "owner": owner,
        "stars": repo_data.get("stargazers_count") or 0,
        "forks": repo_data.get("forks_count") or 0,
        "watchers": repo_data.get("watchers_count") or 0,
        "open_issues": repo_data.get("open_issues_count") or 0,
        "language": primary_language,
        "languages": languages,
        "topics": repo_data.get("topics") or [],
        "license": license_info.get("name") or "No license",
        "created_at": repo_data.get("created_at"),
        "updated_at": repo_data.get("updated_at"),
        "size": repo_data.get("size") or 0,
        "default_branch": default_branch,
        "readme": readme,
        "recent_commits": commits,
        "file_count": file_count,
        "file_structure": file_structure,
    }
