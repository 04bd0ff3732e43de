from __future__ import annotations

from typing import Any

import httpx
import pytest

from prwatch.config import Config
from prwatch.github import GitHubClient

API_URL = "https://api.github.com"


def make_raw_pr(
    number: int,
    login: str = "me",
    state: str = "open",
    repo: str = "a/b",
    sha: str | None = None,
    updated_at: str = "2024-03-01T12:00:00Z",
) -> dict[str, Any]:
    """A pull request record as returned by GET /repos/{owner}/{repo}/pulls."""
    sha = sha or f"sha{number}"
    return {
        "number": number,
        "title": f"PR {number}",
        "html_url": f"https://github.com/{repo}/pull/{number}",
        "user": {"login": login},
        "state": state,
        "comments": number,
        "labels": [{"name": "bug", "color": "d73a4a"}],
        "updated_at": updated_at,
        "statuses_url": f"{API_URL}/repos/{repo}/statuses/{sha}",
        "head": {"sha": sha},
    }


class FakeGitHub:
    """Route table for an ``httpx.MockTransport`` keyed by URL path."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any, Exception | None]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        json: Any = None,
        status: int = 200,
        exc: Exception | None = None,
    ) -> None:
        self.routes[path] = (status, json, exc)

    def add_repo(
        self,
        repo: str,
        pulls: list[dict[str, Any]],
        statuses: list[dict[str, Any]] | None = None,
        check_runs: list[dict[str, Any]] | None = None,
    ) -> None:
        """Register a listing plus status and check-run routes for each pull."""
        self.add(f"/repos/{repo}/pulls", pulls)
        for pr in pulls:
            sha = pr["head"]["sha"]
            self.add(f"/repos/{repo}/statuses/{sha}", statuses or [])
            self.add(
                f"/repos/{repo}/commits/{sha}/check-runs",
                {"total_count": len(check_runs or []), "check_runs": check_runs or []},
            )

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        status, json, exc = route
        if exc is not None:
            raise exc
        return httpx.Response(status, json=json)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def config() -> Config:
    return Config(username="me", repos=["a/b"], token="t0ken", api_url=API_URL)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def make_client(config, fake_github):
    def _make(cfg: Config | None = None) -> GitHubClient:
        return GitHubClient(cfg or config, transport=fake_github.transport())

    return _make
