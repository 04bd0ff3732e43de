from __future__ import annotations

import httpx
import pytest

from prwatch.config import Config
from prwatch.github import ACCEPT_HEADER, GitHubClient, GitHubError, build_headers


def test_build_headers_with_token() -> None:
    assert build_headers("abc") == {
        "Accept": ACCEPT_HEADER,
        "Authorization": "Bearer abc",
    }


def test_build_headers_without_token() -> None:
    assert build_headers(None) == {"Accept": "application/vnd.github+json"}


@pytest.mark.asyncio
async def test_list_pulls_sends_bearer_and_accept(make_client, fake_github) -> None:
    fake_github.add("/repos/a/b/pulls", [{"number": 1}])
    async with make_client() as client:
        pulls = await client.list_pulls("a/b")

    assert pulls == [{"number": 1}]
    request = fake_github.requests[0]
    assert str(request.url) == "https://api.github.com/repos/a/b/pulls"
    assert request.headers["Authorization"] == "Bearer t0ken"
    assert request.headers["Accept"] == ACCEPT_HEADER


@pytest.mark.asyncio
async def test_get_statuses_uses_absolute_url(make_client, fake_github) -> None:
    fake_github.add("/repos/a/b/statuses/abc123", [{"context": "ci"}])
    async with make_client() as client:
        statuses = await client.get_statuses(
            "https://api.github.com/repos/a/b/statuses/abc123"
        )
    assert statuses == [{"context": "ci"}]


@pytest.mark.asyncio
async def test_get_check_runs_unwraps_list(make_client, fake_github) -> None:
    fake_github.add(
        "/repos/a/b/commits/abc123/check-runs",
        {"total_count": 1, "check_runs": [{"name": "tests"}]},
    )
    async with make_client() as client:
        runs = await client.get_check_runs("a/b", "abc123")
    assert runs == [{"name": "tests"}]


@pytest.mark.asyncio
async def test_non_2xx_raises(make_client, fake_github) -> None:
    fake_github.add("/repos/a/b/pulls", {"message": "Bad credentials"}, status=401)
    async with make_client() as client:
        with pytest.raises(GitHubError) as exc_info:
            await client.list_pulls("a/b")
    assert exc_info.value.status_code == 401
    assert "401" in str(exc_info.value)


@pytest.mark.asyncio
async def test_not_found_raises(make_client) -> None:
    async with make_client() as client:
        with pytest.raises(GitHubError) as exc_info:
            await client.list_pulls("missing/repo")
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_transport_error_raises(make_client, fake_github) -> None:
    fake_github.add("/repos/a/b/pulls", exc=httpx.ConnectError("connection refused"))
    async with make_client() as client:
        with pytest.raises(GitHubError) as exc_info:
            await client.list_pulls("a/b")
    assert exc_info.value.status_code is None
    assert "connection refused" in str(exc_info.value)


@pytest.mark.asyncio
async def test_timeout_raises(make_client, fake_github) -> None:
    fake_github.add("/repos/a/b/pulls", exc=httpx.ReadTimeout("read timed out"))
    async with make_client() as client:
        with pytest.raises(GitHubError, match="timed out"):
            await client.list_pulls("a/b")


@pytest.mark.asyncio
async def test_invalid_json_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    config = Config(username="me", repos=["a/b"])
    async with GitHubClient(config, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(GitHubError, match="invalid JSON"):
            await client.list_pulls("a/b")


@pytest.mark.asyncio
async def test_unexpected_shape_raises(make_client, fake_github) -> None:
    fake_github.add("/repos/a/b/pulls", {"message": "not a list"})
    async with make_client() as client:
        with pytest.raises(GitHubError, match="expected a list"):
            await client.list_pulls("a/b")


@pytest.mark.asyncio
async def test_unauthenticated_client_omits_authorization(fake_github) -> None:
    fake_github.add("/repos/a/b/pulls", [])
    config = Config(username="me", repos=["a/b"], token=None)
    async with GitHubClient(config, transport=fake_github.transport()) as client:
        await client.list_pulls("a/b")
    assert "Authorization" not in fake_github.requests[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "pulls",
    [
        [None],
        ["not a pull request"],
        [{"number": 1, "user": "x"}],
        [{"number": 1, "head": "sha1"}],
        [{"number": 1, "labels": ["bug"]}],
        [{"number": 1, "labels": "bug"}],
    ],
)
async def test_malformed_pull_record_raises(make_client, fake_github, pulls) -> None:
    fake_github.add("/repos/a/b/pulls", pulls)
    async with make_client() as client:
        with pytest.raises(GitHubError, match="malformed record"):
            await client.list_pulls("a/b")


@pytest.mark.asyncio
async def test_malformed_status_record_raises(make_client, fake_github) -> None:
    fake_github.add("/repos/a/b/statuses/abc123", [{"context": "ci"}, None])
    async with make_client() as client:
        with pytest.raises(GitHubError, match="malformed record"):
            await client.get_statuses("/repos/a/b/statuses/abc123")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "runs",
    [["lint"], [{"name": "lint", "app": "x"}]],
)
async def test_malformed_check_run_raises(make_client, fake_github, runs) -> None:
    fake_github.add(
        "/repos/a/b/commits/abc123/check-runs",
        {"total_count": len(runs), "check_runs": runs},
    )
    async with make_client() as client:
        with pytest.raises(GitHubError, match="malformed record"):
            await client.get_check_runs("a/b", "abc123")


@pytest.mark.asyncio
async def test_null_nested_objects_are_accepted(make_client, fake_github) -> None:
    fake_github.add(
        "/repos/a/b/pulls", [{"number": 1, "user": None, "head": None, "labels": None}]
    )
    async with make_client() as client:
        pulls = await client.list_pulls("a/b")
    assert pulls[0]["number"] == 1
