"""Fetch cycle: list pull requests, enrich them, and dispatch update events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from prwatch.checks import map_check_runs, merge_statuses
from prwatch.config import Config
from prwatch.github import GitHubClient, GitHubError
from prwatch.models import (
    Event,
    FetchFailed,
    Label,
    PullRequest,
    PullRequestReady,
    RepositoryFetched,
    ViewState,
)
from prwatch.state import update_state

logger = logging.getLogger(__name__)

Dispatch = Callable[[Event], None]


class EnrichmentError(Exception):
    """Raised when one or more pull requests of a repository failed to enrich."""

    def __init__(self, repo: str, errors: list[GitHubError], total: int) -> None:
        self.repo = repo
        self.errors = errors
        self.total = total
        super().__init__(
            f"{len(errors)} of {total} pull requests in {repo} could not be "
            f"loaded: {errors[0]}"
        )


def parse_pull_request(raw: dict[str, Any], repo: str) -> PullRequest:
    """Build a PullRequest from a pull request listing record."""
    user = raw.get("user") or {}
    head = raw.get("head") or {}
    return PullRequest(
        number=raw.get("number", 0),
        title=str(raw.get("title") or ""),
        url=raw.get("html_url", ""),
        author=str(user.get("login") or ""),
        repo=repo,
        comment_count=raw.get("comments", 0),
        labels=[
            Label(
                name=str(label.get("name") or ""),
                color=str(label.get("color") or ""),
            )
            for label in raw.get("labels") or []
        ],
        updated_at=raw.get("updated_at", ""),
        state=raw.get("state", ""),
        statuses_url=raw.get("statuses_url"),
        head_sha=head.get("sha"),
    )


def filter_pull_requests(
    pulls: list[dict[str, Any]], username: str
) -> list[dict[str, Any]]:
    """Keep open pull requests authored by ``username``."""
    return [
        pr
        for pr in pulls
        if (pr.get("user") or {}).get("login") == username
        and pr.get("state") == "open"
    ]


def sha_from_statuses_url(statuses_url: str) -> str:
    """Return the commit SHA, the last path segment of a statuses URL."""
    return statuses_url.rstrip("/").split("/")[-1]


async def enrich_pull_request(
    client: GitHubClient, pull_request: PullRequest
) -> PullRequest:
    """Attach merged statuses and check runs to ``pull_request`` in place.

    The check-run request is only issued once the status request has
    completed; the SHA is taken from the statuses URL.
    """
    if pull_request.statuses_url:
        statuses_url = pull_request.statuses_url
    else:
        statuses_url = f"/repos/{pull_request.repo}/statuses/{pull_request.head_sha}"
    sha = sha_from_statuses_url(statuses_url)

    statuses = await client.get_statuses(statuses_url)
    pull_request.statuses = merge_statuses(statuses)

    runs = await client.get_check_runs(pull_request.repo, sha)
    pull_request.check_runs = map_check_runs(runs)
    return pull_request


async def fetch_repository(
    client: GitHubClient,
    repo: str,
    username: str,
    cycle: int,
    dispatch: Dispatch,
) -> int:
    """Fetch and enrich one repository's pull requests, dispatching as they finish.

    Returns the number of pull requests dispatched. A listing failure raises
    ``GitHubError`` before anything is dispatched; enrichment failures are
    collected and raised together as ``EnrichmentError`` once every sibling
    has settled.
    """
    raw = await client.list_pulls(repo)
    mine = [parse_pull_request(pr, repo) for pr in filter_pull_requests(raw, username)]
    logger.debug(
        "%s: %d of %d pull requests match %s", repo, len(mine), len(raw), username
    )

    async def _enrich_and_dispatch(pull_request: PullRequest) -> None:
        await enrich_pull_request(client, pull_request)
        dispatch(PullRequestReady(cycle=cycle, repo=repo, pull_request=pull_request))

    results = await asyncio.gather(
        *(_enrich_and_dispatch(pr) for pr in mine), return_exceptions=True
    )

    errors: list[GitHubError] = []
    for result in results:
        if isinstance(result, GitHubError):
            errors.append(result)
        elif isinstance(result, BaseException):
            raise result
    if errors:
        raise EnrichmentError(repo, errors, total=len(mine))

    dispatch(RepositoryFetched(cycle=cycle, repo=repo, count=len(mine)))
    return len(mine)


class FetchOrchestrator:
    """Runs fetch cycles across every configured repository.

    Each cycle gets a monotonically increasing id that is attached to every
    event it dispatches, so the reducer can discard events from a cycle that
    has been superseded.
    """

    def __init__(self, config: Config, client: GitHubClient) -> None:
        self.config = config
        self.client = client
        self._cycle = 0
        self._in_flight = 0

    @property
    def cycle(self) -> int:
        return self._cycle

    @property
    def in_flight(self) -> bool:
        """True while at least one cycle is still running."""
        return self._in_flight > 0

    async def run_cycle(self, dispatch: Dispatch) -> int:
        """Run one cycle; returns its id.

        Every repository task runs to completion. An unexpected exception
        from one of them is re-raised only after its siblings have settled.
        """
        self._cycle += 1
        cycle = self._cycle
        self._in_flight += 1
        logger.info("Cycle %d: fetching %d repositories", cycle, len(self.config.repos))
        try:
            results = await asyncio.gather(
                *(self._fetch_one(repo, cycle, dispatch) for repo in self.config.repos),
                return_exceptions=True,
            )
        finally:
            self._in_flight -= 1
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return cycle

    async def _fetch_one(self, repo: str, cycle: int, dispatch: Dispatch) -> None:
        try:
            await fetch_repository(
                self.client, repo, self.config.username, cycle, dispatch
            )
        except (GitHubError, EnrichmentError) as e:
            logger.warning("Cycle %d: %s", cycle, e)
            dispatch(FetchFailed(cycle=cycle, error=str(e), repo=repo))


async def fetch_view_state(
    config: Config, client: GitHubClient | None = None
) -> ViewState:
    """Run a single cycle and return the resulting view state."""
    state = ViewState()

    def dispatch(event: Event) -> None:
        update_state(event, state)

    if client is None:
        async with GitHubClient(config) as owned:
            await FetchOrchestrator(config, owned).run_cycle(dispatch)
    else:
        await FetchOrchestrator(config, client).run_cycle(dispatch)
    return state
