from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

LOADING_MESSAGE = "Fetching GitHub data ..."


@dataclass
class Label:
    name: str
    color: str


@dataclass
class StatusEntry:
    state: str  # success, failure, pending, error
    description: str | None


@dataclass
class CheckRunEntry:
    app_slug: str | None
    name: str | None
    status: str | None  # queued, in_progress, completed
    conclusion: str | None  # success, failure, cancelled, timed_out, ...
    details_url: str | None


@dataclass
class PullRequest:
    number: int
    title: str
    url: str
    author: str
    repo: str  # owner/name
    comment_count: int
    labels: list[Label]
    updated_at: str
    state: str  # open, closed
    statuses_url: str | None = None
    head_sha: str | None = None
    statuses: dict[str, StatusEntry] = field(default_factory=dict)
    check_runs: list[CheckRunEntry] = field(default_factory=list)


@dataclass
class PullRequestReady:
    """One enriched pull request is ready for display."""

    type: ClassVar[str] = "PR_FETCH"

    cycle: int
    repo: str
    pull_request: PullRequest


@dataclass
class RepositoryFetched:
    """A repository's listing has been fully processed for a cycle."""

    type: ClassVar[str] = "REPO_DONE"

    cycle: int
    repo: str
    count: int


@dataclass
class FetchFailed:
    type: ClassVar[str] = "FETCH_FAILED"

    cycle: int
    error: str
    repo: str | None = None


Event = PullRequestReady | RepositoryFetched | FetchFailed


@dataclass
class ViewState:
    warning: str | None = LOADING_MESSAGE
    display_issues: dict[str, list[PullRequest]] = field(default_factory=dict)
    last_checked: str = ""
    # Latest fetch cycle applied per repository, and overall.
    repo_cycles: dict[str, int] = field(default_factory=dict)
    cycle: int = 0
    # Latest cycle whose listing completed, per repository.
    finished_cycles: dict[str, int] = field(default_factory=dict)
