"""Fold fetch events into the bounded view state read by the board."""

from __future__ import annotations

from datetime import datetime

from prwatch.dates import format_last_updated
from prwatch.models import (
    LOADING_MESSAGE,
    FetchFailed,
    PullRequestReady,
    RepositoryFetched,
    ViewState,
)

MAX_PULL_REQUESTS_PER_REPO = 10


def _enter_cycle(state: ViewState, repo: str, cycle: int) -> bool:
    """Reset ``repo`` on the first event of a newer cycle.

    Returns False when the event belongs to a cycle older than the one
    already applied for ``repo``.
    """
    seen = state.repo_cycles.get(repo)
    if seen is not None and cycle < seen:
        return False
    if seen is None or cycle > seen:
        state.display_issues[repo] = []
        state.repo_cycles[repo] = cycle
    state.cycle = max(state.cycle, cycle)
    return True


def update_state(
    event: object, state: ViewState, now: datetime | None = None
) -> ViewState:
    """Apply one event to ``state`` in place and return it."""
    if isinstance(event, FetchFailed):
        if event.cycle >= state.cycle:
            state.cycle = event.cycle
            state.warning = event.error
        return state

    if isinstance(event, PullRequestReady):
        if not _enter_cycle(state, event.repo, event.cycle):
            return state
        state.warning = None
        issues = state.display_issues[event.repo]
        issues.append(event.pull_request)
        del issues[:-MAX_PULL_REQUESTS_PER_REPO]
        state.last_checked = format_last_updated(now)
    elif isinstance(event, RepositoryFetched):
        if not _enter_cycle(state, event.repo, event.cycle):
            return state
        state.finished_cycles[event.repo] = event.cycle
        if state.warning == LOADING_MESSAGE:
            state.warning = None
        state.last_checked = format_last_updated(now)

    return state


def finished_repos(state: ViewState) -> set[str]:
    """Repositories whose current cycle has delivered its whole listing."""
    return {
        repo
        for repo, cycle in state.finished_cycles.items()
        if state.repo_cycles.get(repo) == cycle
    }
