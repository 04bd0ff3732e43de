from __future__ import annotations

import re
from typing import Any

from rich.markup import escape
from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import Static

from prwatch.checks import check_run_state
from prwatch.dates import format_updated
from prwatch.models import CheckRunEntry, PullRequest, StatusEntry

STATUS_SYMBOLS = {
    "success": "🟢",
    "failure": "🔴",
    "pending": "🟡",
}

CHECK_RUN_SYMBOLS = {
    "action_required": "🟠",
    "timed_out": "🟠",
    "cancelled": "🟠",
    "success": "🟢",
    "failure": "🔴",
}


def status_symbol(state: str | None) -> str:
    return STATUS_SYMBOLS.get(state or "", "")


def check_run_symbol(state: str | None) -> str:
    return CHECK_RUN_SYMBOLS.get(state or "", "🟡")


def card_id(repo: str, number: int) -> str:
    """Stable key for a pull request card, safe to use as a widget id."""
    return f"pr-{re.sub(r'[^A-Za-z0-9_-]', '-', repo)}-{number}"


def render_status(context: str, status: StatusEntry) -> str:
    text = f"{escape(str(context))}: {escape(str(status.description or ''))}"
    symbol = status_symbol(status.state)
    return f"{symbol} {text}" if symbol else text


def render_check_run(run: CheckRunEntry) -> str:
    name = str(run.name or "?")
    if run.app_slug:
        name = f"{run.app_slug}/{name}"
    return f"{check_run_symbol(check_run_state(run))} {escape(name)}"


def render_labels(pull_request: PullRequest) -> str:
    parts = []
    for label in pull_request.labels:
        if label.color:
            parts.append(f"[black on #{label.color}] {escape(str(label.name))} [/]")
        else:
            parts.append(f"[reverse] {escape(str(label.name))} [/]")
    return " ".join(parts)


class PullRequestCard(Widget, can_focus=True):
    """Card showing one pull request with its statuses and check runs."""

    DEFAULT_CSS = """
    PullRequestCard {
        height: auto;
        min-height: 3;
        padding: 0 1;
        border: solid $secondary;
    }

    PullRequestCard:focus {
        border: heavy $accent;
    }

    PullRequestCard .card-title {
        text-style: bold;
    }

    PullRequestCard .card-meta {
        color: $text-muted;
    }

    PullRequestCard .status-success, PullRequestCard .check-success {
        color: $success;
    }

    PullRequestCard .status-failure, PullRequestCard .check-failure {
        color: $error;
    }

    PullRequestCard .status-pending {
        color: $warning;
    }
    """

    def __init__(self, pull_request: PullRequest, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.pull_request = pull_request

    def compose(self) -> ComposeResult:
        yield from self._build_children()

    def _build_children(self) -> list[Static]:
        pr = self.pull_request
        children: list[Static] = []
        children.append(
            Static(f"#{pr.number} {escape(pr.title)}", classes="card-title")
        )
        meta = f"{escape(pr.author)} updated {format_updated(pr.updated_at)}"
        if pr.comment_count:
            meta += f" | {pr.comment_count} comments"
        children.append(Static(meta, classes="card-meta"))
        if pr.labels:
            children.append(Static(render_labels(pr), classes="card-labels"))
        for context, status in (pr.statuses or {}).items():
            children.append(
                Static(
                    render_status(context, status),
                    classes=f"status-{status.state}",
                )
            )
        for run in pr.check_runs or []:
            children.append(
                Static(
                    render_check_run(run),
                    classes=f"check-{check_run_state(run) or 'unknown'}",
                )
            )
        return children

    def update_data(self, pull_request: PullRequest) -> None:
        """Update card data and rebuild children in-place (no flicker)."""
        self.pull_request = pull_request
        self._rebuild_children()

    def _rebuild_children(self) -> None:
        """Remove existing child widgets and mount fresh ones."""
        for child in list(self.children):
            child.remove()
        for widget in self._build_children():
            self.mount(widget)
