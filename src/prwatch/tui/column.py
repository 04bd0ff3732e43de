from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static

from prwatch.models import PullRequest
from prwatch.tui.card import PullRequestCard, card_id


class RepoColumn(VerticalScroll):
    """A single column on the board listing one repository's pull requests."""

    DEFAULT_CSS = """
    RepoColumn {
        width: 1fr;
        height: 100%;
        border: solid $secondary;
        padding: 0 1;
    }

    RepoColumn .column-header {
        text-style: bold;
        text-align: center;
        width: 100%;
        margin: 0 0 1 0;
    }

    RepoColumn .empty-label {
        color: $text-muted;
        text-align: center;
    }
    """

    def __init__(self, repo: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.repo = repo
        self.card_map: dict[str, PullRequestCard] = {}
        self._empty_label: Static | None = None

    def compose(self) -> ComposeResult:
        yield Static(f"{self.repo} (0)", classes="column-header")

    def update_cards(
        self, pull_requests: list[PullRequest], prune: bool = True
    ) -> None:
        """Diff-based update: reuse existing cards, only add/remove as needed.

        Cards missing from ``pull_requests`` are removed only when ``prune``
        is set, so a partially delivered cycle never drops the focused card.
        """
        incoming = {card_id(pr.repo, pr.number): pr for pr in pull_requests}

        if prune:
            for gone in set(self.card_map) - set(incoming):
                self.card_map.pop(gone).remove()

        if not incoming and not self.card_map:
            if self._empty_label is None:
                self._empty_label = Static(
                    "(no open pull requests)", classes="empty-label"
                )
                self.mount(self._empty_label)
        elif self._empty_label is not None:
            self._empty_label.remove()
            self._empty_label = None

        for key, pr in incoming.items():
            if key in self.card_map:
                if self.card_map[key].pull_request is not pr:
                    self.card_map[key].update_data(pr)
            else:
                card = PullRequestCard(pr)
                self.card_map[key] = card
                self.mount(card)

        self.query_one(".column-header", Static).update(
            f"{self.repo} ({len(self.card_map)})"
        )

    def get_focusable_cards(self) -> list[PullRequestCard]:
        """Return all focusable card widgets in this column."""
        return list(self.card_map.values())
