from __future__ import annotations

import logging
import webbrowser

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import DescendantFocus
from textual.widgets import Footer, Header, Static

from prwatch.config import Config
from prwatch.fetch import FetchOrchestrator
from prwatch.github import GitHubClient
from prwatch.models import Event, FetchFailed, RepositoryFetched, ViewState
from prwatch.state import finished_repos, update_state
from prwatch.tui.board import PullRequestBoard
from prwatch.tui.card import PullRequestCard
from prwatch.tui.column import RepoColumn
from prwatch.tui.dialogs import HelpDialog

logger = logging.getLogger(__name__)


class PRWatchApp(App):
    """Board of the configured user's open pull requests, refreshed on a timer."""

    TITLE = "prwatch"

    CSS = """
    Screen {
        layout: vertical;
    }

    #warning {
        height: auto;
        padding: 0 1;
        background: $warning 30%;
    }

    #status-bar {
        dock: bottom;
        height: 3;
        padding: 0 1;
        background: $boost;
    }

    #status-keys {
        width: 100%;
    }

    #last-checked {
        width: 100%;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("question_mark", "help", "Help", show=True),
        Binding("h,left", "prev_column", "Prev repo", show=False),
        Binding("l,right", "next_column", "Next repo", show=False),
        Binding("j,down", "next_card", "Next PR", show=False),
        Binding("k,up", "prev_card", "Prev PR", show=False),
        Binding("o,enter", "open_pr", "Open", show=True),
        Binding("r", "refresh", "Refresh", show=True),
    ]

    def __init__(
        self,
        config: Config,
        client: GitHubClient | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.settings = config
        self.client = client or GitHubClient(config)
        self.orchestrator = FetchOrchestrator(config, self.client)
        self.view_state = ViewState()
        self.active_column_idx = 0
        self.last_focused_card: PullRequestCard | None = None

    def on_descendant_focus(self, event: DescendantFocus) -> None:
        if isinstance(event.widget, PullRequestCard):
            self.last_focused_card = event.widget

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="warning")
        yield PullRequestBoard(self.settings.repos, id="board")
        with Horizontal(id="status-bar"):
            yield Static(
                "[o]pen [r]efresh [?]help [q]uit",
                id="status-keys",
            )
            yield Static("", id="last-checked")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = f"Pull requests for {self.settings.username}"
        self._render_state()
        self.action_refresh()
        self.set_interval(self.settings.refresh_interval, self.action_refresh)

    async def on_unmount(self) -> None:
        await self.client.aclose()

    # -- Fetching --

    def action_refresh(self) -> None:
        """Start a fetch cycle, cancelling one still in flight."""
        self.run_worker(self._run_cycle(), exclusive=True, group="fetch")

    async def _run_cycle(self) -> None:
        try:
            cycle = await self.orchestrator.run_cycle(self.apply_event)
        except Exception as e:
            logger.exception("Fetch cycle %d failed", self.orchestrator.cycle)
            self.apply_event(
                FetchFailed(cycle=self.orchestrator.cycle, error=f"Fetch failed: {e}")
            )
        else:
            logger.debug("Cycle %d finished", cycle)
        self._render_state()

    def apply_event(self, event: Event) -> None:
        """Fold an event into the view state and re-render."""
        if isinstance(event, RepositoryFetched):
            logger.debug(
                "Cycle %d: %s has %d open pull requests",
                event.cycle,
                event.repo,
                event.count,
            )
        update_state(event, self.view_state)
        self._render_state()

    def _render_state(self) -> None:
        state = self.view_state
        warning = self.query_one("#warning", Static)
        warning.update(escape(state.warning or ""))
        warning.display = bool(state.warning)

        board = self._get_board()
        board.refresh_data(state.display_issues, finished_repos(state))
        if self.last_focused_card is not None and not any(
            self.last_focused_card in col.get_focusable_cards()
            for col in board.columns.values()
        ):
            self.last_focused_card = None

        last_checked = state.last_checked
        if self.orchestrator.in_flight:
            last_checked = f"{last_checked} (refreshing...)".lstrip()
        self.query_one("#last-checked", Static).update(last_checked)

    # -- Navigation --

    def _get_board(self) -> PullRequestBoard:
        return self.query_one("#board", PullRequestBoard)

    def _get_active_column(self) -> RepoColumn | None:
        columns = list(self._get_board().columns.values())
        if not columns:
            return None
        return columns[min(self.active_column_idx, len(columns) - 1)]

    def _get_focused_card(self) -> PullRequestCard | None:
        focused = self.focused
        if isinstance(focused, PullRequestCard):
            return focused
        return None

    def action_prev_column(self) -> None:
        self._jump_to_next_column(direction=-1, focus="first")

    def action_next_column(self) -> None:
        self._jump_to_next_column(direction=1, focus="first")

    def action_next_card(self) -> None:
        col = self._get_active_column()
        if col is None:
            return
        cards = col.get_focusable_cards()
        focused = self._get_focused_card()
        if cards and focused in cards:
            idx = cards.index(focused)
            if idx < len(cards) - 1:
                cards[idx + 1].focus()
                return
        elif cards:
            cards[0].focus()
            return
        self._jump_to_next_column(direction=1, focus="first")

    def action_prev_card(self) -> None:
        col = self._get_active_column()
        if col is None:
            return
        cards = col.get_focusable_cards()
        focused = self._get_focused_card()
        if cards and focused in cards:
            idx = cards.index(focused)
            if idx > 0:
                cards[idx - 1].focus()
                return
        self._jump_to_next_column(direction=-1, focus="last")

    def _jump_to_next_column(self, direction: int, focus: str) -> None:
        """Move to the next/prev column that has cards."""
        columns = list(self._get_board().columns.values())
        idx = self.active_column_idx + direction
        while 0 <= idx < len(columns):
            cards = columns[idx].get_focusable_cards()
            if cards:
                self.active_column_idx = idx
                (cards[0] if focus == "first" else cards[-1]).focus()
                return
            idx += direction

    # -- Actions --

    def action_open_pr(self) -> None:
        card = self._get_focused_card() or self.last_focused_card
        if card is None or not card.pull_request.url:
            self.notify("No pull request selected", severity="warning")
            return
        webbrowser.open(card.pull_request.url)

    def action_help(self) -> None:
        self.push_screen(HelpDialog())
