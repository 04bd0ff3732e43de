from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal

from prwatch.models import PullRequest
from prwatch.tui.column import RepoColumn


class PullRequestBoard(Horizontal):
    """The main board with one column per watched repository."""

    DEFAULT_CSS = """
    PullRequestBoard {
        width: 100%;
        height: 1fr;
    }
    """

    def __init__(self, repos: list[str], **kwargs) -> None:
        super().__init__(**kwargs)
        self.repos = list(repos)
        self.columns: dict[str, RepoColumn] = {}

    def compose(self) -> ComposeResult:
        for idx, repo in enumerate(self.repos):
            col = RepoColumn(repo, id=f"col-{idx}")
            self.columns[repo] = col
            yield col

    def refresh_data(
        self,
        display_issues: dict[str, list[PullRequest]],
        finished: set[str] | frozenset[str] = frozenset(),
    ) -> None:
        """Refresh columns for every repository that has been fetched.

        Closed pull requests are pruned only from repositories in ``finished``.
        """
        for repo, col in self.columns.items():
            if repo in display_issues:
                col.update_cards(display_issues[repo], prune=repo in finished)
