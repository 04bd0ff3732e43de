from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.screen import ModalScreen
from textual.widgets import Static

KEYS = [
    ("h / Left", "Previous repository"),
    ("l / Right", "Next repository"),
    ("j / Down", "Next pull request"),
    ("k / Up", "Previous pull request"),
    ("o / Enter", "Open pull request in browser"),
    ("r", "Refresh now"),
    ("?", "Toggle this help"),
    ("q", "Quit"),
]


def help_text(keys: list[tuple[str, str]] = KEYS) -> str:
    width = max(len(key) for key, _ in keys) + 2
    lines = ["[bold]prwatch keys[/bold]", ""]
    lines.extend(f"{escape(key.ljust(width))}{text}" for key, text in keys)
    lines.append("")
    lines.append("[dim]Esc or ? to close[/dim]")
    return "\n".join(lines)


class HelpDialog(ModalScreen[None]):
    """Key reference shown over the board."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Close"),
        ("question_mark", "app.pop_screen", "Close"),
    ]

    DEFAULT_CSS = """
    HelpDialog {
        align: center middle;
    }

    HelpDialog #help-body {
        width: 48;
        height: auto;
        padding: 1 2;
        border: round $accent;
        background: $panel;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(help_text(), id="help-body")
