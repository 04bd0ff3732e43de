"""TUI modal dialogs."""

from prwatch.tui.dialogs.help import HelpDialog

__all__ = [
    "HelpDialog",
]
