from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

import click

from prwatch.cli.utils import _load_config, _setup_logging, repo_option, user_option
from prwatch.config import ensure_config


@click.command()
@repo_option
@user_option
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write debug logs to this file.",
)
def board(repos: tuple[str, ...], username: str | None, log_file: Path | None) -> None:
    """Open the pull request board TUI."""
    from prwatch.tui.app import PRWatchApp

    config = _load_config(repos, username)
    if log_file is not None:
        _setup_logging(logging.DEBUG, log_file)

    app = PRWatchApp(config)
    app.run()


@click.command()
@click.option("--edit", is_flag=True, help="Open config in $EDITOR.")
def config(edit: bool) -> None:
    """View or edit configuration."""
    config_path = ensure_config()

    if edit:
        editor = os.environ.get("EDITOR", "vi")
        subprocess.run([editor, str(config_path)])
    else:
        click.echo(config_path.read_text())
