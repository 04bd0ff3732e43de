from __future__ import annotations

import logging
from pathlib import Path

import click

from prwatch.config import Config, ConfigError, get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

repo_option = click.option(
    "--repo",
    "repos",
    multiple=True,
    help="Repository to watch as owner/name (repeatable; overrides config).",
)
user_option = click.option(
    "--user", "username", default=None, help="GitHub username (overrides config)."
)


def _load_config(repos: tuple[str, ...], username: str | None) -> Config:
    """Load config, apply CLI overrides, and validate it."""
    try:
        config = get_config().with_overrides(repos=repos, username=username)
        config.validate()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if not config.token:
        click.echo(
            "Warning: no GitHub token found; requests are unauthenticated.", err=True
        )
    return config


def _setup_logging(level: int, log_file: Path | None = None) -> None:
    handlers: list[logging.Handler] = []
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))
    else:
        handlers.append(logging.StreamHandler())
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
