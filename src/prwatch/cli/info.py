from __future__ import annotations

import asyncio
import logging

import click

from prwatch.checks import check_run_state
from prwatch.cli.utils import _load_config, _setup_logging, repo_option, user_option
from prwatch.dates import format_updated
from prwatch.fetch import fetch_view_state
from prwatch.models import ViewState
from prwatch.tui.card import check_run_symbol, status_symbol


def _format_view_state(state: ViewState, repos: list[str]) -> list[str]:
    """Render the view state as plain text lines."""
    lines: list[str] = []
    if state.warning:
        lines.append(f"Warning: {state.warning}")
    for repo in repos:
        if repo not in state.display_issues:
            continue
        issues = state.display_issues[repo]
        lines.append(f"{repo} ({len(issues)})")
        for pr in issues:
            lines.append(
                f"  #{pr.number!s:<5} {pr.title}  "
                f"[{pr.author}, updated {format_updated(pr.updated_at)}, "
                f"{pr.comment_count} comments]"
            )
            for context, status in pr.statuses.items():
                symbol = status_symbol(status.state) or "-"
                lines.append(f"      {symbol} {context}: {status.description or ''}")
            for run in pr.check_runs:
                symbol = check_run_symbol(check_run_state(run))
                lines.append(f"      {symbol} {run.app_slug or '?'}/{run.name or '?'}")
    if state.last_checked:
        lines.append(state.last_checked)
    return lines


@click.command("list")
@repo_option
@user_option
@click.option("-v", "--verbose", is_flag=True, help="Log requests to stderr.")
def list_cmd(repos: tuple[str, ...], username: str | None, verbose: bool) -> None:
    """Fetch once and print open pull requests with their checks."""
    config = _load_config(repos, username)
    _setup_logging(logging.DEBUG if verbose else logging.WARNING)

    state = asyncio.run(fetch_view_state(config))
    if not any(state.display_issues.values()) and not state.warning:
        click.echo("No open pull requests found.")
        return
    for line in _format_view_state(state, config.repos):
        click.echo(line)
