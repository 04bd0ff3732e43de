"""Reduce raw commit statuses and check runs to their display records."""

from __future__ import annotations

from typing import Any

from prwatch.models import CheckRunEntry, StatusEntry

TERMINAL_STATES = ("success", "failure")


def merge_statuses(statuses: list[dict[str, Any]]) -> dict[str, StatusEntry]:
    """Combine raw status records into one current entry per context.

    A later record for the same context replaces the stored one unless the
    stored state is already terminal (success or failure).
    """
    combined: dict[str, StatusEntry] = {}
    for status in statuses:
        context = status.get("context")
        current = combined.get(context)
        if current is None or current.state not in TERMINAL_STATES:
            combined[context] = StatusEntry(
                state=status.get("state"),
                description=status.get("description"),
            )
    return combined


def map_check_runs(runs: list[dict[str, Any]]) -> list[CheckRunEntry]:
    """Project raw check runs into display entries, preserving order."""
    entries: list[CheckRunEntry] = []
    for run in runs:
        app = run.get("app") or {}
        entries.append(
            CheckRunEntry(
                app_slug=app.get("slug"),
                name=run.get("name"),
                status=run.get("status"),
                conclusion=run.get("conclusion"),
                details_url=run.get("details_url"),
            )
        )
    return entries


def check_run_state(run: CheckRunEntry) -> str | None:
    """Return the conclusion of a completed run, otherwise its status."""
    if run.status == "completed":
        return run.conclusion
    return run.status
