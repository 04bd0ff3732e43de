from __future__ import annotations

from datetime import datetime, timedelta

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def _now() -> datetime:
    return datetime.now().astimezone()


def _short_date(moment: datetime) -> str:
    return f"{MONTH_NAMES[moment.month - 1]} {moment.day}, {moment.year}"


def format_updated(iso_str: str | None, now: datetime | None = None) -> str:
    """Return "yesterday", "last week" or "on <Mon> <day>, <year>" for a timestamp."""
    if now is None:
        now = _now()
    try:
        then = datetime.fromisoformat(iso_str)
    except (ValueError, TypeError):
        return "?"
    if then.tzinfo is not None and now.tzinfo is not None:
        then = then.astimezone(now.tzinfo)
    elif then.tzinfo is not None or now.tzinfo is not None:
        # Mixed naive/aware: compare wall-clock values.
        then = then.replace(tzinfo=None)
        now = now.replace(tzinfo=None)

    elapsed = now - then
    if elapsed < timedelta(days=1):
        return "yesterday"
    if elapsed < timedelta(days=7):
        return "last week"
    return f"on {_short_date(then)}"


def format_last_updated(now: datetime | None = None) -> str:
    """Return the "Last updated on ..." label for the given moment."""
    if now is None:
        now = _now()
    return f"Last updated on {_short_date(now)}, {now.hour}:{now.minute:02d}"
