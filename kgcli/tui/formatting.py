#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Shared formatting utilities for TUI views.

Relative times, durations, truncation and activity descriptions used by
the dashboard, list, activity and status views.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

try:
    from kgcli.models import Activity
except ImportError:
    from ..models import Activity


ACTION_LABELS = {
    "create": "Created",
    "update": "Updated",
    "delete": "Deleted",
    "view": "Viewed",
    "search": "Searched",
    "link": "Linked",
    "login": "Logged in",
    "logout": "Logged out",
}


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def format_time_ago(dt: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Format a timestamp relative to now ("5 minutes ago", "Jan 2, 2006").

    Anything older than 30 days is shown as an absolute date.
    """
    if dt is None:
        return "never"
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    diff = _now(now) - dt

    if diff < timedelta(minutes=1):
        return "Just now"
    if diff < timedelta(hours=1):
        minutes = int(diff.total_seconds() // 60)
        return "1 minute ago" if minutes == 1 else f"{minutes} minutes ago"
    if diff < timedelta(days=1):
        hours = int(diff.total_seconds() // 3600)
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    if diff < timedelta(days=30):
        days = diff.days
        return "1 day ago" if days == 1 else f"{days} days ago"
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


def format_duration(delta: timedelta) -> str:
    """Format a remaining duration coarsely ("4 minutes", "about 2 hours")."""
    seconds = delta.total_seconds()
    if seconds < 60:
        return "less than 1 minute"
    if seconds < 3600:
        minutes = int(seconds // 60)
        return "1 minute" if minutes == 1 else f"{minutes} minutes"
    hours = int(seconds // 3600)
    return "about 1 hour" if hours == 1 else f"about {hours} hours"


def format_date(dt: Optional[datetime]) -> str:
    if dt is None:
        return "-"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def truncate_text(text: str, max_len: int) -> str:
    """Truncate to max_len characters, ending in "..." when cut."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[: max_len - 3] + "..."


def action_label(action: str) -> str:
    return ACTION_LABELS.get(action, action.capitalize())


def activity_title(activity: Activity) -> str:
    """Title of the note an activity refers to, from its metadata."""
    for key in ("note_title", "title"):
        value = activity.metadata.get(key)
        if isinstance(value, str) and value:
            return value
    return "Unknown Note"


def format_activity(activity: Activity) -> str:
    """One-line description, e.g. 'Created "Weekly review"'."""
    if activity.action == "search":
        query = activity.metadata.get("query")
        if isinstance(query, str) and query:
            return f'Searched "{query}"'
    if activity.action in ("login", "logout"):
        return action_label(activity.action)
    return f'{action_label(activity.action)} "{activity_title(activity)}"'
