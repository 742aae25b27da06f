# SPDX-License-Identifier: MIT
"""Dashboard: stats, recent activity and trending notes.

The three sections are fetched independently at init and rendered as they
arrive, in whatever order the results come back.
"""
from typing import List, Optional

try:
    from kgcli.models import Activity, TrendingNote, UserStats
    from kgcli.tui.commands import Command, api_call, batch, emit
    from kgcli.tui.controller import ViewController
    from kgcli.tui.formatting import format_activity, format_time_ago, truncate_text
    from kgcli.tui.messages import (
        DashboardError,
        Key,
        Message,
        RecentActivityFetched,
        ShowNoteList,
        StatsFetched,
        TrendingFetched,
    )
except ImportError:
    from ..models import Activity, TrendingNote, UserStats
    from .commands import Command, api_call, batch, emit
    from .controller import ViewController
    from .formatting import format_activity, format_time_ago, truncate_text
    from .messages import (
        DashboardError,
        Key,
        Message,
        RecentActivityFetched,
        ShowNoteList,
        StatsFetched,
        TrendingFetched,
    )

RECENT_ACTIVITY_LIMIT = 5
TRENDING_LIMIT = 5


class DashboardView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.stats: Optional[UserStats] = None
        self.activities: Optional[List[Activity]] = None
        self.trending: Optional[List[TrendingNote]] = None
        self.errors: dict = {}

    @property
    def loading(self) -> bool:
        return self.stats is None and "stats" not in self.errors

    def init(self) -> Optional[Command]:
        client = self.client
        return batch(
            api_call(
                "get_stats",
                client.get_stats,
                StatsFetched,
                lambda err: DashboardError("stats", err),
            ),
            api_call(
                "get_recent_activity",
                lambda: client.get_recent_activity(RECENT_ACTIVITY_LIMIT),
                RecentActivityFetched,
                lambda err: DashboardError("activity", err),
            ),
            api_call(
                "get_trending_notes",
                lambda: client.get_trending_notes(TRENDING_LIMIT),
                TrendingFetched,
                lambda err: DashboardError("trending", err),
            ),
        )

    def update(self, msg: Message) -> Optional[Command]:
        if isinstance(msg, StatsFetched):
            self.stats = msg.stats
            self.errors.pop("stats", None)
        elif isinstance(msg, RecentActivityFetched):
            self.activities = list(msg.activities)
            self.errors.pop("activity", None)
        elif isinstance(msg, TrendingFetched):
            self.trending = list(msg.trending)
            self.errors.pop("trending", None)
        elif isinstance(msg, DashboardError):
            self.errors[msg.section] = msg.error
        elif isinstance(msg, Key):
            if msg.key == "l":
                return emit(ShowNoteList())
            if msg.key == "r":
                self.stats = self.activities = self.trending = None
                self.errors = {}
                return self.init()
        return None

    def render(self) -> str:
        if self.loading:
            return "Loading dashboard..."
        lines = ["STATISTICS", ""]
        if self.stats is not None:
            s = self.stats
            lines += [
                f"  Total Notes:   {s.total_notes}",
                f"  Total Tags:    {s.total_tags}",
                f"  Total Links:   {s.total_links}",
                f"  Total Words:   {s.total_words}",
                f"  Created Today: {s.notes_created_today}",
                f"  This Week:     {s.notes_created_this_week}",
            ]
            if s.last_activity is not None:
                lines.append(f"  Last Activity: {format_time_ago(s.last_activity)}")
        else:
            lines.append(f"  Error: {self.errors['stats']}")

        lines += ["", "RECENT ACTIVITY", ""]
        if "activity" in self.errors:
            lines.append(f"  Error: {self.errors['activity']}")
        elif self.activities is None:
            lines.append("  Loading...")
        elif not self.activities:
            lines.append("  No recent activity")
        else:
            for activity in self.activities:
                lines.append(
                    f"  • {format_activity(activity)} - {format_time_ago(activity.created_at)}"
                )

        lines += ["", "TRENDING NOTES", ""]
        if "trending" in self.errors:
            lines.append(f"  Error: {self.errors['trending']}")
        elif self.trending is None:
            lines.append("  Loading...")
        elif not self.trending:
            lines.append("  No trending notes")
        else:
            for i, item in enumerate(self.trending, 1):
                title = item.note.title if item.note else "Unknown Note"
                lines.append(f"  {i}. {truncate_text(title, 50)}")
                lines.append(f"     Accessed {item.access_count} times recently")

        lines += [
            "",
            "QUICK ACTIONS",
            "",
            "  [n] New note   [s] Search   [l] List notes   [t] Tags",
            "  [a] Activity   [g] Graph    [r] Refresh      [?] Help",
        ]
        return "\n".join(lines)
