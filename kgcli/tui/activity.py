# SPDX-License-Identifier: MIT
"""Activity log: one fetched batch, paged locally."""
from typing import List, Optional

try:
    from kgcli.models import Activity
    from kgcli.tui.commands import Command, api_call, emit
    from kgcli.tui.components import Paginator
    from kgcli.tui.controller import ViewController
    from kgcli.tui.formatting import format_activity, format_time_ago
    from kgcli.tui.messages import ActivityError, ActivityFetched, Key, Message, OpenNote
except ImportError:
    from ..models import Activity
    from .commands import Command, api_call, emit
    from .components import Paginator
    from .controller import ViewController
    from .formatting import format_activity, format_time_ago
    from .messages import ActivityError, ActivityFetched, Key, Message, OpenNote

ACTIVITY_FETCH_LIMIT = 50
ACTIVITY_PER_PAGE = 20


class ActivityView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.activities: List[Activity] = []
        self.paginator = Paginator(ACTIVITY_PER_PAGE)
        self.cursor = 0  # absolute index into activities
        self.loading = False
        self.error = ""

    def init(self) -> Optional[Command]:
        self.loading = True
        client = self.client
        return api_call(
            "get_recent_activity",
            lambda: client.get_recent_activity(ACTIVITY_FETCH_LIMIT),
            ActivityFetched,
            ActivityError,
        )

    def update(self, msg: Message) -> Optional[Command]:
        if isinstance(msg, ActivityFetched):
            self.activities = list(msg.activities)
            self.paginator.reset()
            self.paginator.set_total_items(len(self.activities))
            self.cursor = 0
            self.loading = False
        elif isinstance(msg, ActivityError):
            self.error = msg.error
            self.loading = False
        elif isinstance(msg, Key):
            return self._handle_key(msg)
        return None

    def _handle_key(self, msg: Key) -> Optional[Command]:
        start, end = self.paginator.slice_bounds()
        key = msg.key
        if key in ("j", "down"):
            if self.cursor < end - 1:
                self.cursor += 1
        elif key in ("k", "up"):
            if self.cursor > start:
                self.cursor -= 1
        elif key in ("right", "l", "]", "ctrl+n"):
            if self.paginator.next_page():
                self.cursor = self.paginator.slice_bounds()[0]
        elif key in ("left", "h", "[", "ctrl+p"):
            if self.paginator.prev_page():
                self.cursor = self.paginator.slice_bounds()[0]
        elif key == "enter":
            if self.cursor < len(self.activities):
                note_id = self.activities[self.cursor].note_id
                if note_id:
                    return emit(OpenNote(note_id))
        return None

    def render(self) -> str:
        lines = ["RECENT ACTIVITY", ""]
        if self.error:
            lines.append(f"Error: {self.error}")
            return "\n".join(lines)
        if self.loading:
            lines.append("Loading activity...")
            return "\n".join(lines)
        if not self.activities:
            lines.append("No activity yet")
            return "\n".join(lines)

        start, end = self.paginator.slice_bounds()
        for i in range(start, end):
            activity = self.activities[i]
            marker = "▶ " if i == self.cursor else "  "
            lines.append(
                f"{marker}{format_activity(activity)} - {format_time_ago(activity.created_at)}"
            )
        lines += ["", self.paginator.render()]
        return "\n".join(lines)
