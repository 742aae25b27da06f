# SPDX-License-Identifier: MIT
"""Messages consumed by the dispatcher's update loop.

Every message is an immutable dataclass. Commands produce exactly one of
these; key presses and terminal resizes arrive as Key and Resize. Result
messages for a specific subject (a note id, a search query) carry that
subject so a receiver can drop results that no longer match.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, List, Optional, Tuple

try:
    from kgcli.models import (
        Activity,
        GraphResponse,
        Note,
        SearchResponse,
        Tag,
        TrendingNote,
        UserStats,
    )
    from kgcli.tui.views import View
except ImportError:
    from ..models import (
        Activity,
        GraphResponse,
        Note,
        SearchResponse,
        Tag,
        TrendingNote,
        UserStats,
    )
    from .views import View

# Textual key names that are not printable even though they are one "key"
_NAMED_KEYS = {"space", "tab", "enter", "escape", "backspace", "delete"}


class Message:
    """Base class for every loop message."""


# =============================================================================
# Terminal input
# =============================================================================


@dataclass(frozen=True)
class Key(Message):
    """A key press.

    ``key`` is the routing name: the printable character itself for
    ordinary keys ("a", "?", "/", "+"), otherwise the Textual key name
    ("escape", "enter", "ctrl+n", "up"). ``character`` is what a text
    field should insert, or None.
    """
    key: str
    character: Optional[str] = None

    @classmethod
    def of(cls, name: str) -> "Key":
        """Build a Key from a routing name; single characters are printable."""
        if name == "space":
            return cls("space", " ")
        if len(name) == 1:
            return cls(name, name)
        return cls(name, None)

    @classmethod
    def from_textual(cls, key: str, character: Optional[str]) -> "Key":
        if character and len(character) == 1 and character.isprintable():
            if key in _NAMED_KEYS:
                return cls(key, character if key == "space" else None)
            return cls(character, character)
        return cls(key, None)

    @property
    def printable(self) -> bool:
        return bool(self.character) and self.character.isprintable()


@dataclass(frozen=True)
class Resize(Message):
    width: int
    height: int


# =============================================================================
# Navigation
# =============================================================================


@dataclass(frozen=True)
class SwitchView(Message):
    view: View


@dataclass(frozen=True)
class ShowHelp(Message):
    pass


@dataclass(frozen=True)
class ShowDashboard(Message):
    pass


@dataclass(frozen=True)
class ShowNoteList(Message):
    pass


@dataclass(frozen=True)
class ViewBack(Message):
    """Return to the single remembered previous view."""


@dataclass(frozen=True)
class OpenNote(Message):
    note_id: str


@dataclass(frozen=True)
class EditNote(Message):
    note_id: str


@dataclass(frozen=True)
class FilterNotesByTag(Message):
    tag_id: str
    tag_name: str


@dataclass(frozen=True)
class Quit(Message):
    pass


# =============================================================================
# Notifications
# =============================================================================


@dataclass(frozen=True)
class ErrorMsg(Message):
    """Unexpected failure surfaced as an auto-clearing notification."""
    message: str


@dataclass(frozen=True)
class ClearNotification(Message):
    """Clear the overlay if it still shows the notification ``generation``."""
    generation: int


@dataclass(frozen=True)
class NotificationTick(Message):
    """Recurring one-second tick that expires overdue notifications."""


# =============================================================================
# Session
# =============================================================================


@dataclass(frozen=True)
class SessionValid(Message):
    pass


@dataclass(frozen=True)
class SessionExpiringSoon(Message):
    remaining: timedelta


@dataclass(frozen=True)
class SessionExpired(Message):
    pass


@dataclass(frozen=True)
class SessionCheckFailed(Message):
    """The liveness probe could not reach the server (not an auth failure)."""
    error: str


# =============================================================================
# Dashboard
# =============================================================================


@dataclass(frozen=True)
class StatsFetched(Message):
    stats: UserStats


@dataclass(frozen=True)
class RecentActivityFetched(Message):
    activities: List[Activity]


@dataclass(frozen=True)
class TrendingFetched(Message):
    trending: List[TrendingNote]


@dataclass(frozen=True)
class DashboardError(Message):
    section: str
    error: str


# =============================================================================
# Note list
# =============================================================================


@dataclass(frozen=True)
class NotesFetched(Message):
    notes: List[Note]
    total: int
    page: int
    tag_id: Optional[str] = None
    search: str = ""


@dataclass(frozen=True)
class NotesError(Message):
    error: str
    page: int = 1
    tag_id: Optional[str] = None
    search: str = ""


# =============================================================================
# Note detail
# =============================================================================


@dataclass(frozen=True)
class NoteFetched(Message):
    note_id: str
    note: Note


@dataclass(frozen=True)
class NoteFetchError(Message):
    note_id: str
    error: str


@dataclass(frozen=True)
class TabFetched(Message):
    """Tags, links or backlinks of a note; ``tab`` names which."""
    note_id: str
    tab: str
    items: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class TabError(Message):
    note_id: str
    tab: str
    error: str


@dataclass(frozen=True)
class AvailableTagsFetched(Message):
    note_id: str
    tags: List[Tag]


@dataclass(frozen=True)
class NoteTagChanged(Message):
    """A tag was added to or removed from a note."""
    note_id: str
    tag_id: str
    added: bool


@dataclass(frozen=True)
class NoteDeleted(Message):
    note_id: str


@dataclass(frozen=True)
class NoteDeleteError(Message):
    note_id: str
    error: str


# =============================================================================
# Note create / edit
# =============================================================================


@dataclass(frozen=True)
class NoteCreated(Message):
    note_id: str


@dataclass(frozen=True)
class NoteUpdated(Message):
    note_id: str


@dataclass(frozen=True)
class NoteSaveError(Message):
    error: str


# =============================================================================
# Tags
# =============================================================================


@dataclass(frozen=True)
class TagsFetched(Message):
    tags: List[Tag]


@dataclass(frozen=True)
class TagsError(Message):
    error: str


@dataclass(frozen=True)
class TagCreated(Message):
    tag: Tag


@dataclass(frozen=True)
class TagUpdated(Message):
    tag: Tag


@dataclass(frozen=True)
class TagDeleted(Message):
    tag_id: str


# =============================================================================
# Search
# =============================================================================


@dataclass(frozen=True)
class SearchResults(Message):
    query: str
    page: int
    response: SearchResponse


@dataclass(frozen=True)
class SearchError(Message):
    query: str
    error: str
    page: int = 1


# =============================================================================
# Activity and graph
# =============================================================================


@dataclass(frozen=True)
class ActivityFetched(Message):
    activities: List[Activity]


@dataclass(frozen=True)
class ActivityError(Message):
    error: str


@dataclass(frozen=True)
class GraphFetched(Message):
    graph: GraphResponse


@dataclass(frozen=True)
class GraphError(Message):
    error: str


# Result errors the dispatcher echoes to the status bar before routing on
OVERLAY_ERRORS: Tuple[type, ...] = (
    NoteSaveError,
    TagsError,
    SearchError,
    ActivityError,
    GraphError,
)
