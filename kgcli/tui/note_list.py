# SPDX-License-Identifier: MIT
"""Paginated note listing with optional search text and tag filter."""
from typing import List, Optional

try:
    from kgcli.models import Note, NoteFilter
    from kgcli.tui.commands import Command, api_call, emit
    from kgcli.tui.components import Paginator, TextInput
    from kgcli.tui.controller import ViewController, move_cursor, visible_window
    from kgcli.tui.formatting import format_time_ago, truncate_text
    from kgcli.tui.messages import Key, Message, NotesError, NotesFetched, OpenNote
except ImportError:
    from ..models import Note, NoteFilter
    from .commands import Command, api_call, emit
    from .components import Paginator, TextInput
    from .controller import ViewController, move_cursor, visible_window
    from .formatting import format_time_ago, truncate_text
    from .messages import Key, Message, NotesError, NotesFetched, OpenNote

NOTES_PER_PAGE = 20
PREVIEW_LENGTH = 60

NEXT_PAGE_KEYS = frozenset({"]", "ctrl+n", "right"})
PREV_PAGE_KEYS = frozenset({"[", "ctrl+p", "left"})


def describe_note(note: Note) -> str:
    """Second line of a list row: tags if any, else a content preview."""
    if note.tags:
        return " ".join(f"#{tag.name}" for tag in note.tags)
    preview = note.content.replace("\n", " ").strip()
    if len(preview) > PREVIEW_LENGTH:
        preview = preview[:PREVIEW_LENGTH] + "..."
    return preview


def note_metadata(note: Note) -> str:
    return f"{note.note_type} • {note.access_count} views • {format_time_ago(note.updated_at)}"


class NoteListView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.notes: List[Note] = []
        self.selected = 0
        self.paginator = Paginator(NOTES_PER_PAGE)
        self.search = ""
        self.tag_filter: Optional[str] = None
        self.loading = False
        self.error = ""
        self.filter_input = TextInput(prompt="Filter: ", placeholder="text in title or content")

    @property
    def page(self) -> int:
        return self.paginator.page

    def init(self) -> Optional[Command]:
        return self.fetch()

    def fetch(self) -> Command:
        """Fetch the current page with the current filters."""
        self.loading = True
        self.error = ""
        note_filter = NoteFilter(
            page=self.paginator.page,
            limit=NOTES_PER_PAGE,
            search=self.search,
            tag_id=self.tag_filter,
        )
        client = self.client
        return api_call(
            "list_notes",
            lambda: client.list_notes(note_filter),
            lambda result: NotesFetched(
                notes=result[0],
                total=result[1],
                page=note_filter.page,
                tag_id=note_filter.tag_id,
                search=note_filter.search,
            ),
            lambda err: NotesError(
                err,
                page=note_filter.page,
                tag_id=note_filter.tag_id,
                search=note_filter.search,
            ),
        )

    def set_tag_filter(self, tag_id: Optional[str]) -> None:
        """Filter by tag; the caller runs init() to fetch."""
        self.tag_filter = tag_id
        self._reset_rows()

    def set_search(self, text: str) -> Command:
        self.search = text
        self._reset_rows()
        return self.fetch()

    def _reset_rows(self) -> None:
        self.paginator.reset()
        self.notes = []
        self.selected = 0
        self.loading = True

    def is_stale(self, msg: Message) -> bool:
        # Pages fetched for a filter or page we've since moved off
        if isinstance(msg, (NotesFetched, NotesError)):
            return (msg.page, msg.tag_id, msg.search) != (
                self.paginator.page, self.tag_filter, self.search
            )
        return False

    def update(self, msg: Message) -> Optional[Command]:
        if self.is_stale(msg):
            return None
        if isinstance(msg, NotesFetched):
            self.notes = list(msg.notes)
            self.paginator.set_total_items(msg.total)
            self.selected = move_cursor(self.selected, 0, len(self.notes))
            self.loading = False
            return None
        if isinstance(msg, NotesError):
            self.error = msg.error
            self.loading = False
            return None
        if isinstance(msg, Key):
            return self._handle_key(msg)
        return None

    def is_input_focused(self) -> bool:
        return self.filter_input.focused

    def blur(self) -> None:
        self.filter_input.blur()

    def _handle_filter_key(self, msg: Key) -> Optional[Command]:
        if msg.key == "enter":
            self.filter_input.blur()
            return self.set_search(self.filter_input.value.strip())
        if msg.key == "escape":
            self.filter_input.blur()
            self.filter_input.set_value(self.search)
            return None
        self.filter_input.update(msg)
        return None

    def _handle_key(self, msg: Key) -> Optional[Command]:
        if self.filter_input.focused:
            return self._handle_filter_key(msg)
        key = msg.key
        if key == "f":
            self.filter_input.set_value(self.search)
            self.filter_input.focus()
        elif key in ("j", "down"):
            self.selected = move_cursor(self.selected, 1, len(self.notes))
        elif key in ("k", "up"):
            self.selected = move_cursor(self.selected, -1, len(self.notes))
        elif key in ("0", "home"):
            self.selected = 0
        elif key in ("G", "end"):
            self.selected = max(0, len(self.notes) - 1)
        elif key in ("enter", "space"):
            if self.notes:
                return emit(OpenNote(self.notes[self.selected].id))
        elif key in NEXT_PAGE_KEYS:
            if self.paginator.next_page():
                self.selected = 0
                return self.fetch()
        elif key in PREV_PAGE_KEYS:
            if self.paginator.prev_page():
                self.selected = 0
                return self.fetch()
        return None

    def render(self) -> str:
        title = "NOTES"
        if self.tag_filter:
            title += " (filtered by tag)"
        if self.search:
            title += f' matching "{self.search}"'
        lines = [title, ""]
        if self.filter_input.focused:
            lines += [self.filter_input.render(), "enter:apply esc:cancel", ""]

        if self.error:
            lines.append(f"Error: {self.error}")
            return "\n".join(lines)
        if self.loading and not self.notes:
            lines.append("Loading notes...")
            return "\n".join(lines)
        if not self.notes:
            lines.append("(no notes)")
            return "\n".join(lines)

        rows = max(1, (self.height - 8) // 3)
        for i in visible_window(self.selected, len(self.notes), rows):
            note = self.notes[i]
            marker = "▶ " if i == self.selected else "  "
            lines.append(f"{marker}{truncate_text(note.title, max(10, self.width - 6))}")
            lines.append(f"    {describe_note(note)}")
            lines.append(f"    {note_metadata(note)}")
        lines += ["", self.paginator.render()]
        return "\n".join(lines)
