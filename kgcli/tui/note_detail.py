#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Note detail view: one note across four tabs.

Tabs: Content, Tags, Links, Backlinks. The view is keyed by note id and
keeps its fetched data when the user navigates away, so returning to the
same note is instant. Pointing it at a different note discards every tab
and fetches all four again.

Each command is tagged with the note id it was issued for; a result that
arrives for any other id is dropped.

Sub-dialogs:
- add-tag form: filter-as-you-type over tags not already on the note
- delete confirmation for the note itself
"""

from enum import Enum
from typing import Dict, List, Optional

try:
    from kgcli.models import LinkDetail, Note, Tag
    from kgcli.tui.commands import Command, api_call, batch, emit
    from kgcli.tui.components import ConfirmDialog, TextInput
    from kgcli.tui.controller import ViewController, move_cursor
    from kgcli.tui.formatting import format_date, truncate_text
    from kgcli.tui.messages import (
        AvailableTagsFetched,
        EditNote,
        Key,
        Message,
        NoteDeleted,
        NoteDeleteError,
        NoteFetched,
        NoteFetchError,
        NoteTagChanged,
        NoteUpdated,
        OpenNote,
        TabError,
        TabFetched,
    )
except ImportError:
    from ..models import LinkDetail, Note, Tag
    from .commands import Command, api_call, batch, emit
    from .components import ConfirmDialog, TextInput
    from .controller import ViewController, move_cursor
    from .formatting import format_date, truncate_text
    from .messages import (
        AvailableTagsFetched,
        EditNote,
        Key,
        Message,
        NoteDeleted,
        NoteDeleteError,
        NoteFetched,
        NoteFetchError,
        NoteTagChanged,
        NoteUpdated,
        OpenNote,
        TabError,
        TabFetched,
    )


class DetailTab(str, Enum):
    CONTENT = "content"
    TAGS = "tags"
    LINKS = "links"
    BACKLINKS = "backlinks"

    @property
    def title(self) -> str:
        return self.value.capitalize()


TAB_ORDER = [DetailTab.CONTENT, DetailTab.TAGS, DetailTab.LINKS, DetailTab.BACKLINKS]

NEXT_TAB_KEYS = frozenset({"tab", "l", "right"})
PREV_TAB_KEYS = frozenset({"shift+tab", "h", "left"})
DOWN_KEYS = frozenset({"j", "down"})
UP_KEYS = frozenset({"k", "up"})

MAX_SUGGESTIONS = 8


class NoteDetailView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.note_id: Optional[str] = None
        self.tab = DetailTab.CONTENT
        self.confirm = ConfirmDialog("Delete this note?", "This action cannot be undone.")
        self.tag_input = TextInput(prompt="Add tag: ", placeholder="type to filter tags")
        self._reset()

    def _reset(self) -> None:
        self.note: Optional[Note] = None
        self.loading = False
        self.error = ""
        self.tags: Optional[List[Tag]] = None
        self.links: Optional[List[LinkDetail]] = None
        self.backlinks: Optional[List[LinkDetail]] = None
        self.tab_errors: Dict[str, str] = {}
        self.tab = DetailTab.CONTENT
        self.selected_tag = 0
        self.selected_link = 0
        self.scroll = 0
        self.deleting = False
        self.confirm.hide()
        self._close_add_tag()
        self.available_tags: Optional[List[Tag]] = None

    # -------------------------------------------------------------------------
    # Subject
    # -------------------------------------------------------------------------

    def set_note_id(self, note_id: str) -> Optional[Command]:
        """Point the view at a note.

        Same id with data loaded (or loading) keeps the cache and issues
        nothing; a different id resets every tab and fetches all four.
        """
        if note_id == self.note_id and (self.note is not None or self.loading):
            return None
        self.note_id = note_id
        self._reset()
        return self.reload()

    def has_note(self, note_id: str) -> bool:
        return self.note is not None and self.note.id == note_id

    def reload(self) -> Optional[Command]:
        if self.note_id is None:
            return None
        self.loading = True
        self.error = ""
        self.tab_errors = {}
        return batch(
            self._fetch_note(self.note_id),
            self._fetch_tab(self.note_id, DetailTab.TAGS),
            self._fetch_tab(self.note_id, DetailTab.LINKS),
            self._fetch_tab(self.note_id, DetailTab.BACKLINKS),
        )

    def _fetch_note(self, note_id: str) -> Command:
        client = self.client
        return api_call(
            "get_note",
            lambda: client.get_note(note_id),
            lambda note: NoteFetched(note_id, note),
            lambda err: NoteFetchError(note_id, err),
        )

    def _fetch_tab(self, note_id: str, tab: DetailTab) -> Command:
        client = self.client
        calls = {
            DetailTab.TAGS: ("get_note_tags", client.get_note_tags),
            DetailTab.LINKS: ("get_outgoing_links", client.get_outgoing_links),
            DetailTab.BACKLINKS: ("get_backlinks", client.get_backlinks),
        }
        op, fetch = calls[tab]
        return api_call(
            op,
            lambda: fetch(note_id),
            lambda items: TabFetched(note_id, tab.value, items),
            lambda err: TabError(note_id, tab.value, err),
        )

    def _fetch_available_tags(self, note_id: str) -> Command:
        client = self.client
        return api_call(
            "list_tags",
            client.list_tags,
            lambda tags: AvailableTagsFetched(note_id, tags),
            lambda err: TabError(note_id, DetailTab.TAGS.value, err),
        )

    # -------------------------------------------------------------------------
    # Contract
    # -------------------------------------------------------------------------

    def is_input_focused(self) -> bool:
        return self.tag_input.focused or self.confirm.visible

    def claims_key(self, key: str) -> bool:
        # 'a' adds a tag on the Tags tab rather than opening Activity
        return key == "a" and self.tab == DetailTab.TAGS

    def update(self, msg: Message) -> Optional[Command]:
        subject = getattr(msg, "note_id", None)
        if not isinstance(msg, Key) and subject is not None and subject != self.note_id:
            return None

        if isinstance(msg, NoteFetched):
            self.note = msg.note
            self.loading = False
            return None
        if isinstance(msg, NoteFetchError):
            self.error = msg.error
            self.loading = False
            return None
        if isinstance(msg, TabFetched):
            self._store_tab(msg.tab, list(msg.items))
            return None
        if isinstance(msg, TabError):
            self.tab_errors[msg.tab] = msg.error
            return None
        if isinstance(msg, AvailableTagsFetched):
            self.available_tags = list(msg.tags)
            self._refilter()
            return None
        if isinstance(msg, NoteTagChanged):
            self.tags = None
            return self._fetch_tab(msg.note_id, DetailTab.TAGS)
        if isinstance(msg, (NoteDeleted, NoteUpdated)):
            # The cached copy is gone or out of date; the next visit refetches
            self.note_id = None
            self._reset()
            return None
        if isinstance(msg, NoteDeleteError):
            self.deleting = False
            self.error = msg.error
            return None
        if isinstance(msg, Key):
            return self._handle_key(msg)
        return None

    def _store_tab(self, tab: str, items: list) -> None:
        self.tab_errors.pop(tab, None)
        if tab == DetailTab.TAGS.value:
            self.tags = items
            self.selected_tag = move_cursor(self.selected_tag, 0, len(items))
            self._refilter()
        elif tab == DetailTab.LINKS.value:
            self.links = items
        elif tab == DetailTab.BACKLINKS.value:
            self.backlinks = items
        self.selected_link = 0

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def _handle_key(self, msg: Key) -> Optional[Command]:
        if self.confirm.visible:
            return self._handle_confirm_key(msg)
        if self.tag_input.focused:
            return self._handle_add_tag_key(msg)
        if self.note_id is None:
            return None

        key = msg.key
        if key in NEXT_TAB_KEYS:
            self._switch_tab(1)
        elif key in PREV_TAB_KEYS:
            self._switch_tab(-1)
        elif key in DOWN_KEYS or key in UP_KEYS:
            self._move(1 if key in DOWN_KEYS else -1)
        elif key == "enter":
            return self._open_selected_link()
        elif key == "d":
            return self._delete_pressed()
        elif key == "a" and self.tab == DetailTab.TAGS:
            return self._open_add_tag()
        elif key == "e":
            return emit(EditNote(self.note_id))
        elif key == "r":
            note_id = self.note_id
            self.note_id = None
            return self.set_note_id(note_id)
        return None

    def _switch_tab(self, step: int) -> None:
        index = (TAB_ORDER.index(self.tab) + step) % len(TAB_ORDER)
        self.tab = TAB_ORDER[index]
        self.selected_link = 0

    def _move(self, delta: int) -> None:
        if self.tab == DetailTab.CONTENT:
            self.scroll = max(0, self.scroll + delta)
        elif self.tab == DetailTab.TAGS:
            self.selected_tag = move_cursor(self.selected_tag, delta, len(self.tags or []))
        else:
            self.selected_link = move_cursor(
                self.selected_link, delta, len(self._current_links())
            )

    def _current_links(self) -> List[LinkDetail]:
        if self.tab == DetailTab.LINKS:
            return self.links or []
        if self.tab == DetailTab.BACKLINKS:
            return self.backlinks or []
        return []

    def _open_selected_link(self) -> Optional[Command]:
        links = self._current_links()
        if not links:
            return None
        link = links[self.selected_link]
        if self.tab == DetailTab.LINKS:
            target = link.target_note.id if link.target_note else link.target_id
        else:
            target = link.source_note.id if link.source_note else link.source_id
        return emit(OpenNote(target)) if target else None

    def _delete_pressed(self) -> Optional[Command]:
        if self.tab == DetailTab.TAGS and self.tags:
            tag = self.tags[self.selected_tag]
            return self._change_tag(tag.id, added=False)
        if self.note is not None:
            self.confirm.show()
        return None

    def _handle_confirm_key(self, msg: Key) -> Optional[Command]:
        answer = self.confirm.update(msg)
        if not answer or self.note is None:
            return None
        self.deleting = True
        note_id = self.note.id
        client = self.client
        return api_call(
            "delete_note",
            lambda: client.delete_note(note_id),
            lambda _: NoteDeleted(note_id),
            lambda err: NoteDeleteError(note_id, err),
        )

    def _change_tag(self, tag_id: str, added: bool) -> Command:
        note_id = self.note_id
        client = self.client
        call = client.add_tag_to_note if added else client.remove_tag_from_note
        return api_call(
            "add_tag_to_note" if added else "remove_tag_from_note",
            lambda: call(note_id, tag_id),
            lambda _: NoteTagChanged(note_id, tag_id, added),
            lambda err: TabError(note_id, DetailTab.TAGS.value, err),
        )

    # -------------------------------------------------------------------------
    # Add-tag form
    # -------------------------------------------------------------------------

    def _open_add_tag(self) -> Optional[Command]:
        self.tag_input.reset()
        self.tag_input.focus()
        self.add_tag_error = ""
        self.suggestion_index = 0
        if self.available_tags is None:
            return self._fetch_available_tags(self.note_id)
        self._refilter()
        return None

    def _close_add_tag(self) -> None:
        self.tag_input.blur()
        self.tag_input.reset()
        self.suggestions: List[Tag] = []
        self.suggestion_index = 0
        self.add_tag_error = ""

    def _refilter(self) -> None:
        """Tags matching the typed text that the note doesn't already have."""
        current = {t.id for t in self.tags or []}
        needle = self.tag_input.value.strip().lower()
        self.suggestions = [
            t for t in self.available_tags or []
            if t.id not in current and needle in t.name.lower()
        ]
        self.suggestion_index = 0

    def _handle_add_tag_key(self, msg: Key) -> Optional[Command]:
        key = msg.key
        if key == "escape":
            self._close_add_tag()
            return None
        if key in ("up", "down"):
            if self.suggestions:
                step = 1 if key == "down" else -1
                self.suggestion_index = (self.suggestion_index + step) % len(self.suggestions)
            return None
        if key == "enter":
            return self._submit_add_tag()
        if self.tag_input.update(msg):
            self.add_tag_error = ""
            self._refilter()
        return None

    def _submit_add_tag(self) -> Optional[Command]:
        tag: Optional[Tag] = None
        if self.suggestions:
            tag = self.suggestions[self.suggestion_index]
        else:
            name = self.tag_input.value.strip().lower()
            current = {t.id for t in self.tags or []}
            for candidate in self.available_tags or []:
                if candidate.name.lower() == name and candidate.id not in current:
                    tag = candidate
                    break
        if tag is None:
            typed = self.tag_input.value.strip()
            self.add_tag_error = (
                f"No tag named '{typed}' - create it from the Tags view" if typed
                else "No matching tags"
            )
            return None
        self._close_add_tag()
        return self._change_tag(tag.id, added=True)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> str:
        if self.note_id is None:
            return "No note selected"
        if self.error and self.note is None:
            return f"Error: {self.error}"
        if self.note is None:
            return "Loading note..."

        note = self.note
        lines = [
            note.title,
            (
                f"Type: {note.note_type} | Words: {note.word_count} | "
                f"Created: {format_date(note.created_at)} | "
                f"Updated: {format_date(note.updated_at)} | Views: {note.access_count}"
            ),
            "",
            "  ".join(
                f"[{t.title}]" if t == self.tab else f" {t.title} " for t in TAB_ORDER
            ),
            "",
        ]
        if self.deleting:
            lines.append("Deleting...")
        elif self.error:
            lines.append(f"Error: {self.error}")

        if self.confirm.visible:
            lines.append(self.confirm.render())
            return "\n".join(lines)

        renderers = {
            DetailTab.CONTENT: self._render_content,
            DetailTab.TAGS: self._render_tags,
            DetailTab.LINKS: lambda: self._render_links(self.links, "→", "(no links from this note)"),
            DetailTab.BACKLINKS: lambda: self._render_links(
                self.backlinks, "←", "(no backlinks to this note)"
            ),
        }
        lines.extend(renderers[self.tab]())
        return "\n".join(lines)

    def _render_content(self) -> List[str]:
        body = self.note.content.split("\n") if self.note else []
        visible = max(1, self.height - 10)
        self.scroll = min(self.scroll, max(0, len(body) - visible))
        return body[self.scroll : self.scroll + visible]

    def _render_tags(self) -> List[str]:
        tab_error = self.tab_errors.get(DetailTab.TAGS.value)
        lines: List[str] = []
        if tab_error:
            lines.append(f"Error: {tab_error}")
        if self.tags is None:
            lines.append("Loading tags...")
        elif not self.tags:
            lines.append("(no tags - press 'a' to add)")
        else:
            for i, tag in enumerate(self.tags):
                marker = "▶ " if i == self.selected_tag else "  "
                lines.append(f"{marker}#{tag.name}")
            lines += ["", "a:add d:remove selected"]

        if self.tag_input.focused:
            lines += ["", self.tag_input.render()]
            if self.available_tags is None:
                lines.append("  Loading tags...")
            elif not self.suggestions:
                lines.append("  (no matching tags)")
            for i, tag in enumerate(self.suggestions[:MAX_SUGGESTIONS]):
                marker = "▶ " if i == self.suggestion_index else "  "
                lines.append(f"  {marker}{tag.name}")
            if self.add_tag_error:
                lines.append(f"⚠ {self.add_tag_error}")
            lines.append("enter:add ↑↓:select esc:cancel")
        return lines

    def _render_links(self, links: Optional[List[LinkDetail]], arrow: str, empty: str) -> List[str]:
        tab_error = self.tab_errors.get(self.tab.value)
        if tab_error:
            return [f"Error: {tab_error}"]
        if links is None:
            return ["Loading..."]
        if not links:
            return [empty]
        lines = []
        for i, link in enumerate(links):
            other = link.target_note if arrow == "→" else link.source_note
            title = other.title if other else "(untitled)"
            marker = "▶ " if i == self.selected_link else "  "
            lines.append(f"{marker}{arrow} {truncate_text(title, max(10, self.width - 8))}")
        return lines
