# SPDX-License-Identifier: MIT
"""Tag management: list, inline create/edit form, delete confirmation."""
from typing import List, Optional

try:
    from kgcli.models import TAG_NAME_MAX_LENGTH, Tag
    from kgcli.tui.commands import Command, api_call, emit
    from kgcli.tui.components import ConfirmDialog, TextInput
    from kgcli.tui.controller import ViewController, move_cursor, visible_window
    from kgcli.tui.messages import (
        FilterNotesByTag,
        Key,
        Message,
        TagCreated,
        TagDeleted,
        TagsError,
        TagsFetched,
        TagUpdated,
    )
except ImportError:
    from ..models import TAG_NAME_MAX_LENGTH, Tag
    from .commands import Command, api_call, emit
    from .components import ConfirmDialog, TextInput
    from .controller import ViewController, move_cursor, visible_window
    from .messages import (
        FilterNotesByTag,
        Key,
        Message,
        TagCreated,
        TagDeleted,
        TagsError,
        TagsFetched,
        TagUpdated,
    )


def validate_tag_name(name: str) -> str:
    """Return an error for an invalid tag name, or an empty string."""
    if not name.strip():
        return "Tag name is required"
    if len(name.strip()) > TAG_NAME_MAX_LENGTH:
        return f"Tag name too long (max {TAG_NAME_MAX_LENGTH})"
    return ""


class TagListView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.tags: List[Tag] = []
        self.selected = 0
        self.loading = False
        self.error = ""
        self.name_input = TextInput(prompt="Name: ", placeholder="tag name",
                                    char_limit=TAG_NAME_MAX_LENGTH)
        self.form_error = ""
        self.editing_tag_id: Optional[str] = None
        self.confirm = ConfirmDialog("Delete this tag?", "This will remove the tag from all notes.")

    @property
    def form_open(self) -> bool:
        return self.name_input.focused

    def init(self) -> Optional[Command]:
        return self.fetch()

    def fetch(self) -> Command:
        self.loading = True
        self.error = ""
        client = self.client
        return api_call("list_tags", client.list_tags, TagsFetched, TagsError)

    def is_input_focused(self) -> bool:
        return self.form_open or self.confirm.visible

    def blur(self) -> None:
        self._close_form()
        self.confirm.hide()

    def _close_form(self) -> None:
        self.name_input.blur()
        self.name_input.reset()
        self.form_error = ""
        self.editing_tag_id = None

    def _open_form(self, tag: Optional[Tag] = None) -> None:
        self._close_form()
        if tag is not None:
            self.editing_tag_id = tag.id
            self.name_input.set_value(tag.name)
        self.name_input.focus()

    def update(self, msg: Message) -> Optional[Command]:
        if isinstance(msg, TagsFetched):
            self.tags = list(msg.tags)
            self.selected = move_cursor(self.selected, 0, len(self.tags))
            self.loading = False
            return None
        if isinstance(msg, TagsError):
            self.loading = False
            if self.form_open:
                self.form_error = msg.error
            else:
                self.error = msg.error
            return None
        if isinstance(msg, (TagCreated, TagUpdated, TagDeleted)):
            self._close_form()
            return self.fetch()
        if isinstance(msg, Key):
            return self._handle_key(msg)
        return None

    def _handle_key(self, msg: Key) -> Optional[Command]:
        if self.confirm.visible:
            if self.confirm.update(msg) and self.tags:
                return self._delete(self.tags[self.selected].id)
            return None
        if self.form_open:
            return self._handle_form_key(msg)

        key = msg.key
        if key in ("j", "down"):
            self.selected = move_cursor(self.selected, 1, len(self.tags))
        elif key in ("k", "up"):
            self.selected = move_cursor(self.selected, -1, len(self.tags))
        elif key == "c":
            self._open_form()
        elif key == "e" and self.tags:
            self._open_form(self.tags[self.selected])
        elif key == "d" and self.tags:
            self.confirm.show()
        elif key == "enter" and self.tags:
            tag = self.tags[self.selected]
            return emit(FilterNotesByTag(tag.id, tag.name))
        elif key == "r":
            return self.fetch()
        return None

    def _handle_form_key(self, msg: Key) -> Optional[Command]:
        if msg.key == "escape":
            self._close_form()
            return None
        if msg.key == "enter":
            return self._submit()
        if self.name_input.update(msg):
            self.form_error = ""
        return None

    def _submit(self) -> Optional[Command]:
        name = self.name_input.value.strip()
        self.form_error = validate_tag_name(name)
        if self.form_error:
            return None
        client = self.client
        tag_id = self.editing_tag_id
        if tag_id is None:
            return api_call("create_tag", lambda: client.create_tag(name), TagCreated, TagsError)
        return api_call(
            "update_tag", lambda: client.update_tag(tag_id, name), TagUpdated, TagsError
        )

    def _delete(self, tag_id: str) -> Command:
        client = self.client
        return api_call(
            "delete_tag",
            lambda: client.delete_tag(tag_id),
            lambda _: TagDeleted(tag_id),
            TagsError,
        )

    def render(self) -> str:
        lines = ["TAGS", ""]
        if self.confirm.visible:
            lines.append(self.confirm.render())
            return "\n".join(lines)
        if self.form_open:
            heading = "Edit tag" if self.editing_tag_id else "New tag"
            lines += [heading, self.name_input.render()]
            if self.form_error:
                lines.append(f"⚠ {self.form_error}")
            lines += ["Enter:save ESC:cancel", ""]

        if self.error:
            lines.append(f"Error: {self.error}")
        elif self.loading and not self.tags:
            lines.append("Loading tags...")
        elif not self.tags:
            lines.append("(no tags)")
        else:
            for i in visible_window(self.selected, len(self.tags), max(1, self.height - 10)):
                tag = self.tags[i]
                marker = "▶ " if i == self.selected else "  "
                count = "note" if tag.note_count == 1 else "notes"
                lines.append(f"{marker}#{tag.name} ({tag.note_count} {count})")
        return "\n".join(lines)
