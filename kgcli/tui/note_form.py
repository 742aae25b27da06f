# SPDX-License-Identifier: MIT
"""Create/edit form for a note.

One controller serves both modes; ``set_edit_mode`` switches it to editing
an existing note. Enter submits, Escape always discards.
"""
from typing import Dict, Optional

try:
    from kgcli.models import (
        CONTENT_MAX_LENGTH,
        DEFAULT_NOTE_TYPE,
        TITLE_MAX_LENGTH,
        CreateNoteRequest,
        Note,
        UpdateNoteRequest,
    )
    from kgcli.tui.commands import Command, api_call, emit
    from kgcli.tui.components import Form, FormField, TextArea, TextInput
    from kgcli.tui.controller import ViewController
    from kgcli.tui.messages import (
        Key,
        Message,
        NoteCreated,
        NoteSaveError,
        NoteUpdated,
        ShowDashboard,
    )
except ImportError:
    from ..models import (
        CONTENT_MAX_LENGTH,
        DEFAULT_NOTE_TYPE,
        TITLE_MAX_LENGTH,
        CreateNoteRequest,
        Note,
        UpdateNoteRequest,
    )
    from .commands import Command, api_call, emit
    from .components import Form, FormField, TextArea, TextInput
    from .controller import ViewController
    from .messages import (
        Key,
        Message,
        NoteCreated,
        NoteSaveError,
        NoteUpdated,
        ShowDashboard,
    )


def validate_note(title: str, content: str) -> Dict[str, str]:
    """Field errors for a note submission, keyed by field id."""
    errors: Dict[str, str] = {}
    if not title.strip():
        errors["title"] = "Title is required"
    elif len(title) > TITLE_MAX_LENGTH:
        errors["title"] = f"Title too long (max {TITLE_MAX_LENGTH})"

    if not content.split():
        errors["content"] = "Content is required"
    elif len(content) > CONTENT_MAX_LENGTH:
        errors["content"] = f"Content too long (max {CONTENT_MAX_LENGTH})"
    return errors


class NoteFormView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.title_input = TextInput(prompt="Title: ", placeholder="Note title",
                                     char_limit=TITLE_MAX_LENGTH)
        self.content_input = TextArea(placeholder="Write your note... (ctrl+j for a new line)")
        self.form = Form(
            [
                FormField("title", "Title", self.title_input),
                FormField("content", "Content", self.content_input),
            ],
            submit_text="Create",
            cancel_text="Cancel",
        )
        self.note_id: Optional[str] = None
        self.has_changes = False
        self.saving = False
        self.error = ""

    @property
    def editing(self) -> bool:
        return self.note_id is not None

    def focus_form(self) -> None:
        self.form.focus()

    def set_edit_mode(self, note: Note) -> None:
        self.note_id = note.id
        self.title_input.set_value(note.title)
        self.content_input.set_value(note.content)
        self.form.submit_text = "Update"
        self.form.clear_errors()
        self.form.set_current(0)
        self.has_changes = False
        self.error = ""
        self.form.focus()

    def is_input_focused(self) -> bool:
        return self.form.focused

    def blur(self) -> None:
        self.form.blur()

    def update(self, msg: Message) -> Optional[Command]:
        if isinstance(msg, (NoteCreated, NoteUpdated)):
            self.saving = False
            self.has_changes = False
            return None
        if isinstance(msg, NoteSaveError):
            self.saving = False
            self.error = msg.error
            return None
        if isinstance(msg, Key):
            return self._handle_key(msg)
        return None

    def _handle_key(self, msg: Key) -> Optional[Command]:
        if msg.key == "escape":
            self.form.blur()
            return emit(ShowDashboard())
        if not self.form.focused:
            if msg.key in ("enter", "i"):
                self.form.focus()
            return None
        if msg.key == "enter":
            return self.submit()
        if self.form.update(msg):
            self.has_changes = True
            self.form.fields[self.form.current].error = ""
        return None

    def submit(self) -> Optional[Command]:
        """Validate and save; returns None when validation fails."""
        if self.saving:
            return None
        title = self.title_input.value
        content = self.content_input.value
        self.form.clear_errors()
        errors = validate_note(title, content)
        if errors:
            for field_id, error in errors.items():
                self.form.field(field_id).error = error
            return None

        self.saving = True
        self.error = ""
        client = self.client
        title = title.strip()
        if self.note_id is None:
            request = CreateNoteRequest(title=title, content=content, note_type=DEFAULT_NOTE_TYPE)
            return api_call(
                "create_note",
                lambda: client.create_note(request),
                lambda note: NoteCreated(note.id),
                NoteSaveError,
            )

        note_id = self.note_id
        update_request = UpdateNoteRequest(title=title, content=content)
        return api_call(
            "update_note",
            lambda: client.update_note(note_id, update_request),
            lambda _: NoteUpdated(note_id),
            NoteSaveError,
        )

    def render(self) -> str:
        header = "EDIT NOTE" if self.editing else "CREATE NEW NOTE"
        if self.has_changes:
            header += " (unsaved)"
        lines = [header, ""]
        if self.saving:
            lines += ["Saving...", ""]
        elif self.error:
            lines += [f"Error: {self.error}", ""]
        lines.append(self.form.render())
        lines.append(f"Words: {self.content_input.word_count()}")
        return "\n".join(lines)
