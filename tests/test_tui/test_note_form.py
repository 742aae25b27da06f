# SPDX-License-Identifier: MIT
"""Tests for note validation and the create/edit form."""

import pytest

from kgcli.models import CONTENT_MAX_LENGTH, TITLE_MAX_LENGTH, Note
from kgcli.tui.commands import run_all
from kgcli.tui.messages import Key, NoteCreated, NoteSaveError, NoteUpdated, ShowDashboard
from kgcli.tui.note_form import NoteFormView, validate_note


def type_text(view, text):
    for ch in text:
        view.update(Key.of("space") if ch == " " else Key(ch, ch))


class TestValidateNote:
    def test_valid(self):
        assert validate_note("Title", "Body") == {}

    @pytest.mark.parametrize("title", ["", "   "])
    def test_title_required(self, title):
        assert validate_note(title, "Body")["title"] == "Title is required"

    def test_title_too_long(self):
        errors = validate_note("x" * (TITLE_MAX_LENGTH + 1), "Body")
        assert errors["title"] == "Title too long (max 500)"

    @pytest.mark.parametrize("content", ["", "  \n\t "])
    def test_content_required(self, content):
        assert validate_note("Title", content)["content"] == "Content is required"

    def test_content_too_long(self):
        errors = validate_note("Title", "x" * (CONTENT_MAX_LENGTH + 1))
        assert errors["content"] == "Content too long (max 100000)"


class TestNoteFormView:
    @pytest.fixture
    def form(self, fake_client):
        view = NoteFormView(fake_client)
        view.focus_form()
        return view

    def test_unfocused_enter_focuses(self, fake_client):
        view = NoteFormView(fake_client)
        assert not view.is_input_focused()
        view.update(Key.of("enter"))
        assert view.is_input_focused()

    def test_escape_discards(self, form):
        type_text(form, "draft")
        assert run_all(form.update(Key.of("escape"))) == [ShowDashboard()]
        assert not form.is_input_focused()

    def test_typing_marks_unsaved(self, form):
        type_text(form, "Hi")
        assert form.has_changes
        assert form.render().startswith("CREATE NEW NOTE (unsaved)")

    def test_create_submits_trimmed_title(self, form, fake_client):
        type_text(form, "  Trip notes ")
        form.update(Key.of("tab"))
        type_text(form, "packed bags")
        cmd = form.update(Key.of("enter"))
        assert form.saving
        assert "Saving..." in form.render()
        assert run_all(cmd) == [NoteCreated("n1")]
        request = fake_client.called("create_note")[0][0]
        assert request.title == "Trip notes"
        assert request.content == "packed bags"

    def test_double_submit_ignored(self, form):
        type_text(form, "T")
        form.update(Key.of("tab"))
        type_text(form, "c")
        assert form.submit() is not None
        assert form.submit() is None

    def test_save_error_clears_saving(self, form):
        form.saving = True
        form.update(NoteSaveError("Title is too long"))
        assert not form.saving
        assert "Error: Title is too long" in form.render()

    def test_typing_clears_field_error(self, form):
        form.submit()
        assert form.form.field("title").error
        type_text(form, "x")
        assert form.form.field("title").error == ""

    def test_edit_mode(self, form, fake_client):
        fake_client.add_note("n1", "Old", "old body")
        form.set_edit_mode(fake_client.notes["n1"])
        assert form.editing
        assert form.render().startswith("EDIT NOTE")
        assert "Enter:Update" in form.render()
        type_text(form, "er")
        assert run_all(form.update(Key.of("enter"))) == [NoteUpdated("n1")]
        note_id, request = fake_client.called("update_note")[0]
        assert (note_id, request.title, request.content) == ("n1", "Older", "old body")

    def test_saved_resets_flags(self, form):
        type_text(form, "x")
        form.saving = True
        form.update(NoteCreated("n1"))
        assert not form.saving
        assert not form.has_changes

    def test_word_count(self, form):
        form.update(Key.of("tab"))
        type_text(form, "one two three")
        assert form.render().endswith("Words: 3")

    def test_newline_in_content(self, form):
        form.update(Key.of("tab"))
        type_text(form, "a")
        form.update(Key.of("ctrl+j"))
        type_text(form, "b")
        assert form.content_input.value == "a\nb"

    def test_edit_mode_from_note_without_content(self, fake_client):
        view = NoteFormView(fake_client)
        view.set_edit_mode(Note(id="n5", title="Empty"))
        assert view.submit() is None
        assert view.form.field("content").error == "Content is required"
