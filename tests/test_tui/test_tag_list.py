# SPDX-License-Identifier: MIT
"""Tests for the tag management view."""

import pytest

from kgcli.client import ConflictError
from kgcli.models import Tag
from kgcli.tui.commands import run_all
from kgcli.tui.messages import FilterNotesByTag, Key, TagCreated, TagDeleted, TagUpdated
from kgcli.tui.tag_list import TagListView, validate_tag_name


def press(view, *names):
    results = []
    for name in names:
        pending = run_all(view.update(Key.of(name)))
        while pending:
            msg = pending.pop(0)
            results.append(msg)
            pending.extend(run_all(view.update(msg)))
    return results


def type_text(view, text):
    for ch in text:
        view.update(Key(ch, ch))


@pytest.fixture
def tags(fake_client):
    fake_client.add_tag("t1", "work", note_count=3)
    fake_client.add_tag("t2", "home", note_count=1)
    view = TagListView(fake_client)
    for msg in run_all(view.init()):
        view.update(msg)
    return view


class TestValidateTagName:
    def test_required(self):
        assert validate_tag_name("  ") == "Tag name is required"

    def test_too_long(self):
        assert validate_tag_name("x" * 51) == "Tag name too long (max 50)"

    def test_valid(self):
        assert validate_tag_name("reading") == ""


class TestTagList:
    def test_render_counts(self, tags):
        text = tags.render()
        assert "▶ #work (3 notes)" in text
        assert "#home (1 note)" in text

    def test_enter_filters_notes(self, tags):
        press(tags, "j")
        assert run_all(tags.update(Key.of("enter"))) == [FilterNotesByTag("t2", "home")]

    def test_create(self, tags, fake_client):
        press(tags, "c")
        assert tags.is_input_focused()
        type_text(tags, "ideas")
        results = press(tags, "enter")
        assert isinstance(results[0], TagCreated)
        assert fake_client.called("create_tag") == [("ideas",)]
        assert not tags.form_open
        assert [t.name for t in tags.tags] == ["work", "home", "ideas"]

    def test_create_empty_name(self, tags, fake_client):
        press(tags, "c", "enter")
        assert tags.form_error == "Tag name is required"
        assert fake_client.called("create_tag") == []

    def test_create_conflict_shown_in_form(self, tags, fake_client):
        fake_client.failures["create_tag"] = ConflictError("Tag already exists", status=409)
        press(tags, "c")
        type_text(tags, "work")
        press(tags, "enter")
        assert tags.form_open
        assert tags.form_error == "Tag already exists"
        assert "⚠ Tag already exists" in tags.render()

    def test_edit(self, tags, fake_client):
        press(tags, "e")
        assert tags.name_input.value == "work"
        type_text(tags, "!")
        results = press(tags, "enter")
        assert results[0] == TagUpdated(Tag("t1", "work!", note_count=3))
        assert fake_client.called("update_tag") == [("t1", "work!")]

    def test_delete_confirmed(self, tags, fake_client):
        press(tags, "j", "d")
        assert tags.confirm.visible
        assert "Delete this tag?" in tags.render()
        results = press(tags, "y")
        assert results[0] == TagDeleted("t2")
        assert [t.id for t in tags.tags] == ["t1"]

    def test_delete_cancelled(self, tags, fake_client):
        press(tags, "d", "n")
        assert fake_client.called("delete_tag") == []
        assert not tags.confirm.visible

    def test_blur_closes_form_and_confirm(self, tags):
        press(tags, "c")
        tags.blur()
        assert not tags.form_open
        press(tags, "d")
        tags.blur()
        assert not tags.confirm.visible
        assert len(tags.tags) == 2

    def test_escape_closes_form(self, tags):
        press(tags, "c")
        type_text(tags, "abc")
        press(tags, "escape")
        assert not tags.form_open
        assert tags.name_input.value == ""

    def test_empty(self, fake_client):
        view = TagListView(fake_client)
        for msg in run_all(view.init()):
            view.update(msg)
        assert "(no tags)" in view.render()
