# SPDX-License-Identifier: MIT
"""Tests for the search view's input and results modes."""

import pytest

from kgcli.models import SearchResponse, SearchResult
from kgcli.tui.commands import run_all
from kgcli.tui.messages import Key, OpenNote, SearchError, SearchResults, ShowDashboard
from kgcli.tui.search import SearchView


def feed(view, cmd):
    out = []
    for msg in run_all(cmd):
        out.append(msg)
        view.update(msg)
    return out


def type_text(view, text):
    for ch in text:
        view.update(Key(ch, ch))


@pytest.fixture
def search(fake_client):
    fake_client.search_results = [
        SearchResult(note=fake_client.add_note(f"n{i}", f"Result {i}"), snippet=f"match {i}")
        for i in range(25)
    ]
    view = SearchView(fake_client)
    view.focus_input()
    return view


def run_query(view, text):
    type_text(view, text)
    return feed(view, view.update(Key.of("enter")))


class TestInputMode:
    def test_empty_query_does_nothing(self, search, fake_client):
        assert search.update(Key.of("enter")) is None
        assert search.is_input_focused()
        assert fake_client.called("search_notes") == []

    def test_enter_searches_first_page(self, search, fake_client):
        run_query(search, "result")
        assert fake_client.called("search_notes") == [("result", 1, 10)]
        assert not search.is_input_focused()
        assert len(search.results) == 10
        assert search.paginator.total_pages == 3

    def test_escape_with_empty_query_leaves(self, search):
        assert run_all(search.update(Key.of("escape"))) == [ShowDashboard()]

    def test_escape_with_text_only_blurs(self, search):
        type_text(search, "abc")
        assert search.update(Key.of("escape")) is None
        assert not search.is_input_focused()

    def test_global_letters_are_typed(self, search):
        type_text(search, "tag")
        assert search.input.value == "tag"


class TestResultsMode:
    def test_navigate_and_open(self, search):
        run_query(search, "result")
        search.update(Key.of("j"))
        search.update(Key.of("j"))
        search.update(Key.of("k"))
        assert run_all(search.update(Key.of("enter"))) == [OpenNote("n1")]

    def test_paging(self, search, fake_client):
        run_query(search, "result")
        feed(search, search.update(Key.of("right")))
        feed(search, search.update(Key.of("]")))
        assert search.paginator.page == 3
        assert len(search.results) == 5
        assert search.update(Key.of("ctrl+n")) is None
        feed(search, search.update(Key.of("left")))
        assert search.paginator.page == 2
        assert [c[1] for c in fake_client.called("search_notes")] == [1, 2, 3, 2]

    def test_escape_clears_and_refocuses(self, search):
        run_query(search, "result")
        assert search.update(Key.of("escape")) is None
        assert search.query == ""
        assert search.results == []
        assert search.is_input_focused()

    def test_escape_claimed_only_with_query(self, search, fake_client):
        assert not search.claims_key("escape")  # input focused
        run_query(search, "result")
        assert search.claims_key("escape")
        assert not search.claims_key("j")
        assert not SearchView(fake_client).claims_key("escape")

    def test_escape_without_query_is_left_to_global_back(self, fake_client):
        view = SearchView(fake_client)
        assert view.update(Key.of("escape")) is None
        assert not view.is_input_focused()

    def test_slash_refocuses(self, search):
        run_query(search, "result")
        search.update(Key.of("/"))
        assert search.is_input_focused()
        assert len(search.results) == 10

    def test_stale_results_dropped(self, search):
        run_query(search, "result")
        search.update(SearchResults("other", 1, SearchResponse()))
        search.update(SearchResults("result", 2, SearchResponse()))
        assert len(search.results) == 10

    def test_error_for_current_query(self, search):
        type_text(search, "x")
        search.update(Key.of("enter"))
        search.update(SearchError("old", "ignored"))
        assert search.error == ""
        search.update(SearchError("x", "search failed"))
        assert "Error: search failed" in search.render()

    def test_error_for_previous_page_dropped(self, search):
        run_query(search, "result")
        search.update(Key.of("right"))  # page 2 requested, not yet answered
        search.update(SearchError("result", "timeout", 1))
        assert search.error == ""
        search.update(SearchError("result", "timeout", 2))
        assert search.error == "timeout"

    def test_no_results(self, search, fake_client):
        fake_client.search_results = []
        run_query(search, "zzz")
        assert 'No results for "zzz"' in search.render()

    def test_render_results(self, search):
        run_query(search, "result")
        text = search.render()
        assert "▶ Result 0" in text
        assert "match 0" in text
        assert "Page 1/3 (25 total)" in text
