# SPDX-License-Identifier: MIT
"""Tests for the dashboard and help views."""

from kgcli.models import Activity, Note, TrendingNote, UserStats
from kgcli.tui.commands import run_all
from kgcli.tui.dashboard import DashboardView
from kgcli.tui.help import HELP_SECTIONS, HelpView, help_text
from kgcli.tui.messages import DashboardError, Key, ShowNoteList, StatsFetched


def started_dashboard(client):
    view = DashboardView(client)
    for msg in run_all(view.init()):
        view.update(msg)
    return view


class TestDashboard:
    def test_loading_until_stats(self, fake_client):
        view = DashboardView(fake_client)
        assert view.render() == "Loading dashboard..."

    def test_sections_render(self, fake_client):
        fake_client.stats = UserStats(total_notes=12, total_tags=3, total_links=7)
        fake_client.activities = [
            Activity(id="1", action="create", note_id="n1", metadata={"note_title": "Plan"})
        ]
        fake_client.trending = [TrendingNote(note=Note(id="n1", title="Plan"), access_count=4)]
        text = started_dashboard(fake_client).render()
        assert "Total Notes:   12" in text
        assert 'Created "Plan"' in text
        assert "1. Plan" in text
        assert "Accessed 4 times recently" in text
        assert "QUICK ACTIONS" in text

    def test_empty_sections(self, fake_client):
        text = started_dashboard(fake_client).render()
        assert "No recent activity" in text
        assert "No trending notes" in text

    def test_sections_fail_independently(self, fake_client):
        view = DashboardView(fake_client)
        view.update(StatsFetched(UserStats()))
        view.update(DashboardError("trending", "boom"))
        text = view.render()
        assert "Error: boom" in text
        assert "  Loading..." in text

    def test_stats_error_still_renders(self, fake_client):
        view = DashboardView(fake_client)
        view.update(DashboardError("stats", "down"))
        assert "Error: down" in view.render()

    def test_l_lists_notes(self, fake_client):
        view = DashboardView(fake_client)
        assert run_all(view.update(Key.of("l"))) == [ShowNoteList()]

    def test_refresh(self, fake_client):
        view = started_dashboard(fake_client)
        cmd = view.update(Key.of("r"))
        assert view.stats is None
        assert len(run_all(cmd)) == 3


class TestHelp:
    def test_help_text_has_every_section(self):
        text = help_text()
        for section, _ in HELP_SECTIONS:
            assert section in text
        assert "Quit TUI" in text

    def test_scroll_bounds(self):
        view = HelpView()
        view.resize(80, 10)
        view.update(Key.of("k"))
        assert view.offset == 0
        view.update(Key.of("pagedown"))
        assert view.offset == 6
        for _ in range(100):
            view.update(Key.of("j"))
        assert view.offset == len(view.lines) - view.page_size
        view.update(Key.of("home"))
        assert view.offset == 0

    def test_render_is_one_page(self):
        view = HelpView()
        view.resize(80, 10)
        assert len(view.render().split("\n")) == view.page_size
