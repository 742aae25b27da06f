# SPDX-License-Identifier: MIT
"""Tests for the dispatcher's ApplicationState container."""

from dataclasses import is_dataclass


class TestApplicationState:
    def test_is_dataclass(self):
        from kgcli.tui.app_state import ApplicationState

        assert is_dataclass(ApplicationState)

    def test_defaults(self):
        from kgcli.tui.app_state import ApplicationState
        from kgcli.tui.controller import DEFAULT_HEIGHT, DEFAULT_WIDTH
        from kgcli.tui.views import View

        state = ApplicationState()
        assert state.current_view == View.DASHBOARD
        assert state.previous_view is None
        assert state.initialized == {}
        assert (state.width, state.height) == (DEFAULT_WIDTH, DEFAULT_HEIGHT)
        assert not state.quitting
        assert state.pending_edit_id is None

    def test_is_initialized(self):
        from kgcli.tui.app_state import ApplicationState
        from kgcli.tui.views import View

        state = ApplicationState()
        assert not state.is_initialized(View.GRAPH)
        state.initialized[View.GRAPH] = True
        assert state.is_initialized(View.GRAPH)

    def test_exit_code(self):
        from kgcli.tui.app_state import ApplicationState

        state = ApplicationState()
        assert state.exit_code == 0
        state.session_expired = True
        assert state.exit_code == 1

    def test_instances_do_not_share_containers(self):
        from kgcli.tui.app_state import ApplicationState
        from kgcli.tui.views import View

        a, b = ApplicationState(), ApplicationState()
        a.initialized[View.HELP] = True
        assert b.initialized == {}
        assert a.status is not b.status
