# SPDX-License-Identifier: MIT
"""Tests for command combinators and execution."""

import pytest

from kgcli.client import NotFoundError
from kgcli.tui.commands import Batch, Tick, api_call, batch, emit, execute, flatten, run_all, tick
from kgcli.tui.messages import ErrorMsg, NoteFetchError, NoteFetched, Quit, ShowDashboard


class TestBatch:
    def test_empty_batch_is_none(self):
        assert batch() is None
        assert batch(None, None) is None

    def test_single_command_is_returned_as_is(self):
        cmd = emit(Quit())
        assert batch(None, cmd, None) is cmd

    def test_nested_batches_are_flattened(self):
        a, b, c = emit(Quit()), emit(ShowDashboard()), emit(Quit())
        combined = batch(a, batch(b, c))
        assert isinstance(combined, Batch)
        assert list(combined) == [a, b, c]
        assert len(combined) == 3

    def test_flatten_none(self):
        assert flatten(None) == []


class TestTick:
    def test_tick_is_callable(self):
        t = tick(2.5, ShowDashboard())
        assert isinstance(t, Tick)
        assert t.delay == 2.5
        assert t() == ShowDashboard()

    def test_run_all_ignores_delay(self):
        assert run_all(batch(tick(60, Quit()), emit(ShowDashboard()))) == [
            Quit(),
            ShowDashboard(),
        ]


class TestApiCall:
    def test_success(self):
        cmd = api_call(
            "get_note",
            lambda: "note",
            lambda note: NoteFetched("n1", note),
            lambda err: NoteFetchError("n1", err),
        )
        assert cmd() == NoteFetched("n1", "note")

    def test_api_error_becomes_error_message(self):
        def fail():
            raise NotFoundError("resource not found", status=404)

        cmd = api_call(
            "get_note",
            fail,
            lambda note: NoteFetched("n1", note),
            lambda err: NoteFetchError("n1", err),
        )
        assert cmd() == NoteFetchError("n1", "resource not found")

    def test_command_error_is_logged(self, temp_state_dir):
        import json

        def fail():
            raise NotFoundError("resource not found", status=404)

        api_call("get_note", fail, ErrorMsg, ErrorMsg)()
        lines = (temp_state_dir / "debug.log").read_text().splitlines()
        entry = json.loads(lines[-1])
        assert entry["event"] == "command_error"
        assert entry["level"] == "error"
        assert entry["op"] == "get_note"


class TestExecute:
    def test_unexpected_exception_becomes_error_msg(self):
        def boom():
            raise ZeroDivisionError("division by zero")

        msg = execute(boom)
        assert isinstance(msg, ErrorMsg)
        assert msg.message == "Unexpected error: division by zero"

    def test_non_message_result_is_rejected(self):
        msg = execute(lambda: 42)
        assert isinstance(msg, ErrorMsg)
        assert "int" in msg.message

    @pytest.mark.parametrize("message", [Quit(), ShowDashboard()])
    def test_message_passes_through(self, message):
        assert execute(emit(message)) is message
