# SPDX-License-Identifier: MIT
"""Tests for the JSON-lines debug logger."""

import json

import pytest


def read_entries(state_dir):
    path = state_dir / "debug.log"
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestDebugLogger:
    def test_envelope(self, temp_state_dir):
        from kgcli.debug_logger import get_logger

        get_logger().app_start("dashboard", "http://localhost:8080")
        (entry,) = read_entries(temp_state_dir)
        assert entry["event"] == "app_start"
        assert entry["level"] == "info"
        assert entry["view"] == "dashboard"
        for key in ("timestamp", "session_id", "pid"):
            assert key in entry

    def test_error_level(self, temp_state_dir):
        from kgcli.debug_logger import get_logger

        get_logger().command_error("load_notes", "boom")
        (entry,) = read_entries(temp_state_dir)
        assert entry["level"] == "error"
        assert entry["err"] == "boom"

    def test_disabled(self, temp_state_dir, monkeypatch):
        from kgcli.debug_logger import get_logger, reset_logger

        monkeypatch.setenv("KG_CLI_DEBUG", "0")
        reset_logger()
        logger = get_logger()
        assert not logger.enabled
        logger.app_start("dashboard", "x")
        assert read_entries(temp_state_dir) == []

    @pytest.mark.parametrize("level,expected", [
        ("1", ["view_switch"]),
        ("2", ["view_switch", "api_request"]),
        ("3", ["view_switch", "api_request", "message"]),
    ])
    def test_level_filtering(self, temp_state_dir, monkeypatch, level, expected):
        from kgcli.debug_logger import get_logger, reset_logger

        monkeypatch.setenv("KG_CLI_DEBUG", level)
        reset_logger()
        logger = get_logger()
        logger.view_switch("dashboard", "notes", True)
        logger.api_request("GET", "/notes", 200, 12.34)
        logger.message("KeyMsg")
        assert [e["event"] for e in read_entries(temp_state_dir)] == expected

    def test_bad_level_uses_default(self, monkeypatch):
        from kgcli.debug_logger import DEFAULT_DEBUG_LEVEL, get_logger, reset_logger

        monkeypatch.setenv("KG_CLI_DEBUG", "verbose")
        reset_logger()
        assert get_logger().level == DEFAULT_DEBUG_LEVEL

    def test_long_errors_truncated(self, temp_state_dir):
        from kgcli.debug_logger import MAX_ERROR_LENGTH, get_logger

        get_logger().dispatch_error("KeyMsg", "x" * 2000)
        (entry,) = read_entries(temp_state_dir)
        assert len(entry["err"]) == MAX_ERROR_LENGTH

    def test_session_check_rounds(self, temp_state_dir):
        from kgcli.debug_logger import get_logger

        get_logger().session_check("expiring", seconds_left=120.456)
        (entry,) = read_entries(temp_state_dir)
        assert entry["outcome"] == "expiring"
        assert entry["seconds_left"] == 120.5

    def test_logger_is_cached(self):
        from kgcli.debug_logger import get_logger, reset_logger

        first = get_logger()
        assert get_logger() is first
        reset_logger()
        assert get_logger() is not first
