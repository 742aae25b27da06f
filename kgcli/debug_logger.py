#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Structured debug logging for kg-cli.

Writes one JSON object per line to <state_dir>/debug.log. Every entry has
the same envelope (event, level, timestamp, session_id, pid) plus
event-specific fields.

Debug levels (KG_CLI_DEBUG):
    0 - disabled
    1 - lifecycle events and errors (default)
    2 - + command/API request tracing
    3 - + every dispatched message
"""

import json
import os
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

try:
    from kgcli.paths import PathResolver
except ImportError:
    from paths import PathResolver

DEFAULT_DEBUG_LEVEL = 1
MAX_ERROR_LENGTH = 500  # Truncate error text so a bad response can't bloat the log


def _read_level() -> int:
    raw = os.environ.get("KG_CLI_DEBUG", str(DEFAULT_DEBUG_LEVEL))
    try:
        return max(0, int(raw))
    except ValueError:
        return DEFAULT_DEBUG_LEVEL


class DebugLogger:
    """JSON-lines logger bound to a single process run."""

    def __init__(self, log_path: Optional[Path] = None) -> None:
        self.level = _read_level()
        self.log_path = log_path or PathResolver.debug_log()
        self.session_id = uuid.uuid4().hex[:12]
        self.pid = os.getpid()

    @property
    def enabled(self) -> bool:
        return self.level > 0

    def _write(self, event: str, min_level: int, **fields: Any) -> None:
        if self.level < min_level:
            return
        entry = {
            "event": event,
            "level": "error" if event.endswith("error") else "info",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": self.session_id,
            "pid": self.pid,
        }
        entry.update(fields)
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError:
            # Logging must never take the TUI down
            pass

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def app_start(self, view: str, base_url: str) -> None:
        self._write("app_start", 1, view=view, base_url=base_url)

    def app_exit(self, reason: str, exit_code: int) -> None:
        self._write("app_exit", 1, reason=reason, exit_code=exit_code)

    def view_switch(self, from_view: str, to_view: str, initialized: bool) -> None:
        """Log a navigation; initialized=True means the destination ran its Init."""
        self._write(
            "view_switch", 1, from_view=from_view, to_view=to_view, initialized=initialized
        )

    def session_check(self, outcome: str, seconds_left: Optional[float] = None) -> None:
        fields = {"outcome": outcome}
        if seconds_left is not None:
            fields["seconds_left"] = round(seconds_left, 1)
        self._write("session_check", 1, **fields)

    # -------------------------------------------------------------------------
    # Tracing
    # -------------------------------------------------------------------------

    def api_request(self, method: str, path: str, status: int, ms: float) -> None:
        self._write(
            "api_request", 2, method=method, path=path, status=status, ms=round(ms, 1)
        )

    def message(self, message_type: str) -> None:
        self._write("message", 3, message_type=message_type)

    def timed(self) -> float:
        """Return a start mark for api_request timing."""
        return time.perf_counter()

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def command_error(self, op: str, message: str) -> None:
        """A command finished with a classified failure (view keeps running)."""
        self._write("command_error", 1, op=op, err=message[:MAX_ERROR_LENGTH])

    def dispatch_error(self, message_type: str, error: str) -> None:
        """An unexpected exception was caught at the dispatcher boundary."""
        self._write(
            "dispatch_error", 1, message_type=message_type, err=error[:MAX_ERROR_LENGTH]
        )

    def error(self, op: str, err: str) -> None:
        self._write("error", 1, op=op, err=err[:MAX_ERROR_LENGTH])


_logger: Optional[DebugLogger] = None


def get_logger() -> DebugLogger:
    """Return the process-wide logger, creating it on first use."""
    global _logger
    if _logger is None:
        _logger = DebugLogger()
    return _logger


def reset_logger() -> None:
    """Drop the cached logger so the next get_logger() re-reads the environment."""
    global _logger
    _logger = None
