# SPDX-License-Identifier: MIT
"""Base class shared by the view controllers.

A controller owns its view's local state. The dispatcher only talks to it
through init(), update(), render(), is_input_focused() and blur(); it
never reaches into the controller's fields.
"""
from typing import Optional

try:
    from kgcli.client import ApiClient
    from kgcli.tui.commands import Command
    from kgcli.tui.messages import Message
except ImportError:
    from ..client import ApiClient
    from .commands import Command
    from .messages import Message

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24


class ViewController:
    """Default no-op implementations of the controller contract."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.width = DEFAULT_WIDTH
        self.height = DEFAULT_HEIGHT

    def init(self) -> Optional[Command]:
        """Command for the view's first fetch, run once per initialization."""
        return None

    def update(self, msg: Message) -> Optional[Command]:
        return None

    def render(self) -> str:
        return ""

    def is_input_focused(self) -> bool:
        """True while a text field should receive every keystroke."""
        return False

    def claims_key(self, key: str) -> bool:
        """True if the view handles ``key`` itself instead of the global binding."""
        return False

    def is_stale(self, msg: Message) -> bool:
        """True if ``msg`` answers a request the view has since moved off."""
        return False

    def blur(self) -> None:
        """Close forms and dialogs; called when navigating away."""

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height


def move_cursor(index: int, delta: int, count: int) -> int:
    """Clamp a cursor move to [0, count)."""
    if count <= 0:
        return 0
    return max(0, min(count - 1, index + delta))


def visible_window(selected: int, count: int, rows: int) -> range:
    """Indexes to draw so the selected row stays on screen."""
    rows = max(1, rows)
    start = max(0, min(selected - rows // 2, count - rows))
    return range(start, min(count, start + rows))
