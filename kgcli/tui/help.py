# SPDX-License-Identifier: MIT
"""Static, scrollable key reference."""
from typing import List, Optional, Tuple

try:
    from kgcli.tui.commands import Command
    from kgcli.tui.controller import ViewController
    from kgcli.tui.messages import Key, Message
except ImportError:
    from .commands import Command
    from .controller import ViewController
    from .messages import Key, Message

HELP_SECTIONS: List[Tuple[str, List[Tuple[str, str]]]] = [
    ("KEY BINDINGS", [
        ("q", "Quit TUI"),
        ("? / F1", "Show or close this help screen"),
        ("ESC", "Go back / Cancel current operation"),
        ("/ or s", "Quick search (from any view)"),
        ("n", "Create new note (from any view)"),
        ("t", "Tags"),
        ("a", "Activity"),
        ("g", "Knowledge graph"),
        ("Ctrl+C", "Force quit (no confirmation)"),
    ]),
    ("NAVIGATION", [
        ("j / ↓", "Move down / Next item"),
        ("k / ↑", "Move up / Previous item"),
        ("h / ←", "Previous tab or page"),
        ("l / →", "Next tab or page"),
        ("Enter", "Open selected item / Confirm"),
        ("0 / G", "Top / bottom of the note list"),
        ("[ / ]", "Previous / next page"),
    ]),
    ("VIEWS", [
        ("Dashboard", "Stats, recent activity and trending notes; l lists notes"),
        ("Notes", "Paginated list; f filters by text"),
        ("Note Detail", "Tabs for content, tags, links and backlinks; e edits, d deletes"),
        ("Create/Edit", "Tab between fields, Ctrl+J for a new line, Enter saves"),
        ("Tags", "c creates, e renames, d deletes, Enter shows tagged notes"),
        ("Search", "Enter runs the query; / starts a new one"),
        ("Activity", "Your recent actions; Enter opens the note"),
        ("Graph", "Space expands links, +/- shows more or fewer nodes"),
    ]),
    ("TIPS", [
        ("[[Title]]", "Link notes by writing the target title in double brackets"),
        ("r", "Refresh the current view"),
        ("Session", "You are warned 5 minutes before your login expires"),
    ]),
]

KEY_WIDTH = 14


def help_text() -> str:
    lines: List[str] = []
    for section, entries in HELP_SECTIONS:
        lines += [section, ""]
        lines += [f"  {key:<{KEY_WIDTH}}{desc}" for key, desc in entries]
        lines.append("")
    return "\n".join(lines).rstrip()


class HelpView(ViewController):
    def __init__(self, client=None) -> None:
        super().__init__(client)
        self.offset = 0
        self.lines = help_text().split("\n")

    @property
    def page_size(self) -> int:
        return max(1, self.height - 4)

    def update(self, msg: Message) -> Optional[Command]:
        if not isinstance(msg, Key):
            return None
        last = max(0, len(self.lines) - self.page_size)
        if msg.key in ("j", "down"):
            self.offset = min(last, self.offset + 1)
        elif msg.key in ("k", "up"):
            self.offset = max(0, self.offset - 1)
        elif msg.key == "pagedown":
            self.offset = min(last, self.offset + self.page_size)
        elif msg.key == "pageup":
            self.offset = max(0, self.offset - self.page_size)
        elif msg.key == "home":
            self.offset = 0
        return None

    def render(self) -> str:
        return "\n".join(self.lines[self.offset : self.offset + self.page_size])
