#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Textual shell for the Knowledge Garden terminal client.

The shell is deliberately thin. It turns terminal events into messages,
feeds them to the Dispatcher one at a time on the event-loop thread, and
runs the commands the dispatcher hands back:

- ordinary commands run on thread workers; each result is posted back
  with call_from_thread so state is only touched on the loop thread
- Tick commands become Textual timers
- the rendered view text is pushed into three Static widgets
"""

from functools import partial
from typing import Optional

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.css.query import NoMatches
from textual.events import Key as KeyEvent
from textual.events import Resize as ResizeEvent
from textual.widgets import Header, Static

try:
    from kgcli.debug_logger import get_logger
    from kgcli.tui.commands import Cmd, Command, Tick, execute, flatten
    from kgcli.tui.dispatcher import Dispatcher
    from kgcli.tui.messages import Key, Message, Resize
except ImportError:
    from ..debug_logger import get_logger
    from .commands import Cmd, Command, Tick, execute, flatten
    from .dispatcher import Dispatcher
    from .messages import Key, Message, Resize

APP_TITLE = "Knowledge Garden - TUI"


class ViewBody(VerticalScroll, can_focus=False):
    """Scroll container for the view text; never takes focus."""


class KnowledgeGardenApp(App):
    """Hosts the dispatcher loop inside a Textual application."""

    TITLE = APP_TITLE
    CSS_PATH = "styles/app.tcss"

    # Keys Textual would otherwise consume for its own quit/focus handling
    BINDINGS = [
        Binding("ctrl+c", "send_key('ctrl+c')", show=False, priority=True),
        Binding("tab", "send_key('tab')", show=False, priority=True),
        Binding("shift+tab", "send_key('shift+tab')", show=False, priority=True),
    ]

    def __init__(self, dispatcher: Dispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher

    def compose(self) -> ComposeResult:
        yield Header()
        with ViewBody(id="body-scroll"):
            yield Static("", id="body", markup=False)
        yield Static("", id="status", markup=False)
        yield Static("", id="key-help", markup=False)

    def on_mount(self) -> None:
        self._schedule(self.dispatcher.init())
        self._refresh_view()

    # -------------------------------------------------------------------------
    # Events in
    # -------------------------------------------------------------------------

    def on_key(self, event: KeyEvent) -> None:
        event.stop()
        event.prevent_default()
        self.deliver(Key.from_textual(event.key, event.character))

    def on_resize(self, event: ResizeEvent) -> None:
        self.deliver(Resize(event.size.width, event.size.height))

    def action_send_key(self, key: str) -> None:
        self.deliver(Key.of(key))

    def deliver(self, msg: Message) -> None:
        """Feed one message to the dispatcher and act on the outcome."""
        if self.dispatcher.quitting:
            return
        cmd = self.dispatcher.update(msg)
        if self.dispatcher.quitting:
            self.exit(return_code=self.dispatcher.exit_code)
            return
        self._schedule(cmd)
        self._refresh_view()

    # -------------------------------------------------------------------------
    # Commands out
    # -------------------------------------------------------------------------

    def _schedule(self, cmd: Optional[Command]) -> None:
        for single in flatten(cmd):
            if isinstance(single, Tick):
                self.set_timer(single.delay, partial(self.deliver, single.message))
            else:
                self._run_command(single)

    @work(thread=True, group="commands")
    def _run_command(self, cmd: Cmd) -> None:
        msg = execute(cmd)
        try:
            self.call_from_thread(self.deliver, msg)
        except RuntimeError as e:
            # App already shut down; nothing is left to deliver to
            get_logger().error("deliver", f"{type(msg).__name__}: {e}")

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _refresh_view(self) -> None:
        try:
            body = self.query_one("#body", Static)
        except NoMatches:
            # Resize can arrive before compose has run
            return
        body.update(self.dispatcher.render())
        self.query_one("#status", Static).update(self.dispatcher.status_text())
        self.query_one("#key-help", Static).update(self.dispatcher.key_help())
        self.sub_title = self.dispatcher.state.current_view.label


def run_app(dispatcher: Dispatcher) -> int:
    """Run the TUI until it quits; returns the process exit code."""
    app = KnowledgeGardenApp(dispatcher)
    app.run()
    return app.return_code or dispatcher.exit_code
