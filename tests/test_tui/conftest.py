"""Fixtures for driving the TUI update loop without a terminal."""

from typing import List, Optional

import pytest

from kgcli.config import Settings
from kgcli.tui.commands import Command, Tick, execute, flatten
from kgcli.tui.messages import Key, Message


class Pump:
    """Feeds a dispatcher messages and runs the commands it returns.

    Results are fed back until nothing is left to run. Ticks are never
    fired automatically; they are collected in ``ticks`` so a test can
    inspect them or fire one with ``fire()``.
    """

    def __init__(self, dispatcher, max_steps: int = 200) -> None:
        self.dispatcher = dispatcher
        self.max_steps = max_steps
        self.ticks: List[Tick] = []
        self.delivered: List[Message] = []

    def run(self, cmd: Optional[Command]) -> None:
        queue = list(flatten(cmd))
        steps = 0
        while queue:
            single = queue.pop(0)
            if isinstance(single, Tick):
                self.ticks.append(single)
                continue
            steps += 1
            assert steps <= self.max_steps, "command loop did not settle"
            msg = execute(single)
            self.delivered.append(msg)
            queue.extend(flatten(self.dispatcher.update(msg)))

    def send(self, msg: Message) -> None:
        self.run(self.dispatcher.update(msg))

    def press(self, *keys: str) -> None:
        for name in keys:
            self.send(Key.of(name))

    def type(self, text: str) -> None:
        for ch in text:
            self.send(Key.of("space") if ch == " " else Key(ch, ch))

    def start(self) -> None:
        self.run(self.dispatcher.init())

    def fire(self, message_type: type) -> None:
        """Deliver every collected tick carrying ``message_type``."""
        due = [t for t in self.ticks if isinstance(t.message, message_type)]
        self.ticks = [t for t in self.ticks if t not in due]
        for t in due:
            self.send(t.message)

    def ticks_of(self, message_type: type) -> List[Tick]:
        return [t for t in self.ticks if isinstance(t.message, message_type)]


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def dispatcher(fake_client, settings, session_info, fake_clock, now):
    from kgcli.tui.dispatcher import Dispatcher

    return Dispatcher(
        fake_client,
        settings=settings,
        session=session_info,
        clock=fake_clock,
        now=lambda: now,
    )


@pytest.fixture
def make_pump():
    return Pump


@pytest.fixture
def pump(dispatcher) -> Pump:
    return Pump(dispatcher)


@pytest.fixture
def started(pump) -> Pump:
    """A pump whose dispatcher has run init() and settled on the dashboard."""
    pump.start()
    return pump
