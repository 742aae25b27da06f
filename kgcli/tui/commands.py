#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Deferred units of work for the update loop.

A command is a niladic callable that returns exactly one Message. The
dispatcher never runs commands itself; it returns them from update() and
the shell executes them off the loop (see app.py), posting each result
back as the next message.

- Batch groups commands that run concurrently with no ordering guarantee.
- Tick is a timer: the shell schedules it instead of running it on a worker.
- api_call wraps a client call so classified API failures become the
  caller's error message rather than an exception.
- execute() is the single place a command runs; anything unexpected a
  command raises is turned into an ErrorMsg there.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

try:
    from kgcli.client import APIError
    from kgcli.debug_logger import get_logger
    from kgcli.tui.messages import ErrorMsg, Message
except ImportError:
    from ..client import APIError
    from ..debug_logger import get_logger
    from .messages import ErrorMsg, Message

Cmd = Callable[[], Message]


@dataclass(frozen=True)
class Batch:
    """Commands issued together; their results arrive in any order."""
    commands: Tuple[Cmd, ...]

    def __iter__(self):
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)


@dataclass(frozen=True)
class Tick:
    """Deliver ``message`` after ``delay`` seconds.

    Calling a Tick returns its message immediately, so tests can run it
    like any other command; the shell honours the delay with a timer.
    """
    delay: float
    message: Message

    def __call__(self) -> Message:
        return self.message


Command = Union[Cmd, Batch, Tick]


def batch(*commands: Optional[Command]) -> Optional[Command]:
    """Combine commands, dropping Nones.

    Returns None when nothing is left and the command itself when only one
    is; nested batches are flattened.
    """
    flat: List[Cmd] = []
    for cmd in commands:
        flat.extend(flatten(cmd))
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return Batch(tuple(flat))


def flatten(cmd: Optional[Command]) -> List[Cmd]:
    """Expand a command (or batch of batches) into individual commands."""
    if cmd is None:
        return []
    if isinstance(cmd, Batch):
        result: List[Cmd] = []
        for inner in cmd.commands:
            result.extend(flatten(inner))
        return result
    return [cmd]


def tick(delay: float, message: Message) -> Tick:
    return Tick(delay=delay, message=message)


def emit(message: Message) -> Cmd:
    """Command that immediately yields ``message``."""
    def _cmd() -> Message:
        return message
    _cmd.__qualname__ = f"emit({type(message).__name__})"
    return _cmd


def api_call(
    op: str,
    call: Callable[[], Any],
    on_success: Callable[[Any], Message],
    on_error: Callable[[str], Message],
) -> Cmd:
    """Wrap a client call as a command.

    Args:
        op: Operation name for the debug log (e.g. "get_note")
        call: Performs the request; must only close over values captured
            at issue time, never over live view state
        on_success: Builds the result message from the call's return value
        on_error: Builds the failure message from a user-facing error text
    """
    def _cmd() -> Message:
        try:
            result = call()
        except APIError as e:
            get_logger().command_error(op, e.message)
            return on_error(e.message)
        return on_success(result)

    _cmd.__qualname__ = f"api_call({op})"
    return _cmd


def execute(cmd: Cmd) -> Message:
    """Run one command, converting unexpected exceptions into ErrorMsg."""
    try:
        message = cmd()
    except Exception as e:
        name = getattr(cmd, "__qualname__", repr(cmd))
        get_logger().error(f"command {name}", f"{type(e).__name__}: {e}")
        return ErrorMsg(f"Unexpected error: {e}")
    if not isinstance(message, Message):
        return ErrorMsg(f"Command returned {type(message).__name__}, not a message")
    return message


def run_all(cmd: Optional[Command]) -> List[Message]:
    """Run a command tree synchronously, in order, ignoring Tick delays."""
    return [execute(c) for c in flatten(cmd)]

