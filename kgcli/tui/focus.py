# SPDX-License-Identifier: MIT
"""Keystroke routing between global navigation and the active view.

Precedence, first match wins:

1. quit keys always quit
2. a focused input receives the key unmodified
3. global bindings (help, search, tags, activity, graph, new note, back)
4. everything else goes to the active view
"""
from enum import Enum

try:
    from kgcli.tui.views import BACK_KEYS, HELP_KEYS, QUIT_KEYS, SEARCH_KEYS
except ImportError:
    from .views import BACK_KEYS, HELP_KEYS, QUIT_KEYS, SEARCH_KEYS

TAGS_KEY = "t"
ACTIVITY_KEY = "a"
GRAPH_KEY = "g"
NEW_NOTE_KEY = "n"

GLOBAL_KEYS = frozenset(
    HELP_KEYS | SEARCH_KEYS | BACK_KEYS | {TAGS_KEY, ACTIVITY_KEY, GRAPH_KEY, NEW_NOTE_KEY}
)


class Route(str, Enum):
    QUIT = "quit"
    VIEW_INPUT = "view_input"
    GLOBAL = "global"
    VIEW = "view"


def route_key(key: str, input_focused: bool, claimed: bool = False) -> Route:
    """Decide who handles ``key``.

    Args:
        key: Routing name of the key (see messages.Key)
        input_focused: The active view reports a focused text field or dialog
        claimed: The active view binds ``key`` itself, shadowing the global
    """
    if key in QUIT_KEYS:
        return Route.QUIT
    if input_focused:
        return Route.VIEW_INPUT
    if key in GLOBAL_KEYS and not claimed:
        return Route.GLOBAL
    return Route.VIEW
