# SPDX-License-Identifier: MIT
"""State containers for the dispatcher.

- ApplicationState: current/previous view, lazy-init flags, session,
  notification overlay, terminal size and shutdown flags

Per-view state lives in the view controllers, not here.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

try:
    from kgcli.tui.components import StatusBar
    from kgcli.tui.controller import DEFAULT_HEIGHT, DEFAULT_WIDTH
    from kgcli.tui.session import SessionInfo
    from kgcli.tui.views import View
except ImportError:
    from .components import StatusBar
    from .controller import DEFAULT_HEIGHT, DEFAULT_WIDTH
    from .session import SessionInfo
    from .views import View


@dataclass
class ApplicationState:
    """Top-level state owned and mutated only by the dispatcher.

    ``previous_view`` is a single back slot, not a history stack.
    ``initialized[v]`` is True once v's init() has run since it was last
    replaced with a fresh instance.
    """

    current_view: View = View.DASHBOARD
    previous_view: Optional[View] = None
    initialized: Dict[View, bool] = field(default_factory=dict)
    session: SessionInfo = field(default_factory=SessionInfo)
    status: StatusBar = field(default_factory=StatusBar)
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    quitting: bool = False
    session_expired: bool = False
    # Note id whose edit waits on NoteDetail's fetch
    pending_edit_id: Optional[str] = None

    def is_initialized(self, view: View) -> bool:
        return self.initialized.get(view, False)

    @property
    def exit_code(self) -> int:
        return 1 if self.session_expired else 0
