#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Application dispatcher: the single update loop of the TUI.

The dispatcher owns ApplicationState and one controller per view. Every
message goes through update(), one at a time; update() mutates state and
returns the command (if any) the shell should run next. Nothing else
mutates state, and the dispatcher only touches a view through its
controller contract (init/update/render/is_input_focused/blur).

Responsibilities:
- key routing (see focus.py) and global bindings
- view transitions with per-view cleanup policy and lazy first init
- cross-view requests (open/edit note, filter by tag, redirects)
- the notification overlay and its expiry
- periodic session checks and the fatal session-expired shutdown
- fault containment: a failure handling one message becomes an error
  notification instead of ending the program
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

try:
    from kgcli.client import ApiClient
    from kgcli.config import Settings
    from kgcli.debug_logger import get_logger
    from kgcli.tui.activity import ActivityView
    from kgcli.tui.app_state import ApplicationState
    from kgcli.tui.commands import Command, batch, tick
    from kgcli.tui.controller import ViewController
    from kgcli.tui.dashboard import DashboardView
    from kgcli.tui.focus import Route, route_key
    from kgcli.tui.formatting import format_duration
    from kgcli.tui.graph import GraphView
    from kgcli.tui.help import HelpView
    from kgcli.tui import messages as m
    from kgcli.tui.note_detail import NoteDetailView
    from kgcli.tui.note_form import NoteFormView
    from kgcli.tui.note_list import NoteListView
    from kgcli.tui.search import SearchView
    from kgcli.tui.session import SessionInfo, SessionMonitor
    from kgcli.tui.tag_list import TagListView
    from kgcli.tui.views import BACK_KEYS, HELP_KEYS, SEARCH_KEYS, CleanupPolicy, View
except ImportError:
    from ..client import ApiClient
    from ..config import Settings
    from ..debug_logger import get_logger
    from .activity import ActivityView
    from .app_state import ApplicationState
    from .commands import Command, batch, tick
    from .controller import ViewController
    from .dashboard import DashboardView
    from .focus import Route, route_key
    from .formatting import format_duration
    from .graph import GraphView
    from .help import HelpView
    from . import messages as m
    from .note_detail import NoteDetailView
    from .note_form import NoteFormView
    from .note_list import NoteListView
    from .search import SearchView
    from .session import SessionInfo, SessionMonitor
    from .tag_list import TagListView
    from .views import BACK_KEYS, HELP_KEYS, SEARCH_KEYS, CleanupPolicy, View

NOTIFICATION_TICK = 1.0  # seconds between overlay expiry checks

VIEW_FACTORIES = {
    View.DASHBOARD: DashboardView,
    View.NOTE_LIST: NoteListView,
    View.NOTE_DETAIL: NoteDetailView,
    View.NOTE_CREATE: NoteFormView,
    View.TAG_LIST: TagListView,
    View.SEARCH: SearchView,
    View.ACTIVITY: ActivityView,
    View.GRAPH: GraphView,
    View.HELP: HelpView,
}

GLOBAL_VIEW_KEYS = {
    "t": View.TAG_LIST,
    "a": View.ACTIVITY,
    "g": View.GRAPH,
}

# Which view a result message belongs to
MESSAGE_OWNERS = {
    m.StatsFetched: View.DASHBOARD,
    m.RecentActivityFetched: View.DASHBOARD,
    m.TrendingFetched: View.DASHBOARD,
    m.DashboardError: View.DASHBOARD,
    m.NotesFetched: View.NOTE_LIST,
    m.NotesError: View.NOTE_LIST,
    m.NoteFetchError: View.NOTE_DETAIL,
    m.TabFetched: View.NOTE_DETAIL,
    m.TabError: View.NOTE_DETAIL,
    m.AvailableTagsFetched: View.NOTE_DETAIL,
    m.NoteSaveError: View.NOTE_CREATE,
    m.TagsFetched: View.TAG_LIST,
    m.TagsError: View.TAG_LIST,
    m.SearchResults: View.SEARCH,
    m.SearchError: View.SEARCH,
    m.ActivityFetched: View.ACTIVITY,
    m.ActivityError: View.ACTIVITY,
    m.GraphFetched: View.GRAPH,
    m.GraphError: View.GRAPH,
}

TAG_NOTICES = {
    m.TagCreated: "Tag created",
    m.TagUpdated: "Tag updated",
    m.TagDeleted: "Tag deleted",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Dispatcher:
    """Elm-style reducer over ApplicationState and the view controllers."""

    def __init__(
        self,
        client: ApiClient,
        settings: Optional[Settings] = None,
        session: Optional[SessionInfo] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.settings = settings or Settings()
        self.clock = clock
        self.now = now
        if session is None:
            session = SessionInfo(
                check_interval=timedelta(seconds=self.settings.session_check_interval),
                warning_threshold=timedelta(seconds=self.settings.session_warning_threshold),
                last_checked_at=now(),
            )
        self.state = ApplicationState(session=session)
        self.monitor = SessionMonitor(client, session)
        self.views: Dict[View, ViewController] = {}
        for view in VIEW_FACTORIES:
            self.views[view] = self._fresh(view)
        # Create and edit share one form controller
        self.views[View.NOTE_EDIT] = self.views[View.NOTE_CREATE]
        self._last_render = ""
        self._sync_status()

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def current(self) -> ViewController:
        return self.views[self.state.current_view]

    @property
    def note_detail(self) -> NoteDetailView:
        return self.views[View.NOTE_DETAIL]

    @property
    def quitting(self) -> bool:
        return self.state.quitting

    @property
    def exit_code(self) -> int:
        return self.state.exit_code

    def _fresh(self, view: View) -> ViewController:
        controller = VIEW_FACTORIES[view](self.client)
        controller.resize(self.state.width, self.state.height)
        return controller

    # -------------------------------------------------------------------------
    # Loop entry points
    # -------------------------------------------------------------------------

    def init(self) -> Optional[Command]:
        """Commands to run at startup: session check, first view, overlay tick."""
        start = self.state.current_view
        get_logger().app_start(start.value, self.settings.base_url)
        self.state.initialized[start] = True
        return batch(
            self.monitor.check(self.now()),
            self.current.init(),
            tick(NOTIFICATION_TICK, m.NotificationTick()),
        )

    def update(self, msg: m.Message) -> Optional[Command]:
        """Apply one message; never raises."""
        if self.state.quitting:
            return None
        logger = get_logger()
        logger.message(type(msg).__name__)
        try:
            cmd = self._update(msg)
        except Exception as e:
            logger.dispatch_error(type(msg).__name__, f"{type(e).__name__}: {e}")
            cmd = self._notify_error(f"Unexpected error: {e}")

        if not self.state.quitting:
            cmd = batch(cmd, self.monitor.check_if_due(self.now()))
        self._sync_status()
        return cmd

    def render(self) -> str:
        """Body text of the current view; a failing render shows the last good one."""
        try:
            self._last_render = self.current.render()
        except Exception as e:
            get_logger().error("render", f"{type(e).__name__}: {e}")
        return self._last_render

    def status_text(self) -> str:
        return self.state.status.render()

    def key_help(self) -> str:
        return self.state.current_view.key_help

    # -------------------------------------------------------------------------
    # Message handling
    # -------------------------------------------------------------------------

    def _update(self, msg: m.Message) -> Optional[Command]:
        if isinstance(msg, m.Key):
            return self._handle_key(msg)
        if isinstance(msg, m.Resize):
            return self._resize(msg.width, msg.height)
        if isinstance(msg, m.Quit):
            return self._quit("user")

        # Navigation requests
        if isinstance(msg, m.SwitchView):
            return self._switch_to(msg.view)
        if isinstance(msg, m.ShowHelp):
            return self._toggle_help()
        if isinstance(msg, m.ShowDashboard):
            return self._switch_to(View.DASHBOARD)
        if isinstance(msg, m.ShowNoteList):
            return self._switch_to(View.NOTE_LIST)
        if isinstance(msg, m.ViewBack):
            return self._back()
        if isinstance(msg, m.OpenNote):
            return self._open_note(msg.note_id)
        if isinstance(msg, m.EditNote):
            return self._edit_note(msg.note_id)
        if isinstance(msg, m.FilterNotesByTag):
            return self._filter_by_tag(msg)

        # Notifications
        if isinstance(msg, m.ErrorMsg):
            return self._notify_error(msg.message)
        if isinstance(msg, m.ClearNotification):
            self.state.status.clear_if_current(msg.generation)
            return None
        if isinstance(msg, m.NotificationTick):
            self.state.status.expire(self.clock())
            return tick(NOTIFICATION_TICK, m.NotificationTick())

        # Session
        if isinstance(msg, m.SessionValid):
            self.state.session.last_checked_at = self.now()
            self.state.session.valid = True
            get_logger().session_check("valid")
            return None
        if isinstance(msg, m.SessionExpiringSoon):
            # Stays up until replaced or dismissed; it is the only warning
            self.state.status.show_error(
                f"Session expiring in {format_duration(msg.remaining)} - please save your work"
            )
            return None
        if isinstance(msg, m.SessionExpired):
            self.state.session.valid = False
            self.state.session_expired = True
            get_logger().session_check("expired")
            return self._quit("session_expired")
        if isinstance(msg, m.SessionCheckFailed):
            get_logger().session_check("probe_failed")
            return self._notify_error(f"Session check failed: {msg.error}")

        # Results with cross-view effects
        if isinstance(msg, m.NoteFetched):
            return self._note_fetched(msg)
        if isinstance(msg, m.NoteFetchError) and self.state.pending_edit_id == msg.note_id:
            self.state.pending_edit_id = None
            return batch(
                self._notify_error(f"Failed to load note: {msg.error}"),
                self.note_detail.update(msg),
            )
        if isinstance(msg, (m.NoteCreated, m.NoteUpdated)):
            return self._note_saved(msg)
        if isinstance(msg, m.NoteDeleted):
            self.note_detail.update(msg)
            return batch(
                self._notify_info("Note deleted"),
                tick(self.settings.redirect_delay, m.ShowDashboard()),
            )
        if isinstance(msg, m.NoteTagChanged):
            notice = "Tag added" if msg.added else "Tag removed"
            return batch(
                self._notify_info(notice, after=self.settings.tag_clear_after),
                self.note_detail.update(msg),
            )
        if isinstance(msg, m.NoteDeleteError):
            return batch(
                self._notify_error(f"Failed to delete note: {msg.error}"),
                self.note_detail.update(msg),
            )
        if isinstance(msg, (m.TagCreated, m.TagUpdated, m.TagDeleted)):
            return batch(
                self._notify_info(TAG_NOTICES[type(msg)], after=self.settings.tag_clear_after),
                self.views[View.TAG_LIST].update(msg),
            )

        # Plain results for one view
        owner = MESSAGE_OWNERS.get(type(msg))
        if owner is not None:
            return self._deliver(owner, msg)
        return None

    def _deliver(self, owner: View, msg: m.Message) -> Optional[Command]:
        # A replaced view's results belong to an instance that no longer exists
        if owner != self.state.current_view and owner.cleanup == CleanupPolicy.REPLACE:
            return None
        view = self.views[owner]
        if view.is_stale(msg):
            return None
        overlay = None
        if isinstance(msg, m.OVERLAY_ERRORS):
            overlay = self._notify_error(msg.error)
        return batch(overlay, view.update(msg))

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def _handle_key(self, msg: m.Key) -> Optional[Command]:
        view = self.current
        route = route_key(msg.key, view.is_input_focused(), view.claims_key(msg.key))
        if route == Route.QUIT:
            return self._quit("user")
        if route != Route.GLOBAL:
            return view.update(msg)

        key = msg.key
        if key in HELP_KEYS:
            return self._toggle_help()
        if key in BACK_KEYS:
            if self.state.current_view == View.HELP:
                return self._back()
            if self.state.current_view == View.DASHBOARD:
                return None
            self.state.status.clear()
            return self._switch_to(View.DASHBOARD)
        if key in SEARCH_KEYS:
            cmd = self._switch_to(View.SEARCH)
            self.views[View.SEARCH].focus_input()
            return cmd
        if key in GLOBAL_VIEW_KEYS:
            return self._switch_to(GLOBAL_VIEW_KEYS[key])
        if key == "n":
            return self._new_note()
        return None

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _cleanup(self, view: View) -> None:
        policy = view.cleanup
        if policy == CleanupPolicy.REPLACE:
            self.views[view] = self._fresh(view)
            self.state.initialized[view] = False
        elif policy == CleanupPolicy.BLUR:
            self.views[view].blur()

    def _switch_to(self, view: View, run_init: bool = True) -> Optional[Command]:
        """Leave the current view (applying its cleanup) and enter ``view``."""
        state = self.state
        if view == state.current_view:
            return None
        leaving = state.current_view
        if leaving == View.HELP:
            # Help sits on top of another view; that one is what we leave
            leaving = state.previous_view or View.DASHBOARD
            if leaving == view:
                state.current_view = view
                return None
        self._cleanup(leaving)
        state.previous_view = leaving
        state.current_view = view

        first_time = not state.is_initialized(view)
        get_logger().view_switch(leaving.value, view.value, not first_time)
        if run_init and first_time:
            state.initialized[view] = True
            return self.views[view].init()
        return None

    def _toggle_help(self) -> Optional[Command]:
        state = self.state
        if state.current_view == View.HELP:
            return self._back()
        # The view under Help keeps its state; Help is an overlay on it
        state.previous_view = state.current_view
        state.current_view = View.HELP
        state.initialized[View.HELP] = True
        self.views[View.HELP].offset = 0
        return None

    def _back(self) -> Optional[Command]:
        state = self.state
        target = state.previous_view or View.DASHBOARD
        if state.current_view == View.HELP:
            state.current_view = target
            return None
        return self._switch_to(target)

    def _resize(self, width: int, height: int) -> Optional[Command]:
        self.state.width = width
        self.state.height = height
        for controller in set(self.views.values()):
            controller.resize(width, height)

    def _quit(self, reason: str) -> Optional[Command]:
        self.state.quitting = True
        get_logger().app_exit(reason, self.state.exit_code)
        return None

    # -------------------------------------------------------------------------
    # Cross-view requests
    # -------------------------------------------------------------------------

    def _replace_form(self) -> NoteFormView:
        form = self._fresh(View.NOTE_CREATE)
        self.views[View.NOTE_CREATE] = form
        self.views[View.NOTE_EDIT] = form
        self.state.initialized[View.NOTE_CREATE] = True
        self.state.initialized[View.NOTE_EDIT] = True
        return form

    def _new_note(self) -> Optional[Command]:
        cmd = self._switch_to(View.NOTE_CREATE, run_init=False)
        form = self._replace_form()
        form.focus_form()
        return batch(cmd, form.init())

    def _open_note(self, note_id: str) -> Optional[Command]:
        cmd = self._switch_to(View.NOTE_DETAIL)
        return batch(cmd, self.note_detail.set_note_id(note_id))

    def _edit_note(self, note_id: str) -> Optional[Command]:
        detail = self.note_detail
        if detail.has_note(note_id):
            self.state.pending_edit_id = None
            return self._enter_edit()
        # Fulfilled when the matching NoteFetched arrives
        self.state.pending_edit_id = note_id
        return detail.set_note_id(note_id)

    def _enter_edit(self) -> Optional[Command]:
        cmd = self._switch_to(View.NOTE_EDIT, run_init=False)
        form = self._replace_form()
        form.set_edit_mode(self.note_detail.note)
        return cmd

    def _note_fetched(self, msg: m.NoteFetched) -> Optional[Command]:
        cmd = self.note_detail.update(msg)
        if self.state.pending_edit_id == msg.note_id and self.note_detail.has_note(msg.note_id):
            self.state.pending_edit_id = None
            cmd = batch(cmd, self._enter_edit())
        return cmd

    def _note_saved(self, msg: m.Message) -> Optional[Command]:
        form = self.views[View.NOTE_CREATE]
        form.update(msg)
        form.blur()
        self.note_detail.update(msg)
        notice = "Note created successfully" if isinstance(msg, m.NoteCreated) else "Note updated successfully"
        return batch(
            self._notify_info(notice),
            tick(self.settings.redirect_delay, m.ShowDashboard()),
        )

    def _filter_by_tag(self, msg: m.FilterNotesByTag) -> Optional[Command]:
        self._switch_to(View.NOTE_LIST, run_init=False)
        note_list = self.views[View.NOTE_LIST]
        note_list.set_tag_filter(msg.tag_id)
        self.state.initialized[View.NOTE_LIST] = True
        return batch(
            note_list.init(),
            self._notify_info(f"Filtered by tag: {msg.tag_name}"),
        )

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def _arm(self, generation: int, after: float) -> Command:
        return tick(after, m.ClearNotification(generation))

    def _notify_error(self, text: str, after: Optional[float] = None) -> Command:
        if after is None:
            after = self.settings.clear_after
        generation = self.state.status.show_error(text, deadline=self.clock() + after)
        return self._arm(generation, after)

    def _notify_info(self, text: str, after: Optional[float] = None) -> Command:
        if after is None:
            after = self.settings.clear_after
        generation = self.state.status.show_info(text, deadline=self.clock() + after)
        return self._arm(generation, after)

    def _sync_status(self) -> None:
        view = self.state.current_view
        self.state.status.set_view(view.label, view.key_help)
