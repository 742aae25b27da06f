# SPDX-License-Identifier: MIT
"""View enumeration with display labels, key help and cleanup policy."""
from enum import Enum


class CleanupPolicy(str, Enum):
    """What happens to a view's state when the user navigates away."""
    REPLACE = "replace"  # swap in a fresh zero-state instance
    BLUR = "blur"  # close forms/dialogs, keep fetched data
    RETAIN = "retain"  # leave untouched


class View(str, Enum):
    """Screens of the terminal client."""
    DASHBOARD = "dashboard"
    NOTE_LIST = "note_list"
    NOTE_DETAIL = "note_detail"
    NOTE_CREATE = "note_create"
    NOTE_EDIT = "note_edit"
    TAG_LIST = "tag_list"
    SEARCH = "search"
    ACTIVITY = "activity"
    GRAPH = "graph"
    HELP = "help"

    @property
    def label(self) -> str:
        return VIEW_LABELS[self]

    @property
    def key_help(self) -> str:
        return VIEW_KEY_HELP[self]

    @property
    def cleanup(self) -> CleanupPolicy:
        return VIEW_CLEANUP[self]


VIEW_LABELS = {
    View.DASHBOARD: "Dashboard",
    View.NOTE_LIST: "Notes",
    View.NOTE_DETAIL: "Note Detail",
    View.NOTE_CREATE: "Create Note",
    View.NOTE_EDIT: "Edit Note",
    View.TAG_LIST: "Tags",
    View.SEARCH: "Search",
    View.ACTIVITY: "Activity",
    View.GRAPH: "Knowledge Graph",
    View.HELP: "Help",
}

VIEW_KEY_HELP = {
    View.DASHBOARD: "n:new s:search l:list t:tags a:activity g:graph ?:help q:quit",
    View.NOTE_LIST: "↑↓:nav enter:open ]:next [:prev f:filter esc:back ?:help",
    View.NOTE_DETAIL: "tab:next-tab e:edit d:delete a:add-tag esc:back ?:help",
    View.NOTE_CREATE: "tab:next enter:save esc:cancel ?:help",
    View.NOTE_EDIT: "tab:next enter:save esc:cancel ?:help",
    View.TAG_LIST: "↑↓:nav enter:filter c:create e:edit d:delete esc:back ?:help",
    View.SEARCH: "enter:search ↑↓:nav /:new-search esc:back ?:help",
    View.ACTIVITY: "↑↓:scroll enter:open ←→:page esc:back ?:help",
    View.GRAPH: "↑↓:nav enter:view space:expand +/-:nodes esc:back ?:help",
    View.HELP: "↑↓:scroll esc:close ?:close q:quit",
}

VIEW_CLEANUP = {
    View.DASHBOARD: CleanupPolicy.REPLACE,
    View.NOTE_LIST: CleanupPolicy.REPLACE,
    View.ACTIVITY: CleanupPolicy.REPLACE,
    View.GRAPH: CleanupPolicy.REPLACE,
    View.NOTE_CREATE: CleanupPolicy.BLUR,
    View.NOTE_EDIT: CleanupPolicy.BLUR,
    View.SEARCH: CleanupPolicy.BLUR,
    View.TAG_LIST: CleanupPolicy.BLUR,
    View.NOTE_DETAIL: CleanupPolicy.RETAIN,
    View.HELP: CleanupPolicy.RETAIN,
}

# Global key groups used by the focus router
QUIT_KEYS = frozenset({"q", "ctrl+c"})
HELP_KEYS = frozenset({"?", "f1"})
SEARCH_KEYS = frozenset({"/", "s"})
BACK_KEYS = frozenset({"escape"})
