# SPDX-License-Identifier: MIT
"""Full-text search with an input mode and a results mode.

Input mode: the query field has focus and captures every key.
Results mode: j/k move, enter opens, paging re-queries the server.
"""
from typing import List, Optional

try:
    from kgcli.models import SearchResult
    from kgcli.tui.commands import Command, api_call, emit
    from kgcli.tui.components import Paginator, TextInput
    from kgcli.tui.controller import ViewController, move_cursor, visible_window
    from kgcli.tui.formatting import truncate_text
    from kgcli.tui.messages import (
        Key,
        Message,
        OpenNote,
        SearchError,
        SearchResults,
        ShowDashboard,
    )
except ImportError:
    from ..models import SearchResult
    from .commands import Command, api_call, emit
    from .components import Paginator, TextInput
    from .controller import ViewController, move_cursor, visible_window
    from .formatting import truncate_text
    from .messages import (
        Key,
        Message,
        OpenNote,
        SearchError,
        SearchResults,
        ShowDashboard,
    )

RESULTS_PER_PAGE = 10

NEXT_PAGE_KEYS = frozenset({"ctrl+n", "right", "]"})
PREV_PAGE_KEYS = frozenset({"ctrl+p", "left", "["})


class SearchView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.input = TextInput(prompt="Search: ", placeholder="Search notes...")
        self.query = ""
        self.results: List[SearchResult] = []
        self.selected = 0
        self.paginator = Paginator(RESULTS_PER_PAGE)
        self.loading = False
        self.searched = False
        self.error = ""

    def focus_input(self) -> None:
        self.input.focus()

    def is_input_focused(self) -> bool:
        return self.input.focused

    def blur(self) -> None:
        self.input.blur()

    def search(self, query: str, page: int = 1) -> Command:
        self.query = query
        self.paginator.page = page
        self.loading = True
        self.error = ""
        client = self.client
        return api_call(
            "search_notes",
            lambda: client.search_notes(query, page, RESULTS_PER_PAGE),
            lambda response: SearchResults(query, page, response),
            lambda err: SearchError(query, err, page),
        )

    def claims_key(self, key: str) -> bool:
        # Escape in results mode goes back to the query, not to the dashboard
        return key == "escape" and not self.input.focused and bool(self.query)

    def is_stale(self, msg: Message) -> bool:
        if isinstance(msg, (SearchResults, SearchError)):
            return (msg.query, msg.page) != (self.query, self.paginator.page)
        return False

    def update(self, msg: Message) -> Optional[Command]:
        if self.is_stale(msg):
            return None
        if isinstance(msg, SearchResults):
            self.results = list(msg.response.results)
            self.paginator.set_total_items(msg.response.pagination.total)
            self.selected = 0
            self.loading = False
            self.searched = True
            return None
        if isinstance(msg, SearchError):
            self.error = msg.error
            self.loading = False
            return None
        if isinstance(msg, Key):
            if self.input.focused:
                return self._handle_input_key(msg)
            return self._handle_results_key(msg)
        return None

    def _handle_input_key(self, msg: Key) -> Optional[Command]:
        if msg.key == "enter":
            query = self.input.value.strip()
            if not query:
                return None
            self.input.blur()
            self.results = []
            self.paginator.reset()
            return self.search(query, 1)
        if msg.key == "escape":
            self.input.blur()
            if not self.input.value.strip():
                return emit(ShowDashboard())
            return None
        self.input.update(msg)
        return None

    def _handle_results_key(self, msg: Key) -> Optional[Command]:
        key = msg.key
        if key == "escape":
            # Only reached with a query; without one the global back applies
            if self.query:
                self.query = ""
                self.results = []
                self.searched = False
                self.error = ""
                self.paginator.reset()
                self.input.reset()
                self.input.focus()
        elif key == "/":
            self.input.focus()
        elif key in ("j", "down"):
            self.selected = move_cursor(self.selected, 1, len(self.results))
        elif key in ("k", "up"):
            self.selected = move_cursor(self.selected, -1, len(self.results))
        elif key == "enter":
            if self.results and self.results[self.selected].note is not None:
                return emit(OpenNote(self.results[self.selected].note.id))
        elif key in NEXT_PAGE_KEYS and self.query:
            if self.paginator.can_go_next():
                return self.search(self.query, self.paginator.page + 1)
        elif key in PREV_PAGE_KEYS and self.query:
            if self.paginator.can_go_prev():
                return self.search(self.query, self.paginator.page - 1)
        return None

    def render(self) -> str:
        lines = ["SEARCH", "", self.input.render(), ""]
        if self.error:
            lines.append(f"Error: {self.error}")
            return "\n".join(lines)
        if self.loading:
            lines.append("Searching...")
            return "\n".join(lines)
        if not self.searched:
            lines.append("Type a query and press enter")
            return "\n".join(lines)
        if not self.results:
            lines.append(f'No results for "{self.query}"')
            return "\n".join(lines)

        rows = max(1, (self.height - 10) // 2)
        for i in visible_window(self.selected, len(self.results), rows):
            result = self.results[i]
            title = result.note.title if result.note else "(untitled)"
            marker = "▶ " if i == self.selected else "  "
            lines.append(f"{marker}{truncate_text(title, max(10, self.width - 6))}")
            snippet = result.snippet.replace("\n", " ").strip()
            if snippet:
                lines.append(f"    {truncate_text(snippet, max(10, self.width - 8))}")
        lines += ["", self.paginator.render()]
        return "\n".join(lines)
