"""
Pytest configuration and fixtures for kg-cli tests.
"""

import sys
from pathlib import Path

# Ensure project root is in sys.path for 'kgcli' imports
# This must happen before any imports from kgcli
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest

from kgcli.client import APIError, ApiClient, NotFoundError
from kgcli.models import (
    Activity,
    CreateNoteRequest,
    GraphResponse,
    LinkDetail,
    Note,
    NoteFilter,
    Pagination,
    SearchResponse,
    SearchResult,
    Tag,
    TrendingNote,
    UpdateNoteRequest,
    UserStats,
)

# Fixed wall clock used by dispatcher tests
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "tui: marks TUI tests")


@pytest.fixture
def temp_state_dir(tmp_path: Path, monkeypatch) -> Path:
    """Create and return a temporary state directory.

    Sets KG_CLI_STATE and KG_CLI_CONFIG_DIR and resets the debug logger so
    nothing a test does touches the real ~/.config or ~/.local/state.
    """
    state_dir = tmp_path / ".local" / "state" / "kg-cli"
    state_dir.mkdir(parents=True)
    config_dir = tmp_path / ".config" / "kg-cli"
    config_dir.mkdir(parents=True)
    monkeypatch.setenv("KG_CLI_STATE", str(state_dir))
    monkeypatch.setenv("KG_CLI_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("KG_CLI_SETTINGS", raising=False)
    monkeypatch.delenv("KG_CLI_API_BASE_URL", raising=False)
    monkeypatch.delenv("KG_CLI_API_TIMEOUT", raising=False)
    monkeypatch.delenv("KG_CLI_DEBUG", raising=False)

    # Reset the debug logger so it picks up the new path
    from kgcli.debug_logger import reset_logger
    reset_logger()

    return state_dir


@pytest.fixture(autouse=True)
def isolate_state_dir(temp_state_dir: Path):
    """Autouse fixture that ensures all tests use isolated state directory."""
    yield temp_state_dir

    from kgcli.debug_logger import reset_logger
    reset_logger()


@pytest.fixture
def config_dir(temp_state_dir: Path) -> Path:
    return temp_state_dir.parent.parent.parent / ".config" / "kg-cli"


# =============================================================================
# Fake API client
# =============================================================================


class FakeApiClient(ApiClient):
    """In-memory ApiClient that records every call.

    Set ``failures[op] = SomeAPIError(...)`` to make an operation fail.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self.failures: Dict[str, APIError] = {}
        self.authenticated = True
        self.notes: Dict[str, Note] = {}
        self.total_notes: Optional[int] = None
        self.tags: List[Tag] = []
        self.note_tags: Dict[str, List[Tag]] = {}
        self.links: Dict[str, List[LinkDetail]] = {}
        self.backlinks: Dict[str, List[LinkDetail]] = {}
        self.stats = UserStats(total_notes=0)
        self.activities: List[Activity] = []
        self.trending: List[TrendingNote] = []
        self.graph = GraphResponse()
        self.search_results: List[SearchResult] = []

    # Seeding helpers

    def add_note(self, note_id: str, title: str, content: str = "Some content") -> Note:
        note = Note(id=note_id, title=title, content=content,
                    word_count=len(content.split()))
        self.notes[note_id] = note
        return note

    def add_tag(self, tag_id: str, name: str, note_count: int = 0) -> Tag:
        tag = Tag(id=tag_id, name=name, note_count=note_count)
        self.tags.append(tag)
        return tag

    def called(self, op: str) -> List[tuple]:
        return [args for name, args in self.calls if name == op]

    def _record(self, op: str, *args: Any) -> None:
        self.calls.append((op, args))
        if op in self.failures:
            raise self.failures[op]

    # ApiClient

    def is_authenticated(self) -> bool:
        return self.authenticated

    def list_notes(self, note_filter: NoteFilter) -> Tuple[List[Note], int]:
        self._record("list_notes", note_filter)
        notes = list(self.notes.values())
        total = self.total_notes if self.total_notes is not None else len(notes)
        start = (note_filter.page - 1) * note_filter.limit
        return notes[start:start + note_filter.limit], total

    def get_note(self, note_id: str) -> Note:
        self._record("get_note", note_id)
        if note_id not in self.notes:
            raise NotFoundError("resource not found", status=404)
        return self.notes[note_id]

    def create_note(self, request: CreateNoteRequest) -> Note:
        self._record("create_note", request)
        return self.add_note(f"n{len(self.notes) + 1}", request.title, request.content)

    def update_note(self, note_id: str, request: UpdateNoteRequest) -> None:
        self._record("update_note", note_id, request)
        note = self.notes[note_id]
        if request.title is not None:
            note.title = request.title
        if request.content is not None:
            note.content = request.content

    def delete_note(self, note_id: str) -> None:
        self._record("delete_note", note_id)
        self.notes.pop(note_id, None)

    def search_notes(self, query: str, page: int, limit: int) -> SearchResponse:
        self._record("search_notes", query, page, limit)
        start = (page - 1) * limit
        return SearchResponse(
            query=query,
            results=self.search_results[start:start + limit],
            pagination=Pagination(page=page, limit=limit, total=len(self.search_results)),
        )

    def list_tags(self) -> List[Tag]:
        self._record("list_tags")
        return list(self.tags)

    def create_tag(self, name: str) -> Tag:
        self._record("create_tag", name)
        return self.add_tag(f"t{len(self.tags) + 1}", name)

    def update_tag(self, tag_id: str, name: str) -> Tag:
        self._record("update_tag", tag_id, name)
        for tag in self.tags:
            if tag.id == tag_id:
                tag.name = name
                return tag
        raise NotFoundError("resource not found", status=404)

    def delete_tag(self, tag_id: str) -> None:
        self._record("delete_tag", tag_id)
        self.tags = [t for t in self.tags if t.id != tag_id]

    def add_tag_to_note(self, note_id: str, tag_id: str) -> None:
        self._record("add_tag_to_note", note_id, tag_id)
        tag = next(t for t in self.tags if t.id == tag_id)
        self.note_tags.setdefault(note_id, []).append(tag)

    def remove_tag_from_note(self, note_id: str, tag_id: str) -> None:
        self._record("remove_tag_from_note", note_id, tag_id)
        self.note_tags[note_id] = [t for t in self.note_tags.get(note_id, []) if t.id != tag_id]

    def get_note_tags(self, note_id: str) -> List[Tag]:
        self._record("get_note_tags", note_id)
        return list(self.note_tags.get(note_id, []))

    def get_outgoing_links(self, note_id: str) -> List[LinkDetail]:
        self._record("get_outgoing_links", note_id)
        return list(self.links.get(note_id, []))

    def get_backlinks(self, note_id: str) -> List[LinkDetail]:
        self._record("get_backlinks", note_id)
        return list(self.backlinks.get(note_id, []))

    def get_graph(self) -> GraphResponse:
        self._record("get_graph")
        return self.graph

    def get_stats(self) -> UserStats:
        self._record("get_stats")
        return self.stats

    def get_recent_activity(self, limit: int) -> List[Activity]:
        self._record("get_recent_activity", limit)
        return self.activities[:limit]

    def get_trending_notes(self, limit: int) -> List[TrendingNote]:
        self._record("get_trending_notes", limit)
        return self.trending[:limit]


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.time = start

    def __call__(self) -> float:
        return self.time

    def advance(self, seconds: float) -> None:
        self.time += seconds


@pytest.fixture
def fake_client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_token():
    """Build an unsigned JWT whose exp claim is ``expires`` (a datetime)."""
    import base64
    import json

    def _make(expires: Optional[datetime] = None, **claims: Any) -> str:
        def seg(data: dict) -> str:
            raw = json.dumps(data).encode()
            return base64.urlsafe_b64encode(raw).decode().rstrip("=")

        if expires is not None:
            claims["exp"] = int(expires.timestamp())
        return f"{seg({'alg': 'HS256', 'typ': 'JWT'})}.{seg(claims)}.signature"

    return _make


@pytest.fixture
def session_info():
    """SessionInfo valid for an hour past NOW, last checked at NOW."""
    from kgcli.tui.session import SessionInfo

    return SessionInfo(
        access_token="token",
        expires_at=NOW + timedelta(hours=1),
        last_checked_at=NOW,
    )
