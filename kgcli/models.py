#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Data models for the Knowledge Garden client.

Contains the entity dataclasses returned by the notes server, request
payloads, and the constants shared by the API client and the TUI.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


# =============================================================================
# Constants
# =============================================================================

TITLE_MAX_LENGTH = 500
CONTENT_MAX_LENGTH = 100000
TAG_NAME_MAX_LENGTH = 50
DEFAULT_NOTE_TYPE = "note"


# =============================================================================
# Enums
# =============================================================================


class NoteType(str, Enum):
    """Kinds of notes the server understands."""
    NOTE = "note"
    DAILY = "daily"
    MEETING = "meeting"
    IDEA = "idea"
    TODO = "todo"


class ActionType(str, Enum):
    """Activity log action names."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    SEARCH = "search"
    LINK = "link"
    LOGIN = "login"
    LOGOUT = "logout"


# =============================================================================
# Helpers
# =============================================================================


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Accepts the trailing "Z" form the server emits. Naive values are
    assumed to be UTC. Returns None for missing or unparseable input.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # Older fromisoformat() only takes exactly 3 or 6 fractional digits
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}" if digits else head + rest
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _int(data: Dict[str, Any], key: str) -> int:
    try:
        return int(data.get(key) or 0)
    except (TypeError, ValueError):
        return 0


# =============================================================================
# Entities
# =============================================================================


@dataclass
class Tag:
    """A user-defined label that can be attached to notes."""
    id: str
    name: str
    color: Optional[str] = None
    note_count: int = 0  # Only populated by endpoints that return counts

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tag":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            color=data.get("color"),
            note_count=_int(data, "note_count"),
        )


@dataclass
class Note:
    """Represents a single note."""
    id: str
    title: str
    content: str = ""
    note_type: str = DEFAULT_NOTE_TYPE
    user_id: str = ""
    word_count: int = 0
    access_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_accessed: Optional[datetime] = None
    tags: List[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            content=data.get("content", ""),
            note_type=data.get("note_type") or DEFAULT_NOTE_TYPE,
            user_id=str(data.get("user_id", "")),
            word_count=_int(data, "word_count"),
            access_count=_int(data, "access_count"),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            last_accessed=parse_timestamp(data.get("last_accessed_at")),
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
        )


@dataclass
class Activity:
    """One entry of the user's activity log."""
    id: str
    action: str
    note_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        note_id = data.get("note_id")
        return cls(
            id=str(data.get("id", "")),
            action=data.get("action", ""),
            note_id=str(note_id) if note_id else None,
            metadata=data.get("metadata") or {},
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class UserStats:
    """Aggregate counters shown on the dashboard."""
    total_notes: int = 0
    total_tags: int = 0
    total_links: int = 0
    total_words: int = 0
    notes_created_today: int = 0
    notes_created_this_week: int = 0
    last_activity: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserStats":
        return cls(
            total_notes=_int(data, "total_notes"),
            total_tags=_int(data, "total_tags"),
            total_links=_int(data, "total_links"),
            total_words=_int(data, "total_words"),
            notes_created_today=_int(data, "notes_created_today"),
            notes_created_this_week=_int(data, "notes_created_week"),
            last_activity=parse_timestamp(data.get("last_activity")),
        )


@dataclass
class TrendingNote:
    """A note ranked by recent access."""
    note: Optional[Note]
    access_count: int = 0
    recent_access: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrendingNote":
        note = data.get("note")
        return cls(
            note=Note.from_dict(note) if note else None,
            access_count=_int(data, "access_count"),
            recent_access=_int(data, "recent_access"),
        )


@dataclass
class LinkDetail:
    """A wiki-style link between two notes, with both ends resolved."""
    id: str
    source_id: str = ""
    target_id: str = ""
    source_note: Optional[Note] = None
    target_note: Optional[Note] = None
    link_context: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinkDetail":
        source = data.get("source_note")
        target = data.get("target_note")
        return cls(
            id=str(data.get("id", "")),
            source_id=str(data.get("source_id", "")),
            target_id=str(data.get("target_id", "")),
            source_note=Note.from_dict(source) if source else None,
            target_note=Note.from_dict(target) if target else None,
            link_context=data.get("link_context"),
        )


@dataclass
class GraphNode:
    id: str
    title: str
    note_type: str = DEFAULT_NOTE_TYPE
    tag_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphNode":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            note_type=data.get("type") or DEFAULT_NOTE_TYPE,
            tag_ids=[str(t) for t in data.get("tag_ids") or []],
        )


@dataclass
class GraphEdge:
    source: str
    target: str
    context: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphEdge":
        return cls(
            source=str(data.get("source", "")),
            target=str(data.get("target", "")),
            context=data.get("context"),
        )


@dataclass
class GraphStats:
    total_notes: int = 0
    total_links: int = 0
    connected: int = 0
    orphans: int = 0
    max_depth: int = 0
    average_degree: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphStats":
        try:
            average = float(data.get("average_degree") or 0.0)
        except (TypeError, ValueError):
            average = 0.0
        return cls(
            total_notes=_int(data, "total_notes"),
            total_links=_int(data, "total_links"),
            connected=_int(data, "connected"),
            orphans=_int(data, "orphans"),
            max_depth=_int(data, "max_depth"),
            average_degree=average,
        )


@dataclass
class GraphResponse:
    """The whole note graph: nodes, directed edges and summary stats."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    stats: Optional[GraphStats] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphResponse":
        stats = data.get("stats")
        return cls(
            nodes=[GraphNode.from_dict(n) for n in data.get("nodes") or []],
            edges=[GraphEdge.from_dict(e) for e in data.get("edges") or []],
            stats=GraphStats.from_dict(stats) if stats else None,
        )


@dataclass
class Pagination:
    page: int = 1
    limit: int = 20
    total: int = 0
    total_pages: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Pagination":
        data = data or {}
        return cls(
            page=_int(data, "page") or 1,
            limit=_int(data, "limit") or 20,
            total=_int(data, "total"),
            total_pages=_int(data, "total_pages"),
        )


@dataclass
class SearchResult:
    note: Optional[Note]
    rank: float = 0.0
    snippet: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResult":
        note = data.get("note")
        try:
            rank = float(data.get("rank") or 0.0)
        except (TypeError, ValueError):
            rank = 0.0
        return cls(
            note=Note.from_dict(note) if note else None,
            rank=rank,
            snippet=data.get("snippet", ""),
        )


@dataclass
class SearchResponse:
    query: str = ""
    results: List[SearchResult] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResponse":
        return cls(
            query=data.get("query", ""),
            results=[SearchResult.from_dict(r) for r in data.get("results") or []],
            pagination=Pagination.from_dict(data.get("pagination")),
        )


# =============================================================================
# Requests
# =============================================================================


@dataclass
class NoteFilter:
    """Query parameters for listing notes."""
    page: int = 1
    limit: int = 20
    sort_by: str = ""
    search: str = ""
    tag_id: Optional[str] = None
    note_type: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": self.page, "limit": self.limit}
        if self.sort_by:
            params["sort_by"] = self.sort_by
        if self.search:
            params["search"] = self.search
        if self.tag_id:
            params["tag"] = self.tag_id
        if self.note_type:
            params["type"] = self.note_type
        return params


@dataclass
class CreateNoteRequest:
    title: str
    content: str
    note_type: str = DEFAULT_NOTE_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "content": self.content, "note_type": self.note_type}


@dataclass
class UpdateNoteRequest:
    """Partial update; fields left as None are not sent."""
    title: Optional[str] = None
    content: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.content is not None:
            payload["content"] = self.content
        return payload
