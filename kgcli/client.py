#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
API client for the Knowledge Garden notes server.

ApiClient is the abstract surface the TUI consumes; HttpApiClient talks to
the REST API under /api/v1 with httpx. Every failure is raised as an
APIError subclass (or NetworkError) carrying a message fit to show the user.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

try:
    from kgcli.auth import AuthState
    from kgcli.debug_logger import get_logger
    from kgcli.models import (
        Activity,
        CreateNoteRequest,
        GraphResponse,
        LinkDetail,
        Note,
        NoteFilter,
        SearchResponse,
        Tag,
        TrendingNote,
        UpdateNoteRequest,
        UserStats,
    )
except ImportError:
    from auth import AuthState
    from debug_logger import get_logger
    from models import (
        Activity,
        CreateNoteRequest,
        GraphResponse,
        LinkDetail,
        Note,
        NoteFilter,
        SearchResponse,
        Tag,
        TrendingNote,
        UpdateNoteRequest,
        UserStats,
    )

API_PREFIX = "/api/v1"


# =============================================================================
# Errors
# =============================================================================


class APIError(Exception):
    """A request reached the server and failed."""

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class AuthenticationError(APIError):
    """401/403 - token missing, expired or revoked."""


class NotFoundError(APIError):
    """404 - the note or tag no longer exists."""


class ValidationError(APIError):
    """400/422 - the server rejected the payload."""


class ConflictError(APIError):
    """409 - e.g. a tag name that already exists."""


class NetworkError(APIError):
    """The request never got a response (refused, DNS, timeout)."""


_STATUS_ERRORS = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}

_STRIP_PREFIXES = ("Internal server error: ", "validation failed: ")


def friendly_message(status: int, body: str) -> str:
    """Turn an error response body into a message for the status bar.

    The server answers failures with {"error": "..."}; known phrasings are
    mapped to short messages, anything else is cleaned up and passed on.
    Bodies that aren't JSON fall back to the raw status and text.
    """
    try:
        data = json.loads(body)
    except ValueError:
        data = None
    message = data.get("error") if isinstance(data, dict) else None
    if not isinstance(message, str) or not message:
        return f"API error (status {status}): {body}"

    for prefix in _STRIP_PREFIXES:
        if message.startswith(prefix):
            message = message[len(prefix):]
    message = message[:1].upper() + message[1:]

    lowered = message.lower()
    if "unauthorized" in lowered:
        return "not authenticated. Please run 'kg-cli login'"
    if "not found" in lowered:
        return "resource not found"
    return message.rstrip("; ")


def error_for_response(status: int, body: str) -> APIError:
    error_cls = _STATUS_ERRORS.get(status, APIError)
    return error_cls(friendly_message(status, body), status=status)


# =============================================================================
# Abstract client
# =============================================================================


class ApiClient(ABC):
    """Operations the TUI needs from the notes server.

    Implementations raise APIError (or a subclass) on failure and return
    parsed model objects on success.
    """

    @abstractmethod
    def is_authenticated(self) -> bool:
        pass

    @abstractmethod
    def list_notes(self, note_filter: NoteFilter) -> Tuple[List[Note], int]:
        """Return one page of notes and the total count across all pages."""

    @abstractmethod
    def get_note(self, note_id: str) -> Note:
        pass

    @abstractmethod
    def create_note(self, request: CreateNoteRequest) -> Note:
        pass

    @abstractmethod
    def update_note(self, note_id: str, request: UpdateNoteRequest) -> None:
        pass

    @abstractmethod
    def delete_note(self, note_id: str) -> None:
        pass

    @abstractmethod
    def search_notes(self, query: str, page: int, limit: int) -> SearchResponse:
        pass

    @abstractmethod
    def list_tags(self) -> List[Tag]:
        pass

    @abstractmethod
    def create_tag(self, name: str) -> Tag:
        pass

    @abstractmethod
    def update_tag(self, tag_id: str, name: str) -> Tag:
        pass

    @abstractmethod
    def delete_tag(self, tag_id: str) -> None:
        pass

    @abstractmethod
    def add_tag_to_note(self, note_id: str, tag_id: str) -> None:
        pass

    @abstractmethod
    def remove_tag_from_note(self, note_id: str, tag_id: str) -> None:
        pass

    @abstractmethod
    def get_note_tags(self, note_id: str) -> List[Tag]:
        pass

    @abstractmethod
    def get_outgoing_links(self, note_id: str) -> List[LinkDetail]:
        pass

    @abstractmethod
    def get_backlinks(self, note_id: str) -> List[LinkDetail]:
        pass

    @abstractmethod
    def get_graph(self) -> GraphResponse:
        pass

    @abstractmethod
    def get_stats(self) -> UserStats:
        pass

    @abstractmethod
    def get_recent_activity(self, limit: int) -> List[Activity]:
        pass

    @abstractmethod
    def get_trending_notes(self, limit: int) -> List[TrendingNote]:
        pass


# =============================================================================
# HTTP implementation
# =============================================================================


class HttpApiClient(ApiClient):
    """ApiClient backed by an httpx.Client.

    The client is safe to share between worker threads; httpx.Client keeps
    a thread-safe connection pool.
    """

    def __init__(
        self,
        base_url: str,
        auth: AuthState,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.auth = auth
        self._http = httpx.Client(
            base_url=base_url.rstrip("/") + API_PREFIX,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "HttpApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {}
        if self.auth.access_token:
            headers["Authorization"] = f"Bearer {self.auth.access_token}"

        logger = get_logger()
        start = logger.timed()
        try:
            response = self._http.request(
                method, path, params=params, json=payload, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.command_error(f"{method} {path}", f"timeout: {e}")
            raise NetworkError("request timed out - is the server running?") from e
        except httpx.HTTPError as e:
            logger.command_error(f"{method} {path}", str(e))
            raise NetworkError(f"cannot reach server: {e}") from e

        logger.api_request(
            method, path, response.status_code, (logger.timed() - start) * 1000
        )

        if not response.is_success:
            raise error_for_response(response.status_code, response.text)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"decode response: {e}", status=response.status_code) from e

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated()

    def list_notes(self, note_filter: NoteFilter) -> Tuple[List[Note], int]:
        data = self._request("GET", "/notes", params=note_filter.to_params()) or {}
        notes = [Note.from_dict(n) for n in data.get("notes") or []]
        total = int((data.get("pagination") or {}).get("total") or 0)
        return notes, total

    def get_note(self, note_id: str) -> Note:
        return Note.from_dict(self._request("GET", f"/notes/{note_id}") or {})

    def create_note(self, request: CreateNoteRequest) -> Note:
        return Note.from_dict(self._request("POST", "/notes", payload=request.to_dict()) or {})

    def update_note(self, note_id: str, request: UpdateNoteRequest) -> None:
        self._request("PUT", f"/notes/{note_id}", payload=request.to_dict())

    def delete_note(self, note_id: str) -> None:
        self._request("DELETE", f"/notes/{note_id}")

    def search_notes(self, query: str, page: int, limit: int) -> SearchResponse:
        data = self._request(
            "GET", "/search", params={"q": query, "page": page, "limit": limit}
        )
        return SearchResponse.from_dict(data or {})

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def list_tags(self) -> List[Tag]:
        data = self._request("GET", "/tags") or {}
        return [Tag.from_dict(t) for t in data.get("tags") or []]

    def create_tag(self, name: str) -> Tag:
        return Tag.from_dict(self._request("POST", "/tags", payload={"name": name}) or {})

    def update_tag(self, tag_id: str, name: str) -> Tag:
        data = self._request("PUT", f"/tags/{tag_id}", payload={"name": name})
        return Tag.from_dict(data or {})

    def delete_tag(self, tag_id: str) -> None:
        self._request("DELETE", f"/tags/{tag_id}")

    def add_tag_to_note(self, note_id: str, tag_id: str) -> None:
        self._request("POST", f"/notes/{note_id}/tags/{tag_id}")

    def remove_tag_from_note(self, note_id: str, tag_id: str) -> None:
        self._request("DELETE", f"/notes/{note_id}/tags/{tag_id}")

    def get_note_tags(self, note_id: str) -> List[Tag]:
        data = self._request("GET", f"/notes/{note_id}/tags") or {}
        return [Tag.from_dict(t) for t in data.get("tags") or []]

    # -------------------------------------------------------------------------
    # Links and graph
    # -------------------------------------------------------------------------

    def get_outgoing_links(self, note_id: str) -> List[LinkDetail]:
        data = self._request("GET", f"/notes/{note_id}/links") or []
        return [LinkDetail.from_dict(link) for link in data]

    def get_backlinks(self, note_id: str) -> List[LinkDetail]:
        data = self._request("GET", f"/notes/{note_id}/backlinks") or []
        return [LinkDetail.from_dict(link) for link in data]

    def get_graph(self) -> GraphResponse:
        return GraphResponse.from_dict(self._request("GET", "/notes/graph") or {})

    # -------------------------------------------------------------------------
    # Stats and activity
    # -------------------------------------------------------------------------

    def get_stats(self) -> UserStats:
        return UserStats.from_dict(self._request("GET", "/stats") or {})

    def get_recent_activity(self, limit: int) -> List[Activity]:
        data = self._request("GET", "/activity/recent", params={"limit": limit}) or {}
        return [Activity.from_dict(a) for a in data.get("activities") or []]

    def get_trending_notes(self, limit: int) -> List[TrendingNote]:
        data = self._request("GET", "/notes/trending", params={"limit": limit}) or {}
        return [TrendingNote.from_dict(t) for t in data.get("trending") or []]
