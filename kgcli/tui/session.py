#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Session monitoring for the TUI.

A session check is classified in strict order:

1. expiring soon - the token's exp claim is within the warning threshold
   and the user has not been warned yet this session
2. expired - the exp claim is already in the past
3. otherwise a live probe (GET /stats) confirms the server still accepts
   the token

The first two come straight from the token claim and never touch the
network. Only an expired token (or a probe the server rejects as
unauthenticated) is fatal.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

try:
    from kgcli.auth import AuthState
    from kgcli.client import APIError, ApiClient, AuthenticationError
    from kgcli.debug_logger import get_logger
    from kgcli.tui.commands import Cmd, emit
    from kgcli.tui.messages import (
        Message,
        SessionCheckFailed,
        SessionExpired,
        SessionExpiringSoon,
        SessionValid,
    )
except ImportError:
    from ..auth import AuthState
    from ..client import APIError, ApiClient, AuthenticationError
    from ..debug_logger import get_logger
    from .commands import Cmd, emit
    from .messages import (
        Message,
        SessionCheckFailed,
        SessionExpired,
        SessionExpiringSoon,
        SessionValid,
    )

DEFAULT_CHECK_INTERVAL = timedelta(minutes=5)
DEFAULT_WARNING_THRESHOLD = timedelta(minutes=5)

SESSION_EXPIRED_TITLE = "Session Expired"
SESSION_EXPIRED_HINT = "Please run 'kg-cli login' to refresh your session"


class SessionError(Exception):
    """Raised when the TUI cannot start with the saved credentials."""


@dataclass
class SessionInfo:
    """Token-derived validity window tracked by the dispatcher."""

    access_token: str = ""
    expires_at: Optional[datetime] = None
    last_checked_at: Optional[datetime] = None
    check_interval: timedelta = DEFAULT_CHECK_INTERVAL
    warning_threshold: timedelta = DEFAULT_WARNING_THRESHOLD
    warning_shown: bool = False
    valid: bool = True

    @classmethod
    def from_auth(
        cls,
        auth: AuthState,
        check_interval: timedelta = DEFAULT_CHECK_INTERVAL,
        warning_threshold: timedelta = DEFAULT_WARNING_THRESHOLD,
        now: Optional[datetime] = None,
    ) -> "SessionInfo":
        return cls(
            access_token=auth.access_token,
            expires_at=auth.token_expiry(),
            last_checked_at=now or datetime.now(timezone.utc),
            check_interval=check_interval,
            warning_threshold=warning_threshold,
        )

    def time_until_expiry(self, now: datetime) -> timedelta:
        if self.expires_at is None:
            return timedelta(0)
        return self.expires_at - now

    def is_expiring_soon(self, now: datetime) -> bool:
        return timedelta(0) < self.time_until_expiry(now) <= self.warning_threshold

    def is_expired(self, now: datetime) -> bool:
        return self.time_until_expiry(now) < timedelta(0)

    def is_check_due(self, now: datetime) -> bool:
        if self.last_checked_at is None:
            return True
        return now - self.last_checked_at > self.check_interval


def _probe(client: ApiClient) -> Message:
    try:
        client.get_stats()
    except AuthenticationError:
        return SessionExpired()
    except APIError as e:
        return SessionCheckFailed(e.message)
    return SessionValid()


class SessionMonitor:
    """Issues session-check commands against one SessionInfo."""

    def __init__(self, client: ApiClient, info: SessionInfo) -> None:
        self.client = client
        self.info = info

    def check(self, now: Optional[datetime] = None) -> Cmd:
        """Classify the session and return the command that reports it.

        The expiring-soon warning is claimed here, at issue time, so two
        checks in flight can't both produce a warning.
        """
        now = now or datetime.now(timezone.utc)
        logger = get_logger()

        if not self.info.warning_shown and self.info.is_expiring_soon(now):
            self.info.warning_shown = True
            remaining = self.info.time_until_expiry(now)
            logger.session_check("expiring_soon", remaining.total_seconds())
            return emit(SessionExpiringSoon(remaining))

        if self.info.is_expired(now):
            logger.session_check("expired")
            return emit(SessionExpired())

        client = self.client

        def _live_probe() -> Message:
            return _probe(client)

        _live_probe.__qualname__ = "session_probe"
        return _live_probe

    def check_if_due(self, now: Optional[datetime] = None) -> Optional[Cmd]:
        now = now or datetime.now(timezone.utc)
        if not self.info.is_check_due(now):
            return None
        # Mark now so a burst of messages doesn't queue a probe each
        self.info.last_checked_at = now
        return self.check(now)


def validate_session(client: ApiClient, auth: AuthState) -> None:
    """Synchronous startup check; the TUI refuses to start if this raises.

    Raises:
        SessionError: Not logged in, or the server rejects the token.
    """
    if not auth.is_authenticated():
        raise SessionError("not authenticated. please run 'kg-cli login' first")
    if not client.is_authenticated():
        raise SessionError("client not authenticated. please run 'kg-cli login' first")
    if auth.is_expired():
        raise SessionError(f"{SESSION_EXPIRED_TITLE.lower()}. please run 'kg-cli login'")
    try:
        client.get_stats()
    except APIError as e:
        get_logger().session_check("startup_failed")
        raise SessionError(f"session validation failed: {e.message}") from e
    get_logger().session_check("startup_ok")


def is_session_valid(client: ApiClient, auth: AuthState) -> bool:
    try:
        validate_session(client, auth)
    except SessionError:
        return False
    return True
