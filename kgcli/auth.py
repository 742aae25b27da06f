# SPDX-License-Identifier: MIT
"""Persisted login state and token expiry parsing.

The access token is a JWT. Its expiry is read straight from the payload's
``exp`` claim, so session checks can classify a token without a network
round trip. The signature is never verified here; that is the server's job.
"""
import base64
import binascii
import json
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

try:
    from kgcli.paths import PathResolver
except ImportError:
    from paths import PathResolver


def _decode_segment(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def token_expiry(token: str) -> Optional[datetime]:
    """Return the ``exp`` claim of a JWT as an aware datetime.

    Returns None when the token is not three dot-separated segments, the
    payload is not base64url JSON, or it carries no numeric ``exp``.
    """
    parts = token.split(".") if token else []
    if len(parts) != 3:
        return None
    try:
        claims = json.loads(_decode_segment(parts[1]))
    except (binascii.Error, ValueError):
        return None
    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


@dataclass
class AuthState:
    """Tokens and identity saved by ``kg-cli login``."""

    access_token: str = ""
    refresh_token: str = ""
    user_id: str = ""
    email: str = ""

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AuthState":
        """Load saved auth state; a missing file yields an empty state.

        Raises:
            ValueError: If the file exists but is not valid JSON.
        """
        path = path or PathResolver.auth_file()
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"corrupt auth file {path}: {e}") from e
        return cls(
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", ""),
            user_id=data.get("user_id", ""),
            email=data.get("email", ""),
        )

    def save(self, path: Optional[Path] = None) -> None:
        path = path or PathResolver.auth_file()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(self), indent=2))
        os.chmod(path, 0o600)

    def clear(self, path: Optional[Path] = None) -> None:
        """Forget all tokens and remove the saved file."""
        self.access_token = ""
        self.refresh_token = ""
        self.user_id = ""
        self.email = ""
        path = path or PathResolver.auth_file()
        if path.exists():
            path.unlink()

    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def token_expiry(self) -> Optional[datetime]:
        return token_expiry(self.access_token)

    def time_until_expiry(self, now: Optional[datetime] = None) -> timedelta:
        """Time left before the access token expires.

        Zero when the expiry can't be determined, which means neither
        expiring-soon nor expired.
        """
        expiry = self.token_expiry()
        if expiry is None:
            return timedelta(0)
        now = now or datetime.now(timezone.utc)
        return expiry - now

    def is_expiring_soon(self, window: timedelta, now: Optional[datetime] = None) -> bool:
        until = self.time_until_expiry(now)
        return timedelta(0) < until <= window

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.time_until_expiry(now) < timedelta(0)
