# SPDX-License-Identifier: MIT
"""Configuration reader for kg-cli.

Settings live in a JSON file (config.json in the config dir) and are read
with dot-notation keys. A few connection settings can be overridden from
the environment. The resolved values are frozen into a Settings object
that is handed to the TUI at construction.
"""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    from kgcli.paths import PathResolver
except ImportError:
    from .paths import PathResolver


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 30  # seconds, per request
DEFAULT_SESSION_CHECK_INTERVAL = 300  # 5 minutes between liveness checks
DEFAULT_SESSION_WARNING_THRESHOLD = 300  # warn when token expires within 5 minutes
DEFAULT_CLEAR_AFTER = 5  # seconds before an error/info notification clears
DEFAULT_TAG_CLEAR_AFTER = 2  # tag confirmations are shorter-lived
DEFAULT_REDIRECT_DELAY = 1  # pause on a success message before returning to dashboard


def get_config_path() -> Path:
    """Get path to the kg-cli settings file.

    Returns:
        Path to config.json, respecting KG_CLI_SETTINGS env var.
    """
    custom = os.environ.get("KG_CLI_SETTINGS")
    if custom:
        return Path(custom)
    return PathResolver.config_dir() / "config.json"


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value by dot-notation key.

    Args:
        key: Dot-notation key like "api.base_url"
        default: Default value if key not found

    Returns:
        Setting value or default
    """
    config_path = get_config_path()

    if not config_path.exists():
        return default

    try:
        with open(config_path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError):
        return default

    parts = key.split(".")
    current = data
    for part in parts:
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]

    return current


def get_bool_setting(key: str, default: bool = False) -> bool:
    """Get a boolean setting.

    Converts string "true", "1", "yes" to True.
    """
    value = get_setting(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


def get_int_setting(key: str, default: int = 0) -> int:
    """Get an integer setting, falling back to default if conversion fails."""
    value = get_setting(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    """Resolved, immutable settings injected into the client and dispatcher."""

    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULT_TIMEOUT
    session_check_interval: int = DEFAULT_SESSION_CHECK_INTERVAL
    session_warning_threshold: int = DEFAULT_SESSION_WARNING_THRESHOLD
    clear_after: int = DEFAULT_CLEAR_AFTER
    tag_clear_after: int = DEFAULT_TAG_CLEAR_AFTER
    redirect_delay: int = DEFAULT_REDIRECT_DELAY


def load_settings() -> Settings:
    """Read settings from config.json with environment overrides applied.

    Environment variables KG_CLI_API_BASE_URL and KG_CLI_API_TIMEOUT take
    precedence over the file.
    """
    base_url = os.environ.get("KG_CLI_API_BASE_URL") or get_setting(
        "api.base_url", DEFAULT_BASE_URL
    )
    timeout = get_int_setting("api.timeout", DEFAULT_TIMEOUT)
    env_timeout = os.environ.get("KG_CLI_API_TIMEOUT")
    if env_timeout:
        try:
            timeout = int(env_timeout)
        except ValueError:
            pass

    return Settings(
        base_url=str(base_url).rstrip("/"),
        timeout=timeout,
        session_check_interval=get_int_setting(
            "session.check_interval", DEFAULT_SESSION_CHECK_INTERVAL
        ),
        session_warning_threshold=get_int_setting(
            "session.warning_threshold", DEFAULT_SESSION_WARNING_THRESHOLD
        ),
        clear_after=get_int_setting("notifications.clear_after", DEFAULT_CLEAR_AFTER),
        tag_clear_after=get_int_setting(
            "notifications.tag_clear_after", DEFAULT_TAG_CLEAR_AFTER
        ),
        redirect_delay=get_int_setting(
            "notifications.redirect_delay", DEFAULT_REDIRECT_DELAY
        ),
    )
