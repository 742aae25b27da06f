#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Command-line entry point for the Knowledge Garden terminal client.

Usage:
    kg-cli              # Full TUI (same as 'kg-cli tui')
    kg-cli tui          # Validate the saved session, then run the TUI
    kg-cli session      # One-shot summary of the saved session
"""

import argparse
import sys
from datetime import timedelta

try:
    from kgcli._version import __version__
except ImportError:
    from _version import __version__


def _load_auth():
    try:
        from kgcli.auth import AuthState
    except ImportError:
        from auth import AuthState
    return AuthState.load()


def _build_client(settings, auth):
    try:
        from kgcli.client import HttpApiClient
    except ImportError:
        from client import HttpApiClient
    return HttpApiClient(settings.base_url, auth, timeout=settings.timeout)


def run_tui() -> int:
    """Validate the session (fail fast) and run the TUI; returns the exit code."""
    try:
        from kgcli.config import load_settings
        from kgcli.tui.app import run_app
        from kgcli.tui.dispatcher import Dispatcher
        from kgcli.tui.session import (
            SESSION_EXPIRED_HINT,
            SESSION_EXPIRED_TITLE,
            SessionError,
            SessionInfo,
            validate_session,
        )
    except ImportError as e:
        print(f"Error: TUI requires the textual package: {e}", file=sys.stderr)
        print("Install with: pip install textual", file=sys.stderr)
        return 1

    settings = load_settings()
    try:
        auth = _load_auth()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with _build_client(settings, auth) as client:
        try:
            validate_session(client, auth)
        except SessionError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        session = SessionInfo.from_auth(
            auth,
            check_interval=timedelta(seconds=settings.session_check_interval),
            warning_threshold=timedelta(seconds=settings.session_warning_threshold),
        )
        dispatcher = Dispatcher(client, settings=settings, session=session)
        code = run_app(dispatcher)

    if dispatcher.state.session_expired:
        print(SESSION_EXPIRED_TITLE)
        print(SESSION_EXPIRED_HINT)
    return code


def session_summary() -> int:
    """Print who is logged in and when the token expires."""
    try:
        from kgcli.config import load_settings
        from kgcli.tui.formatting import format_duration
    except ImportError:
        from config import load_settings
        from tui.formatting import format_duration

    try:
        auth = _load_auth()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not auth.is_authenticated():
        print("Not logged in. Run 'kg-cli login' first.")
        return 1

    settings = load_settings()
    window = timedelta(seconds=settings.session_warning_threshold)
    expiry = auth.token_expiry()
    print(f"User:    {auth.email or auth.user_id or '(unknown)'}")
    print(f"Server:  {settings.base_url}")
    if expiry is None:
        print("Expires: unknown")
        return 0
    print(f"Expires: {expiry.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    if auth.is_expired():
        print("Status:  expired")
        return 1
    remaining = format_duration(auth.time_until_expiry())
    if auth.is_expiring_soon(window):
        print(f"Status:  expiring soon (in {remaining})")
    else:
        print(f"Status:  valid (expires in {remaining})")
    return 0


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Knowledge Garden - terminal client",
    )
    parser.add_argument(
        "--version", action="version", version=f"kg-cli {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")
    subparsers.add_parser("tui", help="Launch the interactive TUI (default)")
    subparsers.add_parser("session", help="Show the saved session and token expiry")

    args = parser.parse_args()

    # Default to the TUI when no subcommand given
    if not args.command:
        args.command = "tui"

    if args.command == "tui":
        sys.exit(run_tui())
    elif args.command == "session":
        sys.exit(session_summary())
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
