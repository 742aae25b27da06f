# SPDX-License-Identifier: MIT
"""Centralized path resolution for kg-cli.

All path resolution should go through this module to ensure consistency.
"""
import os
from pathlib import Path

APP_DIR_NAME = "kg-cli"


class PathResolver:
    """Resolves paths for kg-cli components."""

    @staticmethod
    def config_dir() -> Path:
        """Get the directory holding auth.json and config.json.

        Resolution order:
        1. KG_CLI_CONFIG_DIR env var
        2. XDG_CONFIG_HOME/kg-cli
        3. ~/.config/kg-cli
        """
        custom = os.environ.get("KG_CLI_CONFIG_DIR")
        if custom:
            return Path(custom)
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / APP_DIR_NAME
        return Path.home() / ".config" / APP_DIR_NAME

    @staticmethod
    def state_dir() -> Path:
        """Get the state directory for mutable data (debug log).

        Resolution order:
        1. KG_CLI_STATE env var
        2. XDG_STATE_HOME/kg-cli
        3. ~/.local/state/kg-cli
        """
        state = os.environ.get("KG_CLI_STATE")
        if state:
            return Path(state)
        xdg_state = os.environ.get("XDG_STATE_HOME")
        if xdg_state:
            return Path(xdg_state) / APP_DIR_NAME
        return Path.home() / ".local" / "state" / APP_DIR_NAME

    @staticmethod
    def auth_file() -> Path:
        """Get the path of the persisted login tokens."""
        return PathResolver.config_dir() / "auth.json"

    @staticmethod
    def debug_log() -> Path:
        """Get the path of the JSON-lines debug log."""
        return PathResolver.state_dir() / "debug.log"
