# SPDX-License-Identifier: MIT
"""Version string for kg-cli."""

__version__ = "0.1.0"
