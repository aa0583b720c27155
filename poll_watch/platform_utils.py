"""
Cross-platform directory helpers for Poll Watch.

Centralises OS detection so the config and logging code can share one
set of paths:
  - Windows : ``%APPDATA%\\PollWatch``
  - macOS   : ``~/Library/Application Support/PollWatch``
  - Linux   : ``$XDG_CONFIG_HOME/PollWatch`` (default ``~/.config``)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# ---- platform flags ----------------------------------------------------

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"

_APP_DIR_NAME = "PollWatch"

# ---- directories -------------------------------------------------------


def get_config_dir() -> Path:
    """Return the application config directory, created if needed."""
    if IS_WINDOWS:
        base = os.environ.get("APPDATA", str(Path.home()))
    elif IS_MACOS:
        base = str(Path.home() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))

    config_dir = Path(base) / _APP_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_path() -> Path:
    """Return the path to the log file (inside the config directory)."""
    return get_config_dir() / "poll_watch.log"
