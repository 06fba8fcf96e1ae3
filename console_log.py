"""Prefix-style log lines shared by every dashboard module.

stdout belongs to the table, so log lines go to stderr.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import TextIO

LOG_PREFIX_SYSTEM = "SYSTEM"
LOG_PREFIX_HTTP = "HTTP"
LOG_PREFIX_DATA = "DATA"
LOG_PREFIX_DEBUG = "DEBUG"
LOG_PREFIX_WARN = "WARN"

_debug_enabled = False


def set_debug(enabled: bool) -> None:
    """Turn DEBUG lines on or off for the whole process."""

    global _debug_enabled
    _debug_enabled = bool(enabled)


def log(prefix: str, message: str, stream: TextIO | None = None) -> None:
    """Print structured log messages so tests can verify behaviour."""

    if prefix.upper() == LOG_PREFIX_DEBUG and not _debug_enabled:
        return

    timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
    print(f"[{prefix.upper()}][{timestamp}] {message}", file=stream or sys.stderr)
