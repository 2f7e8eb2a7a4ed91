"""Centralized logging helpers.

All modules log through ``logging.getLogger(__name__)``; this module owns the
root handler setup and the structured ``extra`` payloads used for DEBUG traces.
"""

from __future__ import annotations

import logging
import os
import re
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_SENSITIVE_QUERY = re.compile(r"(?i)([?&](?:token|access_token|auth|key|password)=)[^&#]*")
_USERINFO = re.compile(r"(?i)^([a-z][a-z0-9+.\-]*://)[^/@]+@")


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stderr handler on the root logger.

    The level comes from ``level``, then ``PEERFIX_LOG_LEVEL``, then INFO.
    Calling this repeatedly replaces the previous handler rather than stacking.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_peerfix", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler._peerfix = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level_value)


def add_file_handler(path: str) -> None:
    """Mirror log output to ``path`` with timestamps.

    Like ``configure_logging``, a repeated call replaces the previous file
    handler instead of adding another.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_peerfix_file", False):
            root.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    file_handler._peerfix_file = True  # type: ignore[attr-defined]
    root.addHandler(file_handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    None values are dropped so records stay compact.
    """
    return {k: v for k, v in fields.items() if v is not None}


def safe_url(url: str) -> str:
    """Redact credentials embedded in a URL before it is logged."""
    if not url:
        return url
    redacted = _USERINFO.sub(r"\1[REDACTED]@", url)
    return _SENSITIVE_QUERY.sub(r"\1[REDACTED]", redacted)


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self):
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
