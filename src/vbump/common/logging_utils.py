"""Centralized logging configuration and structured-logging helpers.

All modules log through ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once. Structured DEBUG events attach their fields via
``extra_context`` so handlers/formatters can pick them up.
"""
from __future__ import annotations

import logging
import os
import re
import sys
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from vbump.constants import Constants

_SENSITIVE_QUERY_RE = re.compile(
    r"(?i)((?:token|key|secret|password|auth)[^=&]*=)([^&]+)"
)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger to write to stderr.

    The level comes from ``level`` or the ``VBUMP_LOG_LEVEL`` environment
    variable and defaults to INFO. Calling this more than once replaces the
    previously installed stream handler.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_vbump_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler._vbump_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log record.

    None values are dropped so records only carry populated fields.
    """
    return {k: v for k, v in kwargs.items() if v is not None}


def redact(value: str) -> str:
    """Mask credential-looking query parameters in a string."""
    return _SENSITIVE_QUERY_RE.sub(r"\1[REDACTED]", value)


def safe_url(url: str) -> str:
    """Return ``url`` with userinfo and sensitive query values masked."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = "[REDACTED]@" + netloc.rsplit("@", 1)[1]
    return redact(urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment)))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000, 2)
