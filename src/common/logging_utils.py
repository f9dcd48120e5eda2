"""Logging helpers: root configuration, structured extras and timing.

Modules log through ``logging.getLogger(__name__)`` and pass structured
fields with ``extra=extra_context(...)``.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from constants import Constants

_SECRET_KEYS = ("token", "key", "secret", "password", "auth")
_BEARER_RGX = re.compile(r"(?i)(bearer|token)\s+[A-Za-z0-9\-\._~\+/]+=*")


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root handler using Constants.LOG_FORMAT.

    Level precedence: explicit argument, DEPHUB_LOG_LEVEL, INFO.
    """
    name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    logging.basicConfig(format=Constants.LOG_FORMAT, force=True)
    logging.getLogger().setLevel(getattr(logging, name, logging.INFO))


def is_debug_enabled(logger: logging.Logger) -> bool:
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping, dropping fields whose value is None."""
    return {k: v for k, v in fields.items() if v is not None}


def redact(text: str) -> str:
    """Mask bearer/token credentials inside free text."""
    return _BEARER_RGX.sub(lambda m: f"{m.group(1)} ***", text)


def safe_url(url: str) -> str:
    """Strip userinfo and secret-looking query parameters from a URL."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid url>"
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    query = urlencode(
        [
            (k, "***" if any(s in k.lower() for s in _SECRET_KEYS) else v)
            for k, v in parse_qsl(parts.query, keep_blank_values=True)
        ]
    )
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
