"""Helpers for safe debug logging.

Response bodies can run to many megabytes.  Anything echoed into a log
line or an exception message goes through :func:`preview_for_log` first.
"""

from __future__ import annotations

from osmingest._constants import LOG_PREVIEW_CHARS


def preview_for_log(value: str | bytes | None, *, max_chars: int = LOG_PREVIEW_CHARS) -> str:
    """Return a single-line, length-capped excerpt of *value*."""
    if value is None:
        return "<none>"

    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")

    text = " ".join(value.split())
    if len(text) > max_chars:
        return f"{text[:max_chars]}…<truncated {len(value)} chars>"
    return text
