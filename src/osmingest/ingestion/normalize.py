"""Normalization helpers.

Centralizes the tag-table and identifier handling shared by both decoders.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

_SCALAR_TAG_TYPES = (str, int, float, bool)


def coerce_tags(value: Any) -> dict[str, str]:
    """Normalize a tag mapping to ``dict[str, str]``.

    ``None`` (tags absent) becomes an empty table.  Scalar values are
    stringified; nested containers are rejected.
    """
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"tags must be a mapping, got {type(value).__name__}")

    tags: dict[str, str] = {}
    for key, tag_value in value.items():
        if tag_value is None:
            tag_value = ""
        elif not isinstance(tag_value, _SCALAR_TAG_TYPES):
            raise ValueError(f"tag {key!r} has non-scalar value of type {type(tag_value).__name__}")
        tags[str(key)] = str(tag_value)
    return tags


def reject_bool(value: Any) -> Any:
    """Refuse booleans where an identifier is expected; JSON `true` is not an id."""
    if isinstance(value, bool):
        raise ValueError("identifier must be an integer, not a boolean")
    return value


def tags_from_pairs(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Flatten ``(k, v)`` pairs into a tag table; a repeated key keeps the last value."""
    tags: dict[str, str] = {}
    for key, value in pairs:
        tags[key] = value
    return tags
