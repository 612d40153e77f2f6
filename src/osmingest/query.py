"""Overpass QL query construction.

A query asks for every element of one kind inside a bounding box::

    [out:json]; node(43.731, 7.418, 43.732, 7.419); out;

The builder is pure: coordinates are rendered verbatim and never
validated.  The interpreter is the authority on rejecting a bad box.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from enum import StrEnum


class EntityKind(StrEnum):
    """Element kinds, named as in Overpass QL and the wire formats."""

    NODE = "node"
    WAY = "way"
    RELATION = "relation"


class OutputFormat(StrEnum):
    """Response serialization requested with the ``[out:...]`` setting."""

    JSON = "json"
    XML = "xml"


@dataclasses.dataclass(frozen=True)
class BoundingBox:
    """Rectangular region in degrees, in Overpass ``(s, w, n, e)`` order."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.min_lat, self.min_lon, self.max_lat, self.max_lon))

    @classmethod
    def coerce(cls, value: BoundingBox | tuple[float, float, float, float]) -> BoundingBox:
        if isinstance(value, BoundingBox):
            return value
        min_lat, min_lon, max_lat, max_lon = value
        return cls(min_lat, min_lon, max_lat, max_lon)


def build_query(
    kind: EntityKind | str,
    bbox: BoundingBox | tuple[float, float, float, float],
    fmt: OutputFormat | str = OutputFormat.JSON,
    *,
    out_mode: str | None = None,
    timeout: int | None = None,
) -> str:
    """Build a query for all elements of *kind* inside *bbox*.

    Parameters
    ----------
    kind : EntityKind or str
        ``node``, ``way`` or ``relation``.
    bbox : BoundingBox or tuple
        ``(min_lat, min_lon, max_lat, max_lon)``.
    fmt : OutputFormat or str
        Response format token placed in the ``[out:...]`` setting.
    out_mode : str or None
        Verbosity for the ``out`` statement (e.g. ``"body"``).  Omitted
        by default, which the interpreter treats as ``body``.
    timeout : int or None
        Server-side query timeout in seconds (``[timeout:N]`` setting).

    Returns
    -------
    str
        The query payload.
    """
    kind = EntityKind(kind)
    fmt = OutputFormat(fmt)
    box = BoundingBox.coerce(bbox)

    settings = f"[out:{fmt.value}]"
    if timeout is not None:
        settings += f"[timeout:{timeout}]"

    coords = ", ".join(str(value) for value in box)
    out = f"out {out_mode};" if out_mode else "out;"
    return f"{settings}; {kind.value}({coords}); {out}"
