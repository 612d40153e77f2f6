"""Canonical map entities.

Entities refer to each other by identifier only.  A path's point ids
and a relation's member ids may name elements that were never fetched;
resolving them is up to the caller (see :class:`~osmingest.state.store.EntityStore`).
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from osmingest.models._base import OsmBaseModel, TagTable
from osmingest.query import EntityKind


class Point(OsmBaseModel):
    """A single coordinate with tags (an OSM node).

    Parameters
    ----------
    id : int
        Node identifier.
    lat : float
        Latitude in degrees.
    lon : float
        Longitude in degrees.
    tags : dict
        Tag table.
    """

    kind: ClassVar[EntityKind] = EntityKind.NODE

    id: int
    lat: float
    lon: float
    tags: TagTable = Field(default_factory=dict)


class Path(OsmBaseModel):
    """An ordered sequence of point references (an OSM way).

    Order defines the geometry; repeated ids are allowed (closed rings
    repeat the first point at the end, so a ring has at least four
    references).
    """

    kind: ClassVar[EntityKind] = EntityKind.WAY

    id: int
    node_ids: tuple[int, ...] = ()
    tags: TagTable = Field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        return len(self.node_ids) >= 4 and self.node_ids[0] == self.node_ids[-1]


class Relation(OsmBaseModel):
    """A tagged group of point and path members, each with a role.

    Members of other kinds (nested relations) are not modelled and are
    dropped during reconciliation.
    """

    kind: ClassVar[EntityKind] = EntityKind.RELATION

    id: int
    node_roles: dict[int, str] = Field(default_factory=dict)
    """Member point id -> role."""
    way_roles: dict[int, str] = Field(default_factory=dict)
    """Member path id -> role (e.g. ``"outer"``, ``"inner"``)."""
    tags: TagTable = Field(default_factory=dict)


Entity = Point | Path | Relation
