"""Format-neutral intermediate records.

Both decoders emit these; the reconciler consumes them without knowing
which wire format they came from.  Field aliases match the JSON element
keys so a JSON element validates directly into a record.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field

from osmingest.models._base import OsmBaseModel, OsmId, TagTable


class PointRecord(OsmBaseModel):
    """A decoded ``node`` element."""

    id: OsmId
    lat: float = Field(allow_inf_nan=False)
    lon: float = Field(allow_inf_nan=False)
    tags: TagTable = Field(default_factory=dict)


class PathRecord(OsmBaseModel):
    """A decoded ``way`` element."""

    id: OsmId
    node_ids: tuple[OsmId, ...] = Field(validation_alias=AliasChoices("nodes", "node_ids"))
    """Point identifiers in path order; may be empty."""
    tags: TagTable = Field(default_factory=dict)


class MemberRecord(OsmBaseModel):
    """One member of a relation, as listed on the wire."""

    kind: str = Field(validation_alias=AliasChoices("type", "kind"))
    """Raw member type (``node``, ``way``, ``relation``, ...)."""
    ref: OsmId
    role: str = ""


class RelationRecord(OsmBaseModel):
    """A decoded ``relation`` element."""

    id: OsmId
    members: tuple[MemberRecord, ...]
    tags: TagTable = Field(default_factory=dict)


Record = PointRecord | PathRecord | RelationRecord
