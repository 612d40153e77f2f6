"""Data models for decoded records and reconciled entities."""

from osmingest.models._base import OsmBaseModel, OsmId, TagTable
from osmingest.models.entities import Entity, Path, Point, Relation
from osmingest.models.records import MemberRecord, PathRecord, PointRecord, Record, RelationRecord

__all__ = [
    "Entity",
    "MemberRecord",
    "OsmBaseModel",
    "OsmId",
    "Path",
    "PathRecord",
    "Point",
    "PointRecord",
    "Record",
    "Relation",
    "RelationRecord",
    "TagTable",
]
