"""Record -> entity reconciliation.

This is the only component that creates entities.  It is format
agnostic: it sees the intermediate records, never the wire body.

Relation members are partitioned by kind into the two role maps.
Members of any other kind (nested relations, or anything a future
interpreter version might add) are not modelled; they are dropped and
counted in :attr:`EntityMap.dropped_members` rather than reported as an
error.  ``strict=True`` turns such a member into
:class:`~osmingest.exceptions.UnsupportedMemberKind`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from osmingest._constants import MEMBER_KIND_NODE, MEMBER_KIND_WAY
from osmingest.exceptions import UnsupportedMemberKind
from osmingest.models.entities import Path, Point, Relation
from osmingest.models.records import PathRecord, PointRecord, Record, RelationRecord
from osmingest.query import EntityKind
from osmingest.state.store import EntityMap

_logger = logging.getLogger(__name__)


def _note_duplicates(kind: EntityKind, ids: Iterable[int]) -> None:
    seen: set[int] = set()
    for entity_id in ids:
        if entity_id in seen:
            # Last write wins; this is not an error.
            _logger.debug("Duplicate %s id %d; keeping the later record", kind.value, entity_id)
        seen.add(entity_id)


def reconcile_points(records: Sequence[PointRecord]) -> EntityMap[Point]:
    _note_duplicates(EntityKind.NODE, (record.id for record in records))
    return EntityMap(
        EntityKind.NODE,
        (Point(id=record.id, lat=record.lat, lon=record.lon, tags=dict(record.tags)) for record in records),
    )


def reconcile_paths(records: Sequence[PathRecord]) -> EntityMap[Path]:
    _note_duplicates(EntityKind.WAY, (record.id for record in records))
    return EntityMap(
        EntityKind.WAY,
        (Path(id=record.id, node_ids=record.node_ids, tags=dict(record.tags)) for record in records),
    )


def reconcile_relations(records: Sequence[RelationRecord], *, strict: bool = False) -> EntityMap[Relation]:
    """Build relations, splitting members into point and path role maps.

    Parameters
    ----------
    records : sequence of RelationRecord
        Decoded relation records, in response order.
    strict : bool
        Raise :class:`UnsupportedMemberKind` on the first member that is
        neither a node nor a way, instead of dropping it.

    Returns
    -------
    EntityMap
        Relations keyed by id; ``dropped_members`` counts the members
        that were discarded.
    """
    _note_duplicates(EntityKind.RELATION, (record.id for record in records))

    relations: list[Relation] = []
    dropped = 0
    for record in records:
        node_roles: dict[int, str] = {}
        way_roles: dict[int, str] = {}
        for member in record.members:
            if member.kind == MEMBER_KIND_NODE:
                node_roles[member.ref] = member.role
            elif member.kind == MEMBER_KIND_WAY:
                way_roles[member.ref] = member.role
            elif strict:
                raise UnsupportedMemberKind(
                    f"relation {record.id} has a member of unsupported kind {member.kind!r} (ref={member.ref})",
                    relation_id=record.id,
                    member_kind=member.kind,
                )
            else:
                dropped += 1
                _logger.debug(
                    "Relation %d: dropping %s member %d (role=%r)",
                    record.id,
                    member.kind,
                    member.ref,
                    member.role,
                )
        relations.append(
            Relation(
                id=record.id,
                node_roles=node_roles,
                way_roles=way_roles,
                tags=dict(record.tags),
            )
        )

    return EntityMap(EntityKind.RELATION, relations, dropped_members=dropped)


def reconcile(kind: EntityKind | str, records: Sequence[Record], *, strict: bool = False) -> EntityMap:
    """Dispatch to the reconciler for *kind*."""
    kind = EntityKind(kind)
    if kind == EntityKind.NODE:
        return reconcile_points(records)  # type: ignore[arg-type]
    if kind == EntityKind.WAY:
        return reconcile_paths(records)  # type: ignore[arg-type]
    return reconcile_relations(records, strict=strict)  # type: ignore[arg-type]
