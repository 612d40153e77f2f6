"""Read-mostly entity containers.

An :class:`EntityMap` is built once by the reconciler and never mutated
afterwards; it is the arena that identifiers index into.  An
:class:`EntityStore` groups the maps of the three kinds fetched for one
bounding box.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Mapping
from typing import Generic, TypeVar

from osmingest.exceptions import EntityNotFoundError, OsmIngestError
from osmingest.models.entities import Path, Point, Relation
from osmingest.query import EntityKind

T = TypeVar("T", Point, Path, Relation)


class EntityMap(Mapping[int, T], Generic[T]):
    """Immutable ``id -> entity`` mapping for one entity kind.

    Iteration follows the order the records were decoded in.  A missing
    identifier is reported as "not found" (``get`` returns ``None``,
    ``require`` and ``[]`` raise :class:`EntityNotFoundError`); there
    is never a default entity.
    """

    __slots__ = ("_entities", "_kind", "_dropped_members")

    def __init__(
        self,
        kind: EntityKind,
        entities: Iterable[T] = (),
        *,
        dropped_members: int = 0,
    ) -> None:
        self._kind = EntityKind(kind)
        self._entities: dict[int, T] = {}
        for entity in entities:
            self._entities[entity.id] = entity
        self._dropped_members = dropped_members

    @property
    def kind(self) -> EntityKind:
        return self._kind

    @property
    def dropped_members(self) -> int:
        """Relation members discarded because their kind is not modelled."""
        return self._dropped_members

    def __getitem__(self, entity_id: int) -> T:
        return self.require(entity_id)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityMap):
            return NotImplemented
        return (
            self._kind == other._kind
            and self._dropped_members == other._dropped_members
            and self._entities == other._entities
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"EntityMap(kind={self._kind.value!r}, size={len(self._entities)})"

    def get(self, entity_id: int, default: T | None = None) -> T | None:  # type: ignore[override]
        """Return the entity for *entity_id*, or *default* (``None``) when it is not present."""
        return self._entities.get(entity_id, default)

    def require(self, entity_id: int) -> T:
        """Return the entity for *entity_id* or raise :class:`EntityNotFoundError`."""
        try:
            return self._entities[entity_id]
        except KeyError:
            raise EntityNotFoundError(entity_id, kind=self._kind.value) from None

    def ids(self) -> list[int]:
        return list(self._entities)


@dataclasses.dataclass
class EntityStore:
    """Entities of all kinds fetched for one bounding box.

    A kind's map is ``None`` when it was not requested or its pipeline
    failed; the failure is then recorded in :attr:`errors`.  Paths and
    relations may reference ids that are absent from :attr:`points`.
    """

    points: EntityMap[Point] | None = None
    paths: EntityMap[Path] | None = None
    relations: EntityMap[Relation] | None = None
    errors: dict[EntityKind, OsmIngestError] = dataclasses.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def for_kind(self, kind: EntityKind | str) -> EntityMap | None:
        kind = EntityKind(kind)
        if kind == EntityKind.NODE:
            return self.points
        if kind == EntityKind.WAY:
            return self.paths
        return self.relations

    def point(self, point_id: int) -> Point | None:
        return self.points.get(point_id) if self.points is not None else None

    def path(self, path_id: int) -> Path | None:
        return self.paths.get(path_id) if self.paths is not None else None

    def relation(self, relation_id: int) -> Relation | None:
        return self.relations.get(relation_id) if self.relations is not None else None

    def path_coordinates(self, path_id: int) -> list[tuple[float, float] | None]:
        """Resolve a path's point references to ``(lat, lon)`` pairs.

        Each unresolved reference yields ``None`` in its position so the
        caller can tell a gap from a real coordinate.

        Raises
        ------
        EntityNotFoundError
            If the path itself is not present.
        """
        path = self._require_path(path_id)
        coordinates: list[tuple[float, float] | None] = []
        for point_id in path.node_ids:
            point = self.point(point_id)
            coordinates.append((point.lat, point.lon) if point is not None else None)
        return coordinates

    def missing_point_ids(self, path_id: int) -> list[int]:
        """Point ids referenced by the path that are not in :attr:`points`, in path order."""
        path = self._require_path(path_id)
        seen: set[int] = set()
        missing: list[int] = []
        for point_id in path.node_ids:
            if point_id in seen:
                continue
            seen.add(point_id)
            if self.point(point_id) is None:
                missing.append(point_id)
        return missing

    def _require_path(self, path_id: int) -> Path:
        if self.paths is None:
            raise EntityNotFoundError(path_id, kind=EntityKind.WAY.value)
        return self.paths.require(path_id)
