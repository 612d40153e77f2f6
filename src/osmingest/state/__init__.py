"""State layer.

Reconciliation of decoded records into entities, and the read-mostly
containers that hold the result of one fetch.
"""

from osmingest.state.reconcile import (
    reconcile,
    reconcile_paths,
    reconcile_points,
    reconcile_relations,
)
from osmingest.state.store import EntityMap, EntityStore

__all__ = [
    "EntityMap",
    "EntityStore",
    "reconcile",
    "reconcile_paths",
    "reconcile_points",
    "reconcile_relations",
]
