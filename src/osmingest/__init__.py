"""osmingest - Async ingestion of Overpass map data into a typed entity graph."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("osmingest")
except PackageNotFoundError:
    __version__ = "0+local"
from osmingest.client import OverpassClient
from osmingest.config import OverpassConfig
from osmingest.exceptions import (
    EntityNotFoundError,
    MalformedPayload,
    OsmConfigError,
    OsmIngestError,
    OverpassTransportError,
    UnsupportedMemberKind,
)
from osmingest.ingestion.decoders import JsonDecoder, XmlDecoder, decoder_for
from osmingest.ingestion.pipeline import fetch_kind, ingest_body
from osmingest.models import (
    MemberRecord,
    Path,
    PathRecord,
    Point,
    PointRecord,
    Relation,
    RelationRecord,
    TagTable,
)
from osmingest.query import BoundingBox, EntityKind, OutputFormat, build_query
from osmingest.state import EntityMap, EntityStore, reconcile

__all__ = [
    "__version__",
    "BoundingBox",
    "EntityKind",
    "EntityMap",
    "EntityNotFoundError",
    "EntityStore",
    "JsonDecoder",
    "MalformedPayload",
    "MemberRecord",
    "OsmConfigError",
    "OsmIngestError",
    "OutputFormat",
    "OverpassClient",
    "OverpassConfig",
    "OverpassTransportError",
    "Path",
    "PathRecord",
    "Point",
    "PointRecord",
    "Relation",
    "RelationRecord",
    "TagTable",
    "UnsupportedMemberKind",
    "XmlDecoder",
    "build_query",
    "decoder_for",
    "fetch_kind",
    "ingest_body",
    "reconcile",
]
