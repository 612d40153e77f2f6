"""Per-kind ingestion pipeline.

query -> fetch -> decode -> reconcile, strictly in that order.  Only the
fetch awaits; the rest is CPU-only.  The entity map is built after the
whole body has decoded, so a failed fetch or decode leaves nothing
behind.
"""

from __future__ import annotations

import logging

from osmingest._transport import Transport
from osmingest.config import OverpassConfig
from osmingest.ingestion.decoders import decoder_for
from osmingest.query import BoundingBox, EntityKind, OutputFormat, build_query
from osmingest.state.reconcile import reconcile
from osmingest.state.store import EntityMap

_logger = logging.getLogger(__name__)


def ingest_body(
    kind: EntityKind | str,
    body: str | bytes,
    fmt: OutputFormat | str = OutputFormat.JSON,
    *,
    strict: bool = False,
) -> EntityMap:
    """Decode and reconcile one response body.

    Raises
    ------
    MalformedPayload
        If the body does not decode.
    UnsupportedMemberKind
        If ``strict`` and a relation has a member that is neither a node
        nor a way.
    """
    kind = EntityKind(kind)
    records = decoder_for(fmt).decode(kind, body)
    entities = reconcile(kind, records, strict=strict)
    if entities.dropped_members:
        _logger.debug("Dropped %d unsupported relation members", entities.dropped_members)
    return entities


async def fetch_kind(
    *,
    config: OverpassConfig,
    transport: Transport,
    kind: EntityKind | str,
    bbox: BoundingBox | tuple[float, float, float, float],
    fmt: OutputFormat | str | None = None,
) -> EntityMap:
    """Run the full pipeline for one entity kind.

    Parameters
    ----------
    config : OverpassConfig
        Endpoint, default format, query timeout and strictness.
    transport : Transport
        Executes the query.
    kind : EntityKind or str
        Entity kind to fetch.
    bbox : BoundingBox or tuple
        ``(min_lat, min_lon, max_lat, max_lon)``.
    fmt : OutputFormat or str or None
        Wire format; defaults to ``config.output_format``.

    Returns
    -------
    EntityMap
        Entities of *kind* keyed by id.

    Raises
    ------
    OverpassTransportError
        Propagated unchanged from the transport.
    MalformedPayload
        If the response does not decode.
    """
    kind = EntityKind(kind)
    fmt = OutputFormat(fmt) if fmt is not None else config.output_format

    query = build_query(kind, bbox, fmt, timeout=config.query_timeout)
    body = await transport.post(config.endpoint, query)

    entities = ingest_body(kind, body, fmt, strict=config.strict_members)
    _logger.debug("Fetched %d %s entities (%s)", len(entities), kind.value, fmt.value)
    return entities
