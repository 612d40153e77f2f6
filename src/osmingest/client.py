"""High-level async client for an Overpass-style interpreter."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

import aiohttp

from osmingest._transport import HttpTransport, Transport
from osmingest.config import OverpassConfig
from osmingest.exceptions import OsmIngestError, OverpassTransportError
from osmingest.ingestion.pipeline import fetch_kind
from osmingest.models.entities import Path, Point, Relation
from osmingest.query import BoundingBox, EntityKind, OutputFormat
from osmingest.state.store import EntityMap, EntityStore

_logger = logging.getLogger(__name__)

BBoxLike = BoundingBox | tuple[float, float, float, float]


class OverpassClient:
    """Async client that fetches and reconciles map entities.

    Usage::

        async with OverpassClient(OverpassConfig()) as client:
            store = await client.fetch_all((43.731, 7.418, 43.732, 7.419))
            plaza = store.point(1)

    Each entity kind is fetched by its own pipeline; a failure of one
    kind never touches the others.
    """

    def __init__(
        self,
        config: OverpassConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config if config is not None else OverpassConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    @property
    def config(self) -> OverpassConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> OverpassClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise OsmIngestError("Client not initialized. Use 'async with OverpassClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Single-kind fetches
    # ------------------------------------------------------------------

    async def fetch(
        self,
        kind: EntityKind | str,
        bbox: BBoxLike,
        *,
        fmt: OutputFormat | str | None = None,
    ) -> EntityMap:
        """Fetch every entity of *kind* inside *bbox*.

        Raises
        ------
        OverpassTransportError
            If the request fails.
        MalformedPayload
            If the response does not decode.
        """
        return await fetch_kind(
            config=self._config,
            transport=self._require_transport(),
            kind=kind,
            bbox=bbox,
            fmt=fmt,
        )

    async def fetch_points(self, bbox: BBoxLike, *, fmt: OutputFormat | str | None = None) -> EntityMap[Point]:
        return await self.fetch(EntityKind.NODE, bbox, fmt=fmt)

    async def fetch_paths(self, bbox: BBoxLike, *, fmt: OutputFormat | str | None = None) -> EntityMap[Path]:
        return await self.fetch(EntityKind.WAY, bbox, fmt=fmt)

    async def fetch_relations(
        self,
        bbox: BBoxLike,
        *,
        fmt: OutputFormat | str | None = None,
    ) -> EntityMap[Relation]:
        return await self.fetch(EntityKind.RELATION, bbox, fmt=fmt)

    # ------------------------------------------------------------------
    # All kinds
    # ------------------------------------------------------------------

    async def fetch_all(
        self,
        bbox: BBoxLike,
        *,
        kinds: Iterable[EntityKind | str] = tuple(EntityKind),
        fmt: OutputFormat | str | None = None,
    ) -> EntityStore:
        """Fetch several kinds concurrently into one :class:`EntityStore`.

        Kinds whose pipeline fails are left as ``None`` in the store and
        their error is recorded in ``store.errors`` (a cancelled request is
        recorded as :class:`OverpassTransportError`).  Errors that are not
        ingestion errors propagate, as does cancellation of this call.
        """
        selected = list(dict.fromkeys(EntityKind(kind) for kind in kinds))
        results = await asyncio.gather(
            *(self.fetch(kind, bbox, fmt=fmt) for kind in selected),
            return_exceptions=True,
        )

        store = EntityStore()
        for kind, result in zip(selected, results, strict=True):
            if isinstance(result, OsmIngestError):
                _logger.debug("Fetching %s failed: %s", kind.value, result)
                store.errors[kind] = result
                continue
            if isinstance(result, asyncio.CancelledError):
                # Only the fetch stage awaits, so a cancelled child is a cancelled request.
                store.errors[kind] = OverpassTransportError(
                    f"Fetching {kind.value} was cancelled",
                    endpoint=self._config.endpoint,
                )
                continue
            if isinstance(result, BaseException):
                raise result
            if kind == EntityKind.NODE:
                store.points = result
            elif kind == EntityKind.WAY:
                store.paths = result
            else:
                store.relations = result
        return store
