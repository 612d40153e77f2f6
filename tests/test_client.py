from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from osmingest.client import OverpassClient
from osmingest.config import OverpassConfig
from osmingest.exceptions import MalformedPayload, OsmIngestError, OverpassTransportError, UnsupportedMemberKind
from osmingest.ingestion.pipeline import fetch_kind
from osmingest.query import BoundingBox, EntityKind, OutputFormat

BBOX = BoundingBox(43.731, 7.418, 43.732, 7.419)

NODES_JSON = json.dumps(
    {"elements": [{"type": "node", "id": 1, "lat": 43.7311, "lon": 7.4181, "tags": {"name": "Plaza"}}]}
)
WAYS_JSON = json.dumps({"elements": [{"type": "way", "id": 10, "nodes": [1, 2]}]})
RELATIONS_JSON = json.dumps(
    {
        "elements": [
            {
                "type": "relation",
                "id": 20,
                "members": [{"type": "way", "ref": 10, "role": "outer"}, {"type": "relation", "ref": 21}],
            }
        ]
    }
)


@dataclass
class FakeOverpass:
    """Answers each query by the entity kind it asks for."""

    responses: dict[EntityKind, str | BaseException] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def post(self, endpoint: str, body: str) -> str:
        self.calls.append((endpoint, body))
        await asyncio.sleep(0)
        for kind in EntityKind:
            if f"; {kind.value}(" in body:
                response = self.responses[kind]
                if isinstance(response, BaseException):
                    raise response
                return response
        raise AssertionError(f"unexpected query: {body}")


def _backend() -> FakeOverpass:
    return FakeOverpass(
        responses={
            EntityKind.NODE: NODES_JSON,
            EntityKind.WAY: WAYS_JSON,
            EntityKind.RELATION: RELATIONS_JSON,
        }
    )


@pytest.mark.asyncio
async def test_fetch_points_posts_query_to_endpoint() -> None:
    backend = _backend()
    config = OverpassConfig(endpoint="https://overpass.test/api/interpreter")

    async with OverpassClient(config, transport=backend) as client:
        points = await client.fetch_points(BBOX)

    assert backend.calls == [
        ("https://overpass.test/api/interpreter", "[out:json]; node(43.731, 7.418, 43.732, 7.419); out;"),
    ]
    assert points[1].tags == {"name": "Plaza"}


@pytest.mark.asyncio
async def test_query_timeout_is_embedded() -> None:
    backend = _backend()
    async with OverpassClient(OverpassConfig(query_timeout=25), transport=backend) as client:
        await client.fetch_paths(BBOX)

    assert backend.calls[0][1].startswith("[out:json][timeout:25]; way(")


@pytest.mark.asyncio
async def test_xml_format_selects_xml_decoder() -> None:
    backend = FakeOverpass(
        responses={EntityKind.NODE: '<osm><node id="2" lat="43.8" lon="7.5"/></osm>'},
    )

    async with OverpassClient(transport=backend) as client:
        points = await client.fetch_points(BBOX, fmt=OutputFormat.XML)

    assert backend.calls[0][1].startswith("[out:xml]; node(")
    assert points[2].lat == 43.8
    assert points[2].tags == {}


@pytest.mark.asyncio
async def test_fetch_all_populates_every_kind() -> None:
    async with OverpassClient(transport=_backend()) as client:
        store = await client.fetch_all(BBOX)

    assert store.ok
    assert store.point(1) is not None
    assert store.path(10) is not None
    assert store.relation(20) is not None
    assert store.relations is not None and store.relations.dropped_members == 1
    # Point 2 was never part of the batch; that is a valid state.
    assert store.missing_point_ids(10) == [2]


@pytest.mark.asyncio
async def test_transport_failure_only_affects_its_kind() -> None:
    backend = _backend()
    failure = OverpassTransportError("HTTP 504 from interpreter", status_code=504, endpoint="x")
    backend.responses[EntityKind.WAY] = failure

    async with OverpassClient(transport=backend) as client:
        store = await client.fetch_all(BBOX)

    assert store.paths is None
    assert store.errors == {EntityKind.WAY: failure}
    assert store.points is not None and len(store.points) == 1
    assert store.relations is not None and len(store.relations) == 1


@pytest.mark.asyncio
async def test_malformed_body_leaves_kind_unpopulated() -> None:
    backend = _backend()
    backend.responses[EntityKind.RELATION] = '{"elements": [{"type": "relation", "id": 20}]}'

    async with OverpassClient(transport=backend) as client:
        store = await client.fetch_all(BBOX)

    assert store.relations is None
    assert isinstance(store.errors[EntityKind.RELATION], MalformedPayload)
    assert store.points is not None
    assert store.paths is not None


@pytest.mark.asyncio
async def test_cancelled_request_is_recorded_for_its_kind() -> None:
    backend = _backend()
    backend.responses[EntityKind.NODE] = asyncio.CancelledError()

    async with OverpassClient(transport=backend) as client:
        store = await client.fetch_all(BBOX)

    assert store.points is None
    assert isinstance(store.errors[EntityKind.NODE], OverpassTransportError)
    assert store.paths is not None


@pytest.mark.asyncio
async def test_fetch_all_subset_of_kinds() -> None:
    backend = _backend()
    async with OverpassClient(transport=backend) as client:
        store = await client.fetch_all(BBOX, kinds=["way", EntityKind.WAY])

    assert len(backend.calls) == 1
    assert store.points is None
    assert store.paths is not None
    assert store.ok


@pytest.mark.asyncio
async def test_single_fetch_propagates_transport_error() -> None:
    backend = _backend()
    backend.responses[EntityKind.NODE] = OverpassTransportError("boom")

    async with OverpassClient(transport=backend) as client:
        with pytest.raises(OverpassTransportError):
            await client.fetch_points(BBOX)


@pytest.mark.asyncio
async def test_strict_members_from_config() -> None:
    async with OverpassClient(OverpassConfig(strict_members=True), transport=_backend()) as client:
        with pytest.raises(UnsupportedMemberKind):
            await client.fetch_relations(BBOX)


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = OverpassClient()
    with pytest.raises(OsmIngestError, match="not initialized"):
        await client.fetch_points(BBOX)


@pytest.mark.asyncio
async def test_fetch_kind_without_client() -> None:
    backend = _backend()
    paths = await fetch_kind(config=OverpassConfig(), transport=backend, kind="way", bbox=tuple(BBOX))
    assert paths[10].node_ids == (1, 2)


class _BytesResponse:
    def __init__(self, raw: bytes) -> None:
        self.status = 200
        self._raw = raw

    async def text(self, errors: str = "strict") -> str:
        return self._raw.decode("utf-8", errors)

    async def __aenter__(self) -> _BytesResponse:
        return self

    async def __aexit__(self, *_exc: Any) -> None:
        return None


class _KindSession:
    """aiohttp session stand-in serving raw bytes per queried kind."""

    def __init__(self, bodies: dict[EntityKind, bytes]) -> None:
        self._bodies = bodies

    def post(self, url: str, *, data: dict[str, str], **_kwargs: Any) -> _BytesResponse:
        for kind in EntityKind:
            if f"; {kind.value}(" in data["data"]:
                return _BytesResponse(self._bodies[kind])
        raise AssertionError(f"unexpected query: {data['data']}")


@pytest.mark.asyncio
async def test_undecodable_body_only_affects_its_kind() -> None:
    session = _KindSession(
        {
            EntityKind.NODE: b'{"elements": [\xff\xfe]}',
            EntityKind.WAY: WAYS_JSON.encode(),
            EntityKind.RELATION: RELATIONS_JSON.encode(),
        }
    )

    async with OverpassClient(session=session) as client:  # type: ignore[arg-type]
        store = await client.fetch_all(BBOX)

    assert store.points is None
    assert isinstance(store.errors[EntityKind.NODE], MalformedPayload)
    assert store.paths is not None and store.paths[10].node_ids == (1, 2)
    assert store.relations is not None and 20 in store.relations
