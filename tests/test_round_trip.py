"""The same entities described in JSON and XML reconcile to equal maps."""

from __future__ import annotations

import json

from osmingest.ingestion.pipeline import ingest_body
from osmingest.query import EntityKind, OutputFormat

JSON_BODY = json.dumps(
    {
        "version": 0.6,
        "elements": [
            {"type": "node", "id": 1, "lat": 43.7311, "lon": 7.4182, "tags": {"name": "Plaza", "amenity": "fountain"}},
            {"type": "node", "id": 2, "lat": 43.7312, "lon": 7.4183},
            {"type": "way", "id": 10, "nodes": [1, 2, 1], "tags": {"highway": "pedestrian", "area": "yes"}},
            {"type": "way", "id": 11, "nodes": []},
            {
                "type": "relation",
                "id": 20,
                "members": [
                    {"type": "way", "ref": 10, "role": "outer"},
                    {"type": "node", "ref": 2, "role": "label"},
                    {"type": "relation", "ref": 21, "role": "subarea"},
                ],
                "tags": {"type": "multipolygon"},
            },
        ],
    }
)

XML_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<osm version="0.6">
  <node id="1" lat="43.7311" lon="7.4182">
    <tag k="amenity" v="fountain"/>
    <tag k="name" v="Plaza"/>
  </node>
  <node id="2" lat="43.7312" lon="7.4183"/>
  <way id="10">
    <nd ref="1"/>
    <nd ref="2"/>
    <nd ref="1"/>
    <tag k="area" v="yes"/>
    <tag k="highway" v="pedestrian"/>
  </way>
  <way id="11"/>
  <relation id="20">
    <member type="way" ref="10" role="outer"/>
    <member type="node" ref="2" role="label"/>
    <member type="relation" ref="21" role="subarea"/>
    <tag k="type" v="multipolygon"/>
  </relation>
</osm>
"""


def test_points_match_across_formats() -> None:
    from_json = ingest_body(EntityKind.NODE, JSON_BODY, OutputFormat.JSON)
    from_xml = ingest_body(EntityKind.NODE, XML_BODY, OutputFormat.XML)

    assert from_json == from_xml
    assert from_json[1].tags == {"name": "Plaza", "amenity": "fountain"}


def test_paths_match_across_formats() -> None:
    from_json = ingest_body(EntityKind.WAY, JSON_BODY, OutputFormat.JSON)
    from_xml = ingest_body(EntityKind.WAY, XML_BODY, OutputFormat.XML)

    assert from_json == from_xml
    assert from_xml[10].node_ids == (1, 2, 1)
    assert from_xml[11].node_ids == ()


def test_relations_match_across_formats() -> None:
    from_json = ingest_body(EntityKind.RELATION, JSON_BODY, OutputFormat.JSON)
    from_xml = ingest_body(EntityKind.RELATION, XML_BODY, OutputFormat.XML)

    assert from_json == from_xml
    assert from_json[20].way_roles == {10: "outer"}
    assert from_json[20].node_roles == {2: "label"}
    assert from_json.dropped_members == from_xml.dropped_members == 1
