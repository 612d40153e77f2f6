"""Wire-format decoders.

Each decoder turns the raw body of one response (one entity kind, one
format) into a list of format-neutral records.  The JSON decoder
validates elements straight into the record models; the XML decoder
first flattens attributes and ``<nd>``/``<member>``/``<tag>`` children
into the same dict shape, so both formats share one validation path.

Decoders are pure: any structural problem raises
:class:`~osmingest.exceptions.MalformedPayload` and nothing is returned.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, ClassVar, Protocol

from pydantic import ValidationError

from osmingest._redact import preview_for_log
from osmingest.exceptions import MalformedPayload
from osmingest.ingestion.normalize import tags_from_pairs
from osmingest.models.records import PathRecord, PointRecord, Record, RelationRecord
from osmingest.query import EntityKind, OutputFormat

_logger = logging.getLogger(__name__)

_RECORD_MODELS: dict[EntityKind, type[PointRecord] | type[PathRecord] | type[RelationRecord]] = {
    EntityKind.NODE: PointRecord,
    EntityKind.WAY: PathRecord,
    EntityKind.RELATION: RelationRecord,
}

# The interpreter reports server-side failures (timeouts, out of memory)
# in a "remark" while still answering HTTP 200 with a truncated result.
_RUNTIME_ERROR_PREFIX = "runtime error"


class Decoder(Protocol):
    """Structural decoder interface used by the pipeline."""

    fmt: ClassVar[OutputFormat]

    def decode(self, kind: EntityKind | str, body: str | bytes) -> list[Record]:
        ...


class _BaseDecoder:
    fmt: ClassVar[OutputFormat]

    def decode(self, kind: EntityKind | str, body: str | bytes) -> list[Record]:
        """Decode *body* into records of *kind*."""
        kind = EntityKind(kind)
        raw_elements = self._raw_elements(kind, body)
        model = _RECORD_MODELS[kind]

        records: list[Record] = []
        for index, raw in enumerate(raw_elements):
            try:
                records.append(model.model_validate(raw))
            except ValidationError as exc:
                raise self._error(
                    kind,
                    f"{kind.value} element #{index} (id={raw.get('id')!r}) is invalid: {_first_error(exc)}",
                ) from exc

        _logger.debug("Decoded %d %s records from %s", len(records), kind.value, self.fmt.value)
        return records

    def decode_points(self, body: str | bytes) -> list[PointRecord]:
        return self.decode(EntityKind.NODE, body)  # type: ignore[return-value]

    def decode_paths(self, body: str | bytes) -> list[PathRecord]:
        return self.decode(EntityKind.WAY, body)  # type: ignore[return-value]

    def decode_relations(self, body: str | bytes) -> list[RelationRecord]:
        return self.decode(EntityKind.RELATION, body)  # type: ignore[return-value]

    def _raw_elements(self, kind: EntityKind, body: str | bytes) -> list[dict[str, Any]]:
        raise NotImplementedError

    def _error(self, kind: EntityKind, message: str) -> MalformedPayload:
        return MalformedPayload(f"{self.fmt.value}: {message}", fmt=self.fmt.value, kind=kind.value)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', '')}" if location else str(first.get("msg", ""))


class JsonDecoder(_BaseDecoder):
    """Decoder for ``[out:json]`` responses.

    Expected shape::

        {"elements": [{"type": "node", "id": 1, "lat": 43.7, "lon": 7.4,
                       "tags": {"name": "Plaza"}}, ...]}
    """

    fmt = OutputFormat.JSON

    def _raw_elements(self, kind: EntityKind, body: str | bytes) -> list[dict[str, Any]]:
        try:
            document = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise self._error(kind, f"body is not valid JSON: {preview_for_log(body)}") from exc

        if not isinstance(document, dict):
            raise self._error(kind, f"top level must be an object, got {type(document).__name__}")

        remark = document.get("remark")
        if isinstance(remark, str) and remark.strip().lower().startswith(_RUNTIME_ERROR_PREFIX):
            raise self._error(kind, f"interpreter reported: {remark.strip()}")

        elements = document.get("elements")
        if not isinstance(elements, list):
            raise self._error(kind, "missing 'elements' list")

        selected: list[dict[str, Any]] = []
        skipped = 0
        for index, element in enumerate(elements):
            if not isinstance(element, dict):
                raise self._error(kind, f"element #{index} is not an object")
            element_type = element.get("type")
            if element_type is not None and element_type != kind.value:
                skipped += 1
                continue
            selected.append(element)

        if skipped:
            _logger.debug("Skipped %d non-%s elements in JSON body", skipped, kind.value)
        return selected


class XmlDecoder(_BaseDecoder):
    """Decoder for ``[out:xml]`` responses.

    Expected shape::

        <osm>
          <node id="2" lat="43.8" lon="7.5"><tag k="name" v="Plaza"/></node>
          <way id="10"><nd ref="2"/><nd ref="3"/></way>
          <relation id="20"><member type="way" ref="10" role="outer"/></relation>
        </osm>

    A way or relation without children decodes to an empty sequence.
    """

    fmt = OutputFormat.XML

    def _raw_elements(self, kind: EntityKind, body: str | bytes) -> list[dict[str, Any]]:
        try:
            root = ET.fromstring(body)
        except ET.ParseError as exc:
            raise self._error(kind, f"body is not well-formed XML ({exc}): {preview_for_log(body)}") from exc

        remark = root.find("remark")
        if remark is not None and (remark.text or "").strip().lower().startswith(_RUNTIME_ERROR_PREFIX):
            raise self._error(kind, f"interpreter reported: {(remark.text or '').strip()}")

        selected: list[dict[str, Any]] = []
        for index, element in enumerate(root.findall(kind.value)):
            raw: dict[str, Any] = {"id": element.get("id"), "tags": self._tags(kind, index, element)}
            if kind == EntityKind.NODE:
                raw["lat"] = element.get("lat")
                raw["lon"] = element.get("lon")
            elif kind == EntityKind.WAY:
                raw["nodes"] = [nd.get("ref") for nd in element.findall("nd")]
            else:
                raw["members"] = [
                    {
                        "type": member.get("type"),
                        "ref": member.get("ref"),
                        "role": member.get("role", ""),
                    }
                    for member in element.findall("member")
                ]
            selected.append(raw)
        return selected

    def _tags(self, kind: EntityKind, index: int, element: ET.Element) -> dict[str, str]:
        pairs: list[tuple[str, str]] = []
        for tag in element.findall("tag"):
            key = tag.get("k")
            if key is None:
                raise self._error(kind, f"{kind.value} element #{index} has a <tag> without 'k'")
            pairs.append((key, tag.get("v", "")))
        return tags_from_pairs(pairs)


_DECODERS: dict[OutputFormat, _BaseDecoder] = {
    OutputFormat.JSON: JsonDecoder(),
    OutputFormat.XML: XmlDecoder(),
}


def decoder_for(fmt: OutputFormat | str) -> Decoder:
    """Return the decoder for the format a query requested."""
    return _DECODERS[OutputFormat(fmt)]
