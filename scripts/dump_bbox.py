#!/usr/bin/env python3
"""Fetch every entity kind inside a bounding box and print what came back.

Usage
-----
::

    python scripts/dump_bbox.py 43.731 7.418 43.732 7.419
    python scripts/dump_bbox.py 43.731 7.418 43.732 7.419 --format xml --json

Options::

    --format {json,xml}   Wire format to request (default: OVERPASS_FORMAT or json)
    --kind KIND           Only fetch this kind (repeatable: node, way, relation)
    --endpoint URL        Interpreter URL (default: OVERPASS_ENDPOINT)
    --json                Output the reconciled entities as JSON
    --output FILE         Write output to FILE instead of stdout
    --query-only          Print the generated queries and exit
    --verbose             Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from osmingest import (  # noqa: E402
    BoundingBox,
    EntityKind,
    EntityStore,
    OutputFormat,
    OverpassClient,
    OverpassConfig,
    build_query,
)

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _summarize(store: EntityStore, kinds: list[EntityKind]) -> str:
    out: list[str] = []
    for kind in kinds:
        out.append(_section(kind.value.upper()))
        error = store.errors.get(kind)
        if error is not None:
            out.append(f"  !! {kind.value} failed: {error}")
            continue
        entities = store.for_kind(kind)
        if entities is None:
            continue
        out.append(f"  entities: {len(entities)}")
        if entities.dropped_members:
            out.append(f"  dropped relation members: {entities.dropped_members}")
        for entity in list(entities.values())[:5]:
            name = entity.tags.get("name", "")
            out.append(f"    - {entity.id} {name}".rstrip())
        if len(entities) > 5:
            out.append(f"    ... {len(entities) - 5} more")

    if store.paths is not None and store.points is not None:
        dangling = sum(1 for path_id in store.paths if store.missing_point_ids(path_id))
        out.append(f"\n  paths with points outside this batch: {dangling}")
    return "\n".join(out)


def _to_json(store: EntityStore, kinds: list[EntityKind]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for kind in kinds:
        error = store.errors.get(kind)
        if error is not None:
            result[kind.value] = {"error": str(error)}
            continue
        entities = store.for_kind(kind)
        if entities is None:
            continue
        result[kind.value] = {
            "dropped_members": entities.dropped_members,
            "entities": [entity.model_dump(mode="json") for entity in entities.values()],
        }
    return result


# ── main ─────────────────────────────────────────────────────


async def main() -> int:
    parser = argparse.ArgumentParser(
        description="Fetch nodes, ways and relations inside a bounding box.",
    )
    parser.add_argument("min_lat", type=float)
    parser.add_argument("min_lon", type=float)
    parser.add_argument("max_lat", type=float)
    parser.add_argument("max_lon", type=float)
    parser.add_argument("--format", choices=[fmt.value for fmt in OutputFormat], dest="fmt")
    parser.add_argument(
        "--kind",
        action="append",
        choices=[kind.value for kind in EntityKind],
        help="Only fetch this kind (repeatable)",
    )
    parser.add_argument("--endpoint", help="Interpreter URL")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--query-only", action="store_true", help="Print the queries and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    overrides: dict[str, Any] = {}
    if args.endpoint:
        overrides["endpoint"] = args.endpoint
    if args.fmt:
        overrides["output_format"] = args.fmt
    config = OverpassConfig.from_env(**overrides)

    bbox = BoundingBox(args.min_lat, args.min_lon, args.max_lat, args.max_lon)
    kinds = [EntityKind(kind) for kind in args.kind] if args.kind else list(EntityKind)

    if args.query_only:
        for kind in kinds:
            print(build_query(kind, bbox, config.output_format, timeout=config.query_timeout))
        return 0

    async with OverpassClient(config) as client:
        store = await client.fetch_all(bbox, kinds=kinds)

    if args.json_mode:
        text = json.dumps(_to_json(store, kinds), indent=2, ensure_ascii=False)
    else:
        text = _summarize(store, kinds)

    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        print(f"Output written to {args.output}", file=sys.stderr)
    else:
        print(text)

    return 0 if store.ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
