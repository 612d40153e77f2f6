from __future__ import annotations

from osmingest._redact import preview_for_log


def test_preview_truncates_long_bodies() -> None:
    preview = preview_for_log("x" * 600, max_chars=10)
    assert preview.startswith("x" * 10)
    assert "<truncated 600 chars>" in preview


def test_preview_collapses_whitespace() -> None:
    assert preview_for_log("<osm>\n  <node id='1'/>\n</osm>") == "<osm> <node id='1'/> </osm>"


def test_preview_handles_bytes_and_none() -> None:
    assert preview_for_log(b"{\"elements\": []}") == '{"elements": []}'
    assert preview_for_log(None) == "<none>"
