"""Ingestion layer.

This package turns raw interpreter responses into format-neutral
records (decoders) and wires query, transport, decode and reconcile
into one pipeline per entity kind.
"""

__all__: list[str] = []
