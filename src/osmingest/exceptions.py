"""Custom exception hierarchy for osmingest."""

from __future__ import annotations


class OsmIngestError(Exception):
    """Base exception for all osmingest errors."""


class OsmConfigError(OsmIngestError):
    """Invalid or missing configuration."""


class OverpassTransportError(OsmIngestError):
    """HTTP-level failure (network, timeout, non-200 status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class MalformedPayload(OsmIngestError):
    """Response body is not well-formed, or an element lacks a required field.

    Raised by both decoders.  There is no fallback format to retry with,
    so the fetch for that entity kind is abandoned.
    """

    def __init__(
        self,
        message: str,
        *,
        fmt: str = "",
        kind: str = "",
    ) -> None:
        self.fmt = fmt
        self.kind = kind
        super().__init__(message)


class UnsupportedMemberKind(OsmIngestError):
    """Relation member of a kind other than ``node`` or ``way``.

    Such members are normally dropped and only counted.  This error is
    raised only when reconciling with ``strict=True``.
    """

    def __init__(self, message: str, *, relation_id: int, member_kind: str) -> None:
        self.relation_id = relation_id
        self.member_kind = member_kind
        super().__init__(message)


class EntityNotFoundError(OsmIngestError, KeyError):
    """Identifier is not present in an entity map."""

    def __init__(self, entity_id: int, *, kind: str = "") -> None:
        self.entity_id = entity_id
        self.kind = kind
        label = f"{kind} " if kind else ""
        super().__init__(f"{label}{entity_id} not found")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0])
