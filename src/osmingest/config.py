"""Client configuration for osmingest."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from osmingest._constants import DEFAULT_ENDPOINT, DEFAULT_REQUEST_TIMEOUT, USER_AGENT
from osmingest.exceptions import OsmConfigError
from osmingest.query import OutputFormat


def _env_bool(env_key: str, value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise OsmConfigError(f"{env_key} must be a boolean, got {value!r}")


def _env_number(env_key: str, value: str, convert: type) -> Any:
    try:
        return convert(value)
    except ValueError as exc:
        raise OsmConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class OverpassConfig:
    """Client configuration.

    Parameters
    ----------
    endpoint : str
        Interpreter URL that queries are POSTed to.
    output_format : OutputFormat
        Wire format requested by default (``json`` or ``xml``).
    request_timeout : float
        Total HTTP timeout in seconds for one fetch.
    query_timeout : int or None
        Server-side ``[timeout:N]`` setting embedded in each query.
        ``None`` leaves the interpreter default in place.
    user_agent : str
        ``User-Agent`` header sent with every request.
    strict_members : bool
        Raise :class:`~osmingest.exceptions.UnsupportedMemberKind` for
        relation members that are neither nodes nor ways instead of
        dropping them.
    """

    endpoint: str = DEFAULT_ENDPOINT
    output_format: OutputFormat = OutputFormat.JSON
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    query_timeout: int | None = None
    user_agent: str = USER_AGENT
    strict_members: bool = False

    def __post_init__(self) -> None:
        try:
            fmt = OutputFormat(self.output_format)
        except ValueError as exc:
            raise OsmConfigError(f"Unsupported output format: {self.output_format!r}") from exc
        # Frozen dataclass: normalise plain strings to the enum.
        object.__setattr__(self, "output_format", fmt)
        if self.request_timeout <= 0:
            raise OsmConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @classmethod
    def from_env(cls, **overrides: Any) -> OverpassConfig:
        """Create configuration from environment variables.

        Reads ``OVERPASS_ENDPOINT``, ``OVERPASS_FORMAT``,
        ``OVERPASS_REQUEST_TIMEOUT``, ``OVERPASS_QUERY_TIMEOUT``,
        ``OVERPASS_USER_AGENT`` and ``OVERPASS_STRICT_MEMBERS``.
        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "OVERPASS_ENDPOINT": "endpoint",
            "OVERPASS_FORMAT": "output_format",
            "OVERPASS_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        # Numeric fields are handled separately
        timeout_env = env.get("OVERPASS_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_number("OVERPASS_REQUEST_TIMEOUT", timeout_env, float)

        query_timeout_env = env.get("OVERPASS_QUERY_TIMEOUT")
        if query_timeout_env is not None and "query_timeout" not in overrides:
            config_kwargs["query_timeout"] = _env_number("OVERPASS_QUERY_TIMEOUT", query_timeout_env, int)

        if "strict_members" not in overrides:
            strict_env = env.get("OVERPASS_STRICT_MEMBERS")
            config_kwargs["strict_members"] = _env_bool("OVERPASS_STRICT_MEMBERS", strict_env, False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
