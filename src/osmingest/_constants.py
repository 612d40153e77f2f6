"""Internal constants shared across the library."""

DEFAULT_ENDPOINT = "https://overpass-api.de/api/interpreter"
USER_AGENT = "osmingest"
DEFAULT_REQUEST_TIMEOUT: float = 180.0

# Relation member kinds that map onto a modelled entity kind.
MEMBER_KIND_NODE = "node"
MEMBER_KIND_WAY = "way"

# Longest body excerpt that is echoed into log lines and error messages.
LOG_PREVIEW_CHARS = 200
