"""Error taxonomy shared by every component.

These are business-logic errors, not HTTP errors. The presentation layer
(FastAPI routes, CLI commands) translates them into status codes and exit
codes.
"""


class AssistantError(Exception):
    """Base class for all errors raised by the assistant."""


# ---------------------------------------------------------------------------
# Configuration — always surfaced distinctly, never retried
# ---------------------------------------------------------------------------


class ConfigurationMissingError(AssistantError):
    """A required credential or endpoint is not configured."""


class ProviderUnavailableError(ConfigurationMissingError):
    """The embedding provider has no credential to work with."""


class IndexUnavailableError(ConfigurationMissingError):
    """The vector index client has no credential to work with."""


# ---------------------------------------------------------------------------
# Upstream — network or service failure, no automatic retry
# ---------------------------------------------------------------------------


class UpstreamUnavailableError(AssistantError):
    """A backing service (completion, embedding, index, CMS) failed."""


class IndexNotFoundError(UpstreamUnavailableError):
    """The named vector index does not exist (distinct from an empty index)."""


class ContentSourceError(UpstreamUnavailableError):
    """Authenticating against or fetching from the content source failed."""


# ---------------------------------------------------------------------------
# Malformed input — handled as locally as possible
# ---------------------------------------------------------------------------


class MalformedInputError(AssistantError, ValueError):
    """A request is missing required fields or carries invalid values."""


class EmptyConversationError(MalformedInputError):
    """Raised when the caller provides an empty messages list."""


class MalformedToolArgumentsError(MalformedInputError):
    """A tool-invocation request carried arguments that are not valid JSON."""
