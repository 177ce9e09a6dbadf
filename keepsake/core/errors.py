"""
Exceptions raised by the retrieval and answer pipeline.
"""


class KeepsakeError(Exception):
    """Base class for all keepsake failures."""

    error_type = "KEEPSAKE_ERROR"


class EmbeddingUnavailable(KeepsakeError):
    """Upstream embedding call failed or returned unparsable data."""

    error_type = "EMBEDDING_UNAVAILABLE"


class GenerationUnavailable(KeepsakeError):
    """Upstream generation call failed or returned unusable output."""

    error_type = "GENERATION_UNAVAILABLE"


class InvalidQuery(KeepsakeError):
    """Caller supplied a blank query or an unknown filter value."""

    error_type = "INVALID_QUERY"


class ContentNotFound(KeepsakeError):
    """No content item exists with the requested id."""

    error_type = "CONTENT_NOT_FOUND"
