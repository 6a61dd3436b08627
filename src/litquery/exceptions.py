"""Custom exception hierarchy for the literature query service."""

from __future__ import annotations


class LitQueryError(Exception):
    """Base exception for all service errors."""


class InputValidationError(LitQueryError):
    """Bad or abusive request input, rejected before a job exists."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class RateLimitError(LitQueryError):
    """Client exceeded its request allowance."""

    def __init__(self, reason: str, retry_after: int) -> None:
        super().__init__(reason)
        self.retry_after = retry_after


class NotFoundError(LitQueryError):
    """Unknown corpus or job id."""


class ConfigurationError(LitQueryError):
    """Corpus or service configured inconsistently."""


class UpstreamError(LitQueryError):
    """Embedding or completion service failed or timed out."""


class EmbeddingError(UpstreamError):
    """Error generating a query embedding."""


class GenerationError(UpstreamError):
    """Error from the completion service."""


class ExpiredError(LitQueryError):
    """Job TTL has passed; its data is gone or about to be."""


class PersistenceError(LitQueryError):
    """Store read or write failed."""


class InvalidTransitionError(LitQueryError):
    """Requested job status change is not part of the state machine."""
