"""Structured completion port and its failure taxonomy."""

from typing import Protocol

from meal_logger.domain.completions import Completion, OutputSchema, T


class CompletionError(Exception):
    """Base class for structured completion failures."""


class ConfigurationError(CompletionError):
    """The client cannot be constructed from the given configuration."""


class ApiError(CompletionError):
    """The completion API answered with an error status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ApiError):
    """The API rejected the configured credentials."""


class BadRequestError(ApiError):
    """The request was malformed or its parameters were rejected."""


class RateLimitError(ApiError):
    """The API rate limit was hit; the call may be retried later."""


class UpstreamServerError(ApiError):
    """The API failed with a 5xx status; the call may be retried."""


class NetworkError(CompletionError):
    """The API could not be reached or did not answer in time."""


class ResponseParsingError(CompletionError):
    """The response did not have the expected shape or content."""


class StructuredCompletionClient(Protocol):
    """Interface for schema-constrained chat completions."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema: OutputSchema[T],
        system_prompt: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> Completion[T]:
        """Return the model output validated against ``schema``."""
