"""
IdeaScope Exception Hierarchy.

Defines the custom exceptions shared by the premium cache, the generation
gateway and the LLM client. Cache misses are never exceptions; these cover
configuration problems and failed generations.
"""

from typing import Any


class IdeaScopeError(Exception):
    """
    Base exception for all IdeaScope errors.

    Carries a human-readable message plus a structured ``details`` dict
    that is safe to serialize into API error bodies.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize an IdeaScopeError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(IdeaScopeError):
    """
    Errors in configuration loading or validation.

    Raised when an environment override cannot be parsed or a
    configured value is out of range.
    """

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a ConfigurationError.

        Args:
            message: Human-readable error message
            env_var: Environment variable name if applicable
            config_key: Configuration key if applicable
            details: Optional structured data for debugging
        """
        details = details or {}
        if env_var:
            details["env_var"] = env_var
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details=details)
        self.env_var = env_var
        self.config_key = config_key


class GenerationError(IdeaScopeError):
    """
    Raised when producing a premium artifact fails.

    A failed generation is never written to the cache, so the next
    request for the same analysis retries from scratch.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        analysis_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a GenerationError.

        Args:
            message: Human-readable error message
            kind: Artifact kind being generated
            analysis_id: Analysis the artifact belongs to
            details: Optional structured data for debugging
        """
        details = details or {}
        if kind:
            details["kind"] = kind
        if analysis_id:
            details["analysis_id"] = analysis_id

        super().__init__(message, details=details)
        self.kind = kind
        self.analysis_id = analysis_id


class LLMError(IdeaScopeError):
    """
    Errors from LLM provider interactions.

    Raised when:
    - API calls fail
    - Authentication fails
    - Rate limits are exceeded
    - Responses cannot be parsed
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        model: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if provider:
            details["provider"] = provider
        if model:
            details["model"] = model
        if status_code:
            details["status_code"] = status_code

        super().__init__(message, details=details)
        self.provider = provider
        self.model = model
        self.status_code = status_code


class LLMAuthenticationError(LLMError):
    """Raised when LLM API authentication fails."""

    def __init__(
        self,
        message: str = "API authentication failed",
        *,
        provider: str | None = None,
    ):
        super().__init__(message, provider=provider, status_code=401)


class LLMRateLimitError(LLMError):
    """Raised when LLM API rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        provider: str | None = None,
        retry_after: int | None = None,
    ):
        details = {}
        if retry_after is not None:
            details["retry_after_seconds"] = retry_after
        super().__init__(message, provider=provider, status_code=429, details=details)
        self.retry_after = retry_after


class LLMParseError(LLMError):
    """Raised when LLM response cannot be parsed as a JSON object."""

    def __init__(
        self,
        message: str = "Failed to parse LLM response",
        *,
        response_preview: str | None = None,
    ):
        details = {}
        if response_preview:
            details["response_preview"] = response_preview[:200]
        super().__init__(message, details=details)
        self.response_preview = response_preview
