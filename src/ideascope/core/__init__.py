"""
IdeaScope Core Module.

Provides the shared exception hierarchy.
"""

__all__ = [
    "IdeaScopeError",
    "ConfigurationError",
    "GenerationError",
    "LLMError",
    "LLMAuthenticationError",
    "LLMRateLimitError",
    "LLMParseError",
]

from ideascope.core.exceptions import (
    ConfigurationError,
    GenerationError,
    IdeaScopeError,
    LLMAuthenticationError,
    LLMError,
    LLMParseError,
    LLMRateLimitError,
)
