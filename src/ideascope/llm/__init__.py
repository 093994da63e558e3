"""
IdeaScope LLM Module.

Provides the LLM client used to generate premium artifacts.
"""

__all__ = ["LLMClient", "LLMConfig", "LLMProvider", "LLMRequest", "LLMResponse"]

from ideascope.llm.client import LLMClient, LLMConfig, LLMProvider, LLMRequest, LLMResponse
