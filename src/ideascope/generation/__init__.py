"""
IdeaScope Generation Module.

Read-through access to premium artifacts: the gateway returns cached
payloads and, on a miss, generates them with the LLM or the
deterministic fallback.
"""

from ideascope.generation.fallback import generate_fallback
from ideascope.generation.gateway import ArtifactGenerator, GenerationGateway, Generator
from ideascope.generation.prompts import build_request

__all__ = [
    "ArtifactGenerator",
    "GenerationGateway",
    "Generator",
    "build_request",
    "generate_fallback",
]
