"""
IdeaScope - Startup Idea Validation Backend.

Serves generated premium analytics (keyword intelligence, competitor
matrices, GTM plans, market sizing and more) behind an in-memory,
TTL-based cache keyed by analysis identifier.
"""

from ideascope.version import __version__

# API module is available but not exported by default
# Import explicitly: from ideascope.api import create_app

__all__ = ["__version__"]
