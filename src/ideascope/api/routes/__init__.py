"""
API route handlers.
"""

from ideascope.api.routes import health, metrics, premium

__all__ = ["health", "metrics", "premium"]
