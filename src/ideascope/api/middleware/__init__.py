"""
Middleware for the premium API.
"""

from ideascope.api.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
