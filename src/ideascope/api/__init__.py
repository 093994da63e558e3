"""
IdeaScope API Module.

REST API for premium analysis artifacts, source references and exports.
"""

from ideascope.api.app import create_app

__all__ = ["create_app"]
