"""Version information for IdeaScope."""

__version__ = "0.1.0"
