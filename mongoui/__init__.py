"""Account-level database explorer for MongoDB-compatible servers."""

__version__ = "0.1.0"
