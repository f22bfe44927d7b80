"""Database name validation used when creating new database nodes."""

from __future__ import annotations

import re

MIN_NAME_LENGTH = 1
MAX_NAME_LENGTH = 63

# "#?" are additionally restricted for Cosmos DB Mongo accounts.
_FORBIDDEN = re.compile(r'[/\\. "$#?]')


def validate_database_name(name: str | None) -> str | None:
    """Return a message describing why ``name`` is invalid, or ``None``."""

    if not name or len(name) < MIN_NAME_LENGTH or len(name) > MAX_NAME_LENGTH:
        return f"Database name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters."
    if _FORBIDDEN.search(name):
        return 'Database name cannot contain these characters - `/\\. "$#?`'
    return None


__all__ = ["MAX_NAME_LENGTH", "MIN_NAME_LENGTH", "validate_database_name"]
