"""Helpers for reading and rewriting Mongo connection strings.

The standard library URL parser cannot be used here because a Mongo URI may
list several comma-separated hosts. The string is split the way pymongo's
``parse_uri`` splits it: the host list runs up to the first ``/`` after the
scheme, the database runs from there to the ``?``, and the database is
decoded with ``unquote_plus``.
"""

from __future__ import annotations

import re
from urllib.parse import quote, unquote_plus

_SCHEME_SEPARATOR = "://"
_BAD_DATABASE_CHARS = re.compile(r'[/ "$]')


def _split(connection_string: str) -> tuple[str, str, str]:
    """Split into ``(prefix, path, query)``; query keeps its leading ``?``."""

    scheme_end = connection_string.find(_SCHEME_SEPARATOR)
    start = scheme_end + len(_SCHEME_SEPARATOR) if scheme_end >= 0 else 0
    scheme, rest = connection_string[:start], connection_string[start:]
    hosts, slash, path = rest.partition("/")
    if slash:
        path, question, options = path.partition("?")
    else:
        hosts, question, options = hosts.partition("?")
    return scheme + hosts, path, question + options


def get_database_name_from_connection_string(connection_string: str) -> str | None:
    """Return the database encoded in the connection string, if any.

    Returns ``None`` when the path is empty or is not a valid database name,
    e.g. when an unescaped ``/`` in the credentials spills into the path.
    """

    if not connection_string:
        return None
    _, path, _ = _split(connection_string)
    if not path:
        return None
    database = unquote_plus(path)
    # pymongo reads "db.collection" paths as a namespace.
    database = database.split(".", 1)[0]
    if not database or _BAD_DATABASE_CHARS.search(database):
        return None
    return database


def add_database_to_connection_string(connection_string: str, database: str) -> str:
    """Return ``connection_string`` targeting ``database``, keeping its options."""

    prefix, _, query = _split(connection_string)
    return f"{prefix}/{quote(database, safe='')}{query}"


def get_hosts_from_connection_string(connection_string: str) -> tuple[str, ...]:
    """Return the comma-separated host list of the connection string."""

    prefix, _, _ = _split(connection_string)
    scheme_end = prefix.find(_SCHEME_SEPARATOR)
    hosts = prefix[scheme_end + len(_SCHEME_SEPARATOR):] if scheme_end >= 0 else prefix
    _, _, hosts = hosts.rpartition("@")
    return tuple(host for host in hosts.split(",") if host)


__all__ = [
    "add_database_to_connection_string",
    "get_database_name_from_connection_string",
    "get_hosts_from_connection_string",
]
