"""Shared dataclasses used across listing/tree modules."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AccountDescriptor:
    """Runtime representation of a database account."""

    connection_string: str
    account_name: str | None = None
    is_emulator: bool = False
    label: str | None = None


@dataclass(frozen=True, slots=True)
class DatabaseDescriptor:
    """A database as reported by the server's administrative listing."""

    name: str
    empty: bool = False


__all__ = ["AccountDescriptor", "DatabaseDescriptor"]
