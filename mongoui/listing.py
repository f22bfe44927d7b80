"""Database listing for Mongo-compatible accounts."""

from __future__ import annotations

import logging
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import ConfigurationError as DriverConfigurationError
from pymongo.errors import ConnectionFailure, PyMongoError

from . import __version__
from .connection_strings import get_database_name_from_connection_string
from .models import AccountDescriptor, DatabaseDescriptor

LOG = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"mongoui/{__version__}"
LOCAL_CONNECTION_DEBUGGING_TIPS = "https://aka.ms/AA5zah5"
ADMIN_DATABASE = "admin"

_REFUSED_MARKERS = ("ECONNREFUSED", "connection refused")


class DatabaseListerError(RuntimeError):
    """Base class for failures raised while listing an account's databases."""


class ConfigurationError(DatabaseListerError):
    """Raised when the account cannot be listed as configured."""


class AccountConnectionError(DatabaseListerError):
    """Raised when the server behind an account cannot be reached."""


class DatabaseListError(DatabaseListerError):
    """Raised when the server rejects or fails the listing call."""


class DatabaseLister:
    """Opens a short-lived client per call and lists the databases it can see."""

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        debugging_link: str = LOCAL_CONNECTION_DEBUGGING_TIPS,
        emulator_allow_invalid_certificates: bool = True,
    ) -> None:
        self._user_agent = user_agent
        self._debugging_link = debugging_link
        self._emulator_allow_invalid_certificates = emulator_allow_invalid_certificates

    async def list(self, account: AccountDescriptor) -> list[DatabaseDescriptor]:
        if not account.connection_string:
            raise ConfigurationError("Missing connection string")
        LOG.debug("Listing databases for '%s'", account.account_name or "account")
        client = None
        try:
            client = self._open_client(account)
            database = get_database_name_from_connection_string(account.connection_string)
            # The emulator's connection string does not follow the standard format.
            if database and not account.is_emulator:
                # The credential may only be scoped to this database, so skip the admin listing.
                LOG.debug("Using database '%s' from connection string", database)
                return [DatabaseDescriptor(name=database, empty=False)]
            databases = await self._list_databases(client)
        except DatabaseListerError as exc:
            annotated = self._annotate(account, exc)
            if annotated is exc:
                raise
            raise annotated from exc
        finally:
            if client is not None:
                try:
                    await client.close()
                except Exception:
                    pass
        result = [database for database in databases if not _is_empty_admin(database)]
        LOG.debug("Listed %d database(s) for '%s'", len(result), account.account_name or "account")
        return result

    def _open_client(self, account: AccountDescriptor) -> AsyncMongoClient:
        app_name = account.account_name or self._user_agent
        # Azure accounts need the account name passed through for private endpoints.
        kwargs: dict[str, Any] = {"appname": f"@{app_name}@"}
        if account.is_emulator and self._emulator_allow_invalid_certificates:
            kwargs["tlsAllowInvalidCertificates"] = True
        try:
            return AsyncMongoClient(account.connection_string, **kwargs)
        except DriverConfigurationError as exc:
            raise ConfigurationError(str(exc)) from exc
        except ConnectionFailure as exc:
            raise AccountConnectionError(str(exc)) from exc

    async def _list_databases(self, client: AsyncMongoClient) -> list[DatabaseDescriptor]:
        try:
            cursor = await client.list_databases()
            return [
                DatabaseDescriptor(name=str(entry["name"]), empty=bool(entry.get("empty", False)))
                async for entry in cursor
                if entry.get("name")
            ]
        except ConnectionFailure as exc:
            raise AccountConnectionError(str(exc)) from exc
        except PyMongoError as exc:
            raise DatabaseListError(str(exc)) from exc

    def _annotate(self, account: AccountDescriptor, exc: DatabaseListerError) -> DatabaseListerError:
        message = str(exc)
        if not account.is_emulator or not _is_connection_refused(message):
            return exc
        return type(exc)(
            f"Unable to reach emulator. See {self._debugging_link} for debugging tips.\n{message}"
        )


def _is_empty_admin(database: DatabaseDescriptor) -> bool:
    return database.name.lower() == ADMIN_DATABASE and database.empty


def _is_connection_refused(message: str) -> bool:
    lowered = message.lower()
    return any(marker.lower() in lowered for marker in _REFUSED_MARKERS)


__all__ = [
    "AccountConnectionError",
    "ConfigurationError",
    "DatabaseListError",
    "DatabaseLister",
    "DatabaseListerError",
    "DEFAULT_USER_AGENT",
    "LOCAL_CONNECTION_DEBUGGING_TIPS",
]
