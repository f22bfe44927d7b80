"""Host-facing tree nodes for a Mongo account and its databases."""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Protocol, Sequence, runtime_checkable

from .connection_strings import add_database_to_connection_string, get_hosts_from_connection_string
from .listing import DatabaseLister
from .models import AccountDescriptor
from .naming import validate_database_name

NameValidator = Callable[[str | None], str | None]
NamePrompt = Callable[[str, str, NameValidator], "str | None | Awaitable[str | None]"]
AccountDeleter = Callable[["AccountNode"], Awaitable[None]]

DATABASE_CONTEXT_VALUE = "mongoDb"
COLLECTION_CONTEXT_VALUE = "MongoCollection"
DOCUMENT_CONTEXT_VALUE = "MongoDocument"


class ChildCreationCancelled(RuntimeError):
    """Raised when the name prompt is dismissed without a value."""


@runtime_checkable
class TreeNode(Protocol):
    """Minimal node interface consumed by the host tree view."""

    label: str
    context_value: str

    async def children(self) -> Sequence["TreeNode"]:
        """Return the node's children, loading them if needed."""


class DatabaseNode:
    """Leaf node for a single database under an account."""

    context_value = DATABASE_CONTEXT_VALUE

    def __init__(self, parent: AccountNode, name: str, connection_string: str) -> None:
        self.parent = parent
        self.name = name
        self.connection_string = connection_string

    @property
    def label(self) -> str:
        return self.name

    @property
    def node_id(self) -> str:
        return f"{self.parent.node_id}/{self.name}"

    async def children(self) -> Sequence[TreeNode]:
        return ()

    def __repr__(self) -> str:
        return f"DatabaseNode(name={self.name!r})"


class AccountNode:
    """Account node that lazily lists the databases beneath it."""

    context_value = "cosmosDBMongoServer"
    child_type_label = "Database"
    icon_name = "CosmosDBAccount.svg"

    def __init__(
        self,
        account: AccountDescriptor,
        *,
        lister: DatabaseLister | None = None,
        deleter: AccountDeleter | None = None,
        node_id: str | None = None,
    ) -> None:
        self.account = account
        self._lister = lister or DatabaseLister()
        self._deleter = deleter
        self._node_id = node_id

    @property
    def label(self) -> str:
        if self.account.label:
            return self.account.label
        if self.account.account_name:
            return self.account.account_name
        hosts = get_hosts_from_connection_string(self.account.connection_string)
        return hosts[0] if hosts else "Mongo account"

    @property
    def node_id(self) -> str:
        return self._node_id or self.label

    @property
    def connection_string(self) -> str:
        return self.account.connection_string

    def has_more_children(self) -> bool:
        return False

    async def children(self) -> list[DatabaseNode]:
        databases = await self._lister.list(self.account)
        return [self._database_node(database.name) for database in databases]

    async def create_child(self, prompt: NamePrompt) -> DatabaseNode:
        """Ask ``prompt`` for a database name and return the new child node.

        Nothing is written to the server; Mongo creates the database on the
        first write into one of its collections.
        """

        result = prompt("Database Name", "Enter the name of the database", validate_database_name)
        if inspect.isawaitable(result):
            result = await result
        if result is None:
            raise ChildCreationCancelled("Database creation cancelled.")
        message = validate_database_name(result)
        if message:
            raise ValueError(message)
        return self._database_node(result)

    def is_ancestor_of(self, context_value: str) -> bool:
        return context_value in {
            DATABASE_CONTEXT_VALUE,
            COLLECTION_CONTEXT_VALUE,
            DOCUMENT_CONTEXT_VALUE,
        }

    async def delete(self) -> None:
        if self._deleter is None:
            raise NotImplementedError(f"No delete handler configured for '{self.label}'.")
        await self._deleter(self)

    def _database_node(self, name: str) -> DatabaseNode:
        return DatabaseNode(self, name, add_database_to_connection_string(self.connection_string, name))

    def __repr__(self) -> str:
        return f"AccountNode(label={self.label!r})"


__all__ = [
    "AccountDeleter",
    "AccountNode",
    "ChildCreationCancelled",
    "DatabaseNode",
    "NamePrompt",
    "TreeNode",
]
