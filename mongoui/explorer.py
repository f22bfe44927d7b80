"""Account explorer wiring configured accounts into tree nodes."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from .config import AppConfig
from .listing import DatabaseLister
from .tree import AccountDeleter, AccountNode, DatabaseNode

LOG = logging.getLogger(__name__)

ExpansionListener = Callable[["ExpansionEvent"], None]


@dataclass(frozen=True, slots=True)
class ExpansionEvent:
    """Snapshot emitted whenever an account node is expanded."""

    account: str
    databases: tuple[str, ...]
    elapsed_ms: int
    expanded_at: datetime
    error: str | None = None


class AccountExplorer:
    """Builds account nodes from config and reports expansions to listeners."""

    def __init__(
        self,
        config: AppConfig,
        *,
        lister: DatabaseLister | None = None,
        deleter: AccountDeleter | None = None,
    ) -> None:
        self._config = config
        self._lister = lister or config.build_lister()
        self._nodes: dict[str, AccountNode] = {}
        for entry in config.accounts:
            if entry.name in self._nodes:
                LOG.warning("Duplicate account '%s'; using the last entry", entry.name)
            self._nodes[entry.name] = AccountNode(
                entry.to_descriptor(),
                lister=self._lister,
                deleter=deleter,
                node_id=entry.name,
            )
        self._listeners: set[ExpansionListener] = set()
        self._last_event: dict[str, ExpansionEvent] = {}

    @property
    def accounts(self) -> tuple[AccountNode, ...]:
        """Account nodes in config order."""

        return tuple(self._nodes.values())

    def node(self, name: str) -> AccountNode:
        try:
            return self._nodes[name]
        except KeyError:
            raise ValueError(f"Account '{name}' not found.") from None

    def last_event(self, name: str) -> ExpansionEvent | None:
        """Most recent expansion result for the named account."""

        return self._last_event.get(name)

    async def expand(self, name: str) -> list[DatabaseNode]:
        """List the databases under the named account."""

        node = self.node(name)
        started = time.perf_counter()
        try:
            children = await node.children()
        except Exception as exc:
            self._publish(name, (), started, error=str(exc))
            raise
        self._publish(name, tuple(child.name for child in children), started)
        return children

    def subscribe(self, listener: ExpansionListener) -> Callable[[], None]:
        """Subscribe to expansion events; returns an unsubscribe handle."""

        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _publish(
        self,
        name: str,
        databases: tuple[str, ...],
        started: float,
        *,
        error: str | None = None,
    ) -> None:
        event = ExpansionEvent(
            account=name,
            databases=databases,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
            expanded_at=datetime.now(tz=timezone.utc),
            error=error,
        )
        self._last_event[name] = event
        for listener in tuple(self._listeners):
            try:
                listener(event)
            except Exception:
                LOG.exception("Expansion listener failed", extra={"account": name})


__all__ = ["AccountExplorer", "ExpansionEvent", "ExpansionListener"]
