"""Shared fakes for the listing tests."""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeCursor:
    def __init__(self, entries: list[dict[str, Any]]) -> None:
        self._entries = list(entries)

    def __aiter__(self) -> "FakeCursor":
        return self

    async def __anext__(self) -> dict[str, Any]:
        if not self._entries:
            raise StopAsyncIteration
        return self._entries.pop(0)


class FakeClient:
    """Stand-in for pymongo's AsyncMongoClient that records its usage."""

    instances: list["FakeClient"] = []
    entries: list[dict[str, Any]] = []
    list_error: Exception | None = None
    close_error: Exception | None = None

    def __init__(self, uri: str, **kwargs: Any) -> None:
        self.uri = uri
        self.kwargs = kwargs
        self.list_calls = 0
        self.closed = False
        FakeClient.instances.append(self)

    async def list_databases(self) -> FakeCursor:
        self.list_calls += 1
        if FakeClient.list_error is not None:
            raise FakeClient.list_error
        return FakeCursor(FakeClient.entries)

    async def close(self) -> None:
        self.closed = True
        if FakeClient.close_error is not None:
            raise FakeClient.close_error


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> type[FakeClient]:
    FakeClient.instances = []
    FakeClient.entries = []
    FakeClient.list_error = None
    FakeClient.close_error = None
    monkeypatch.setattr("mongoui.listing.AsyncMongoClient", FakeClient)
    return FakeClient
