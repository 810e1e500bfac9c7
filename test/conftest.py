"""Shared fixtures for the swapper test suite."""

import pytest


class InMemoryStore:
    """Dict-backed stand-in for the durable counter store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        self.data[key] = value


@pytest.fixture
def memory_store():
    """Create an empty in-memory counter store."""
    return InMemoryStore()
