"""In-process EdgeLocker adapter.

One ``asyncio.Lock`` per edge id, created on demand and dropped once no
coroutine holds or waits for it.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from trust_graph.domain.errors import ConflictError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class InMemoryEdgeLocker:
    """EdgeLocker implementation for a single process.

    Satisfies the ``trust_graph.ports.edge_locker.EdgeLocker`` protocol.
    """

    def __init__(self, blocking_timeout_s: float | None = None) -> None:
        self._blocking_timeout_s = blocking_timeout_s
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, edge_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(edge_id, asyncio.Lock())
        self._users[edge_id] = self._users.get(edge_id, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self._blocking_timeout_s)
            except TimeoutError as exc:
                msg = f"Edge {edge_id} is busy"
                raise ConflictError(msg) from exc
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[edge_id] -= 1
            if self._users[edge_id] == 0:
                del self._users[edge_id]
                del self._locks[edge_id]

    def held_count(self) -> int:
        """Number of edge ids with a live lock object."""
        return len(self._locks)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._locks.clear()
        self._users.clear()
