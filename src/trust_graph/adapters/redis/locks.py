"""Redis EdgeLocker adapter.

Distributed per-edge mutual exclusion built on redis-py's asyncio ``Lock``
(SET NX PX with a token, released via Lua). Locks auto-expire after
``lock_timeout_s`` so a crashed holder cannot wedge an edge.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from redis.asyncio import Redis
from redis.exceptions import LockError

from trust_graph.domain.errors import ConflictError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from trust_graph.settings import RedisSettings

log = structlog.get_logger(__name__)


class RedisEdgeLocker:
    """EdgeLocker implementation backed by Redis.

    Satisfies the ``trust_graph.ports.edge_locker.EdgeLocker`` protocol.
    """

    def __init__(self, client: Redis, settings: RedisSettings) -> None:
        self._client = client
        self._settings = settings

    # -- lifecycle ----------------------------------------------------------

    @classmethod
    def create(cls, settings: RedisSettings) -> RedisEdgeLocker:
        """Factory: create a locker with its own client from settings."""
        client = Redis(
            host=settings.host,
            port=settings.port,
            db=settings.db,
            password=settings.password,
            decode_responses=False,
        )
        return cls(client=client, settings=settings)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()
        log.info("redis_connection_closed")

    # -- locking ------------------------------------------------------------

    @asynccontextmanager
    async def hold(self, edge_id: str) -> AsyncIterator[None]:
        lock = self._client.lock(
            f"{self._settings.lock_key_prefix}{edge_id}",
            timeout=self._settings.lock_timeout_s,
            blocking_timeout=self._settings.lock_blocking_timeout_s,
        )
        acquired = await lock.acquire()
        if not acquired:
            log.info("edge_lock_busy", edge_id=edge_id)
            msg = f"Edge {edge_id} is busy"
            raise ConflictError(msg)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Lock expired before release; the version check still guards the write.
                log.warning("edge_lock_expired_before_release", edge_id=edge_id)
