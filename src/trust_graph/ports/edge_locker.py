"""Edge locker port interface.

Serializes read-modify-write cycles on a single edge (signal append + trust
recompute, feedback, status changes). The in-memory adapter serializes within
one process; the Redis adapter serializes across processes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager


class EdgeLocker(Protocol):
    """Protocol for per-edge mutual exclusion."""

    def hold(self, edge_id: str) -> AbstractAsyncContextManager[None]:
        """Async context manager that holds the lock for ``edge_id``.

        Raises ``ConflictError`` if the lock cannot be obtained in time.
        """
        ...

    async def ping(self) -> bool:
        """True when the lock backend is reachable."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
