"""Network store port interfaces.

Uses typing.Protocol for structural subtyping (not ABCs).
The Neo4j and in-memory adapters implement these protocols.

``GraphReader`` is the narrow adjacency interface the traversal code
(path finder, suggestion ranker) is written against; ``NetworkStore`` adds
the record-level reads and writes the service layer needs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from trust_graph.domain.models import (
        ConnectionRequest,
        EdgeStatus,
        InteractionFeedback,
        NetworkEdge,
        NetworkStats,
        ProfileSummary,
        RequestStatus,
        TrustSignal,
    )


class GraphReader(Protocol):
    """Adjacency queries over the edge store."""

    async def active_neighbors(self, profile_id: str) -> list[str]:
        """Profile ids joined to ``profile_id`` by an active edge, sorted."""
        ...

    async def edge_between(self, profile_a: str, profile_b: str) -> NetworkEdge | None:
        """The edge on the unordered pair, in any status, or None."""
        ...

    async def get_profiles(self, profile_ids: list[str]) -> dict[str, ProfileSummary]:
        """Known profile summaries keyed by id. Unknown ids are omitted."""
        ...


class NetworkStore(GraphReader, Protocol):
    """Protocol for the durable network store."""

    # -- profiles -----------------------------------------------------------

    async def upsert_profile(self, profile: ProfileSummary) -> None:
        """Insert or replace a profile summary. Idempotent."""
        ...

    async def get_profile(self, profile_id: str) -> ProfileSummary | None:
        """Retrieve one profile summary."""
        ...

    # -- edges --------------------------------------------------------------

    async def get_edge(self, edge_id: str) -> NetworkEdge | None:
        """Retrieve an edge by id."""
        ...

    async def edges_for_profile(
        self,
        profile_id: str,
        status: EdgeStatus | None = None,
    ) -> list[NetworkEdge]:
        """All edges the profile participates in, optionally filtered by status."""
        ...

    async def update_edge(self, edge: NetworkEdge) -> NetworkEdge:
        """Write mutable edge fields if the stored version equals ``edge.version``.

        Returns the stored edge with its version bumped. Raises
        ``ConflictError`` on a version mismatch and ``NotFoundError`` when
        the edge does not exist.
        """
        ...

    # -- signals ------------------------------------------------------------

    async def append_signal(self, signal: TrustSignal) -> TrustSignal:
        """Append a signal to its edge. Raises ``NotFoundError`` for unknown edges."""
        ...

    async def get_signals(self, edge_id: str, now: datetime) -> list[TrustSignal]:
        """Non-expired signals of an edge, heaviest first."""
        ...

    # -- requests -----------------------------------------------------------

    async def create_request(self, request: ConnectionRequest, now: datetime) -> ConnectionRequest:
        """Persist a new pending request.

        A pending request for the same ordered pair that is already past its
        TTL is expired first. A live one raises ``ConflictError``.
        """
        ...

    async def get_request(self, request_id: str) -> ConnectionRequest | None:
        """Retrieve a request by id."""
        ...

    async def pending_requests_for(self, profile_id: str, now: datetime) -> list[ConnectionRequest]:
        """Live pending requests addressed to ``profile_id``, newest first."""
        ...

    async def pending_request_peers(self, profile_id: str, now: datetime) -> set[str]:
        """Profiles with a live pending request to or from ``profile_id``."""
        ...

    async def accept_request(
        self,
        request_id: str,
        now: datetime,
        new_edge: NetworkEdge,
        intro_signal: TrustSignal | None = None,
    ) -> tuple[ConnectionRequest, NetworkEdge] | None:
        """Atomically claim a live pending request and upsert its edge.

        ``new_edge`` is used only when no edge exists on the pair; an existing
        edge is reactivated instead. A blocked pair raises InvalidStateError
        and leaves the request pending. ``intro_signal`` (if any) is attached
        to whichever edge results, in the same transaction. Returns None when
        the request is not claimable (missing, not pending, or expired).
        """
        ...

    async def respond_request(
        self,
        request_id: str,
        status: RequestStatus,
        now: datetime,
    ) -> ConnectionRequest | None:
        """Move a pending request to a terminal status. None if not pending."""
        ...

    async def expire_requests(self, now: datetime) -> int:
        """Expire every pending request past its TTL. Returns the count."""
        ...

    # -- feedback -----------------------------------------------------------

    async def append_feedback(self, feedback: InteractionFeedback) -> InteractionFeedback:
        """Record a feedback event. Append-only."""
        ...

    # -- lifecycle ----------------------------------------------------------

    async def get_stats(self) -> NetworkStats:
        """Store-wide counts."""
        ...

    async def ping(self) -> bool:
        """True when the backing store is reachable."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
