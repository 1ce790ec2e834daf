"""In-memory NetworkStore adapter.

Dictionary-backed implementation of the ``NetworkStore`` protocol with the
same semantics as the Neo4j adapter: unordered pair uniqueness, at most one
pending request per ordered pair, version compare-and-swap on edge writes and
atomic request acceptance. Used by the ``memory`` backend and the test suite.

Records are copied on the way in and out so callers never share mutable state
with the store.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

import structlog

from trust_graph.domain.errors import ConflictError, InvalidStateError, NotFoundError
from trust_graph.domain.models import (
    EdgeStatus,
    NetworkStats,
    RequestStatus,
    pair_key,
)

if TYPE_CHECKING:
    from datetime import datetime

    from trust_graph.domain.models import (
        ConnectionRequest,
        InteractionFeedback,
        NetworkEdge,
        ProfileSummary,
        TrustSignal,
    )

log = structlog.get_logger(__name__)


class InMemoryNetworkStore:
    """NetworkStore implementation backed by plain dictionaries.

    Satisfies the ``trust_graph.ports.network_store.NetworkStore`` protocol.
    Every method runs without awaiting, so each call is atomic with respect
    to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, ProfileSummary] = {}
        self._edges: dict[str, NetworkEdge] = {}
        self._edge_by_pair: dict[str, str] = {}
        self._signals: dict[str, list[TrustSignal]] = {}
        self._requests: dict[str, ConnectionRequest] = {}
        self._pending_by_pair: dict[tuple[str, str], str] = {}
        self._feedback: list[InteractionFeedback] = []

    # -- profiles -----------------------------------------------------------

    async def upsert_profile(self, profile: ProfileSummary) -> None:
        self._profiles[profile.profile_id] = profile.model_copy(deep=True)

    async def get_profile(self, profile_id: str) -> ProfileSummary | None:
        profile = self._profiles.get(profile_id)
        return profile.model_copy(deep=True) if profile is not None else None

    async def get_profiles(self, profile_ids: list[str]) -> dict[str, ProfileSummary]:
        return {
            pid: self._profiles[pid].model_copy(deep=True)
            for pid in profile_ids
            if pid in self._profiles
        }

    # -- edges --------------------------------------------------------------

    async def get_edge(self, edge_id: str) -> NetworkEdge | None:
        edge = self._edges.get(edge_id)
        return edge.model_copy() if edge is not None else None

    async def edge_between(self, profile_a: str, profile_b: str) -> NetworkEdge | None:
        edge_id = self._edge_by_pair.get(pair_key(profile_a, profile_b))
        if edge_id is None:
            return None
        return self._edges[edge_id].model_copy()

    async def active_neighbors(self, profile_id: str) -> list[str]:
        return sorted(
            edge.other_end(profile_id)
            for edge in self._edges.values()
            if edge.status == EdgeStatus.ACTIVE and edge.involves(profile_id)
        )

    async def edges_for_profile(
        self,
        profile_id: str,
        status: EdgeStatus | None = None,
    ) -> list[NetworkEdge]:
        return [
            edge.model_copy()
            for edge in self._edges.values()
            if edge.involves(profile_id) and (status is None or edge.status == status)
        ]

    def insert_edge(self, edge: NetworkEdge) -> NetworkEdge:
        """Load an edge directly, bypassing the request flow. Used for seeding."""
        key = edge.pair_key
        if key in self._edge_by_pair:
            msg = f"An edge already exists for pair {key}"
            raise ConflictError(msg)
        self._edges[edge.edge_id] = edge.model_copy()
        self._edge_by_pair[key] = edge.edge_id
        return edge

    async def update_edge(self, edge: NetworkEdge) -> NetworkEdge:
        stored = self._edges.get(edge.edge_id)
        if stored is None:
            msg = f"Edge {edge.edge_id} not found"
            raise NotFoundError(msg)
        if stored.version != edge.version:
            log.info(
                "edge_version_conflict",
                edge_id=edge.edge_id,
                expected=edge.version,
                actual=stored.version,
            )
            msg = f"Edge {edge.edge_id} was modified concurrently"
            raise ConflictError(msg)
        updated = stored.model_copy(
            update={
                "edge_type": edge.edge_type,
                "context": edge.context,
                "strength": edge.strength,
                "trust": edge.trust,
                "status": edge.status,
                "introduced_by": edge.introduced_by,
                "introduction_message": edge.introduction_message,
                "updated_at": edge.updated_at,
                "last_interaction_at": edge.last_interaction_at,
                "version": stored.version + 1,
            }
        )
        self._edges[edge.edge_id] = updated
        return updated.model_copy()

    # -- signals ------------------------------------------------------------

    async def append_signal(self, signal: TrustSignal) -> TrustSignal:
        if signal.edge_id not in self._edges:
            msg = f"Edge {signal.edge_id} not found"
            raise NotFoundError(msg)
        self._signals.setdefault(signal.edge_id, []).append(signal.model_copy())
        return signal

    async def get_signals(self, edge_id: str, now: datetime) -> list[TrustSignal]:
        live = [s.model_copy() for s in self._signals.get(edge_id, []) if s.is_active(now)]
        live.sort(key=lambda s: s.weight, reverse=True)
        return live

    # -- requests -----------------------------------------------------------

    def _expire_if_stale(self, request_id: str, now: datetime) -> bool:
        request = self._requests[request_id]
        if request.status != RequestStatus.PENDING or not request.is_expired(now):
            return False
        self._requests[request_id] = request.model_copy(
            update={"status": RequestStatus.EXPIRED, "responded_at": now}
        )
        self._pending_by_pair.pop((request.from_profile_id, request.to_profile_id), None)
        return True

    async def create_request(self, request: ConnectionRequest, now: datetime) -> ConnectionRequest:
        ordered = (request.from_profile_id, request.to_profile_id)
        existing_id = self._pending_by_pair.get(ordered)
        if existing_id is not None and not self._expire_if_stale(existing_id, now):
            msg = "A pending connection request already exists for this pair"
            raise ConflictError(msg)
        self._requests[request.request_id] = request.model_copy()
        self._pending_by_pair[ordered] = request.request_id
        return request

    async def get_request(self, request_id: str) -> ConnectionRequest | None:
        request = self._requests.get(request_id)
        return request.model_copy() if request is not None else None

    async def pending_requests_for(self, profile_id: str, now: datetime) -> list[ConnectionRequest]:
        pending = [
            r.model_copy()
            for r in self._requests.values()
            if r.to_profile_id == profile_id
            and r.status == RequestStatus.PENDING
            and not r.is_expired(now)
        ]
        pending.sort(key=lambda r: r.created_at, reverse=True)
        return pending

    async def pending_request_peers(self, profile_id: str, now: datetime) -> set[str]:
        peers: set[str] = set()
        for from_id, to_id in self._pending_by_pair:
            request = self._requests[self._pending_by_pair[(from_id, to_id)]]
            if request.is_expired(now):
                continue
            if from_id == profile_id:
                peers.add(to_id)
            elif to_id == profile_id:
                peers.add(from_id)
        return peers

    async def accept_request(
        self,
        request_id: str,
        now: datetime,
        new_edge: NetworkEdge,
        intro_signal: TrustSignal | None = None,
    ) -> tuple[ConnectionRequest, NetworkEdge] | None:
        request = self._requests.get(request_id)
        if request is None or request.status != RequestStatus.PENDING:
            return None
        if self._expire_if_stale(request_id, now):
            return None

        key = pair_key(request.from_profile_id, request.to_profile_id)
        existing_id = self._edge_by_pair.get(key)
        if existing_id is not None and self._edges[existing_id].status == EdgeStatus.BLOCKED:
            msg = (
                f"Connection between {request.from_profile_id} and "
                f"{request.to_profile_id} is blocked"
            )
            raise InvalidStateError(msg)

        accepted = request.model_copy(
            update={"status": RequestStatus.ACCEPTED, "responded_at": now}
        )
        self._requests[request_id] = accepted
        self._pending_by_pair.pop((request.from_profile_id, request.to_profile_id), None)

        if existing_id is None:
            edge = new_edge.model_copy(update={"version": 0})
            self._edges[edge.edge_id] = edge
            self._edge_by_pair[key] = edge.edge_id
        else:
            stored = self._edges[existing_id]
            edge = stored.model_copy(
                update={
                    "status": EdgeStatus.ACTIVE,
                    "edge_type": new_edge.edge_type,
                    "introduced_by": new_edge.introduced_by or stored.introduced_by,
                    "introduction_message": (
                        new_edge.introduction_message or stored.introduction_message
                    ),
                    "updated_at": now,
                    "version": stored.version + 1,
                }
            )
            self._edges[existing_id] = edge

        if intro_signal is not None:
            signal = intro_signal.model_copy(update={"edge_id": edge.edge_id})
            self._signals.setdefault(edge.edge_id, []).append(signal)

        return accepted.model_copy(), edge.model_copy()

    async def respond_request(
        self,
        request_id: str,
        status: RequestStatus,
        now: datetime,
    ) -> ConnectionRequest | None:
        request = self._requests.get(request_id)
        if request is None or request.status != RequestStatus.PENDING:
            return None
        updated = request.model_copy(update={"status": status, "responded_at": now})
        self._requests[request_id] = updated
        self._pending_by_pair.pop((request.from_profile_id, request.to_profile_id), None)
        return updated.model_copy()

    async def expire_requests(self, now: datetime) -> int:
        expired = 0
        for request_id in list(self._pending_by_pair.values()):
            if self._expire_if_stale(request_id, now):
                expired += 1
        return expired

    # -- feedback -----------------------------------------------------------

    async def append_feedback(self, feedback: InteractionFeedback) -> InteractionFeedback:
        if feedback.edge_id not in self._edges:
            msg = f"Edge {feedback.edge_id} not found"
            raise NotFoundError(msg)
        self._feedback.append(feedback.model_copy())
        return feedback

    # -- lifecycle ----------------------------------------------------------

    async def get_stats(self) -> NetworkStats:
        by_status = Counter(str(edge.status) for edge in self._edges.values())
        return NetworkStats(
            profiles=len(self._profiles),
            edges_by_status=dict(by_status),
            signals=sum(len(signals) for signals in self._signals.values()),
            pending_requests=len(self._pending_by_pair),
            feedback=len(self._feedback),
        )

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass
