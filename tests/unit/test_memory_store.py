"""Unit tests for InMemoryNetworkStore semantics shared with the Neo4j adapter."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tests.fixtures.network import (
    FIXED_NOW,
    make_edge,
    make_profile,
    make_request,
    make_signal,
)
from trust_graph.domain.errors import ConflictError, InvalidStateError, NotFoundError
from trust_graph.domain.models import EdgeStatus, RequestStatus, SignalType


class TestProfiles:
    async def test_get_profile(self, store) -> None:
        await store.upsert_profile(make_profile("a", domains=["ai"]))
        assert (await store.get_profile("a")).domains == ["ai"]
        assert await store.get_profile("ghost") is None


class TestEdges:
    async def test_pair_uniqueness_ignores_direction(self, store) -> None:
        store.insert_edge(make_edge("a", "b"))
        with pytest.raises(ConflictError):
            store.insert_edge(make_edge("b", "a"))

    async def test_edge_between_either_order(self, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        assert (await store.edge_between("b", "a")).edge_id == edge.edge_id

    async def test_version_compare_and_swap(self, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        first = await store.update_edge(edge.model_copy(update={"strength": 0.9}))
        assert first.version == 1

        with pytest.raises(ConflictError):
            await store.update_edge(edge.model_copy(update={"strength": 0.1}))

        assert (await store.get_edge(edge.edge_id)).strength == 0.9

    async def test_update_unknown_edge(self, store) -> None:
        with pytest.raises(NotFoundError):
            await store.update_edge(make_edge("a", "b"))

    async def test_returned_records_are_copies(self, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        fetched = await store.get_edge(edge.edge_id)
        fetched.trust = 0.0
        assert (await store.get_edge(edge.edge_id)).trust == 0.5

    async def test_active_neighbors_sorted_and_filtered(self, store) -> None:
        store.insert_edge(make_edge("a", "c"))
        store.insert_edge(make_edge("b", "a"))
        store.insert_edge(make_edge("a", "d", status=EdgeStatus.BLOCKED))
        assert await store.active_neighbors("a") == ["b", "c"]


class TestSignals:
    async def test_heaviest_first_and_expiry(self, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        await store.append_signal(make_signal(edge.edge_id, weight=0.3))
        await store.append_signal(make_signal(edge.edge_id, SignalType.ENDORSEMENT, 0.8))
        await store.append_signal(
            make_signal(edge.edge_id, weight=1.0, expires_at=FIXED_NOW + timedelta(days=1))
        )

        now = await store.get_signals(edge.edge_id, FIXED_NOW)
        later = await store.get_signals(edge.edge_id, FIXED_NOW + timedelta(days=1))

        assert [s.weight for s in now] == [1.0, 0.8, 0.3]
        assert [s.weight for s in later] == [0.8, 0.3]

    async def test_unknown_edge(self, store) -> None:
        with pytest.raises(NotFoundError):
            await store.append_signal(make_signal("missing"))


class TestRequests:
    async def test_one_pending_per_ordered_pair(self, store) -> None:
        await store.create_request(make_request("a", "b"), FIXED_NOW)
        with pytest.raises(ConflictError):
            await store.create_request(make_request("a", "b"), FIXED_NOW)
        await store.create_request(make_request("b", "a"), FIXED_NOW)

    async def test_accept_is_single_shot(self, store) -> None:
        request = await store.create_request(make_request("a", "b"), FIXED_NOW)
        edge = make_edge("a", "b", version=7)

        first = await store.accept_request(request.request_id, FIXED_NOW, edge)
        second = await store.accept_request(request.request_id, FIXED_NOW, edge)

        assert first is not None
        accepted, created = first
        assert accepted.status == RequestStatus.ACCEPTED
        assert created.version == 0
        assert second is None

    async def test_accept_refuses_blocked_pair(self, store) -> None:
        blocked = store.insert_edge(make_edge("b", "a", status=EdgeStatus.BLOCKED))
        request = await store.create_request(make_request("a", "b"), FIXED_NOW)

        with pytest.raises(InvalidStateError):
            await store.accept_request(request.request_id, FIXED_NOW, make_edge("a", "b"))

        assert (await store.get_edge(blocked.edge_id)).status == EdgeStatus.BLOCKED
        assert (await store.get_request(request.request_id)).status == RequestStatus.PENDING

    async def test_accept_expired_returns_none(self, store) -> None:
        request = await store.create_request(make_request("a", "b"), FIXED_NOW)
        later = FIXED_NOW + timedelta(days=30)

        assert await store.accept_request(request.request_id, later, make_edge("a", "b")) is None
        assert (await store.get_request(request.request_id)).status == RequestStatus.EXPIRED

    async def test_respond_only_from_pending(self, store) -> None:
        request = await store.create_request(make_request("a", "b"), FIXED_NOW)
        assert await store.respond_request(request.request_id, RequestStatus.DECLINED, FIXED_NOW)
        assert (
            await store.respond_request(request.request_id, RequestStatus.EXPIRED, FIXED_NOW)
            is None
        )

    async def test_pending_peers_both_directions(self, store) -> None:
        await store.create_request(make_request("a", "b"), FIXED_NOW)
        await store.create_request(make_request("c", "a"), FIXED_NOW)
        await store.create_request(make_request("b", "c"), FIXED_NOW)
        assert await store.pending_request_peers("a", FIXED_NOW) == {"b", "c"}


class TestStats:
    async def test_counts(self, store) -> None:
        await store.upsert_profile(make_profile("a"))
        await store.upsert_profile(make_profile("b"))
        edge = store.insert_edge(make_edge("a", "b"))
        store.insert_edge(make_edge("a", "c", status=EdgeStatus.REMOVED))
        await store.append_signal(make_signal(edge.edge_id))
        await store.create_request(make_request("b", "c"), FIXED_NOW)

        stats = await store.get_stats()

        assert stats.profiles == 2
        assert stats.edges_by_status == {"active": 1, "removed": 1}
        assert stats.signals == 1
        assert stats.pending_requests == 1
        assert stats.feedback == 0
        assert await store.ping() is True
