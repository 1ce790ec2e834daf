"""Unit tests for edge status changes, trust signals and connection listings."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tests.fixtures.network import FIXED_NOW, make_edge, make_profile
from trust_graph.domain.errors import InvalidStateError, NotFoundError, ValidationError
from trust_graph.domain.lifecycle import check_edge_transition
from trust_graph.domain.models import EdgeStatus, SignalType


class TestCheckEdgeTransition:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (EdgeStatus.ACTIVE, EdgeStatus.BLOCKED),
            (EdgeStatus.ACTIVE, EdgeStatus.REMOVED),
            (EdgeStatus.PENDING, EdgeStatus.REMOVED),
            (EdgeStatus.REMOVED, EdgeStatus.BLOCKED),
        ],
    )
    def test_allowed(self, current: EdgeStatus, target: EdgeStatus) -> None:
        check_edge_transition(make_edge("a", "b", status=current), target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (EdgeStatus.BLOCKED, EdgeStatus.REMOVED),
            (EdgeStatus.BLOCKED, EdgeStatus.BLOCKED),
            (EdgeStatus.REMOVED, EdgeStatus.REMOVED),
            (EdgeStatus.ACTIVE, EdgeStatus.ACTIVE),
        ],
    )
    def test_rejected(self, current: EdgeStatus, target: EdgeStatus) -> None:
        with pytest.raises(InvalidStateError):
            check_edge_transition(make_edge("a", "b", status=current), target)


class TestStatusChanges:
    async def test_block(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))

        blocked = await service.block_edge(edge.edge_id, "b")

        assert blocked.status == EdgeStatus.BLOCKED
        assert blocked.version == 1
        assert await store.active_neighbors("a") == []

    async def test_remove_then_block(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        await service.remove_edge(edge.edge_id, "a")
        blocked = await service.block_edge(edge.edge_id, "a")
        assert blocked.status == EdgeStatus.BLOCKED

    async def test_blocked_is_final(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b", status=EdgeStatus.BLOCKED))
        with pytest.raises(InvalidStateError):
            await service.remove_edge(edge.edge_id, "a")

    async def test_non_participant(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        with pytest.raises(NotFoundError):
            await service.block_edge(edge.edge_id, "c")

    async def test_removed_edges_leave_health_totals(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        await service.remove_edge(edge.edge_id, "a")
        report = await service.get_network_health_score("a")
        assert report.total_connections == 0


class TestAddTrustSignal:
    async def test_recomputes_edge_trust(self, service, store, clock) -> None:
        edge = store.insert_edge(make_edge("a", "b"))

        await service.add_trust_signal(edge.edge_id, "endorsement", 0.5, evidence="vouched")
        await service.add_trust_signal(edge.edge_id, SignalType.COLLABORATION, 0.7)

        updated = await store.get_edge(edge.edge_id)
        assert updated.trust == pytest.approx(0.72)
        assert updated.version == 2
        assert len(await store.get_signals(edge.edge_id, clock())) == 2

    async def test_amplified_trust_is_capped(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        await service.add_trust_signal(edge.edge_id, "shared_project", 0.9)
        assert (await store.get_edge(edge.edge_id)).trust == 1.0

    async def test_expired_signal_leaves_prior_trust(self, service, store, clock) -> None:
        edge = store.insert_edge(make_edge("a", "b", trust=0.4))
        await service.add_trust_signal(
            edge.edge_id, "freshness", 1.0, expires_at=FIXED_NOW - timedelta(days=1)
        )
        assert (await store.get_edge(edge.edge_id)).trust == 0.4
        assert await store.get_signals(edge.edge_id, clock()) == []

    @pytest.mark.parametrize("weight", [-0.1, 1.1])
    async def test_weight_out_of_range(self, service, store, weight: float) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        with pytest.raises(ValidationError) as exc_info:
            await service.add_trust_signal(edge.edge_id, "endorsement", weight)
        assert exc_info.value.field == "weight"

    async def test_unknown_signal_type(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        with pytest.raises(ValidationError):
            await service.add_trust_signal(edge.edge_id, "gossip", 0.5)

    async def test_unknown_edge(self, service) -> None:
        with pytest.raises(NotFoundError):
            await service.add_trust_signal("missing", "endorsement", 0.5)


class TestGetConnections:
    async def test_sorted_with_profiles_and_mutuals(self, service, store, clock) -> None:
        for pid in ["me", "b", "c"]:
            await store.upsert_profile(make_profile(pid))
        store.insert_edge(make_edge("me", "b", trust=0.6))
        store.insert_edge(make_edge("c", "me", trust=0.9))
        store.insert_edge(make_edge("b", "c"))
        store.insert_edge(make_edge("me", "d", status=EdgeStatus.REMOVED))

        connections = await service.get_connections("me")

        assert [c.profile.profile_id for c in connections] == ["c", "b"]
        assert [c.mutual_count for c in connections] == [1, 1]
        assert connections[0].profile.name == "Name c"

    async def test_ties_broken_by_recency(self, service, store) -> None:
        store.insert_edge(make_edge("me", "old"))
        store.insert_edge(make_edge("me", "new", updated_at=FIXED_NOW + timedelta(hours=1)))

        connections = await service.get_connections("me")

        assert [c.profile.profile_id for c in connections] == ["new", "old"]
        assert connections[0].profile.name == "new"

    async def test_empty(self, service) -> None:
        assert await service.get_connections("nobody") == []

    async def test_get_edge(self, service, store) -> None:
        edge = store.insert_edge(make_edge("a", "b"))
        assert (await service.get_edge(edge.edge_id)).edge_id == edge.edge_id
        with pytest.raises(NotFoundError):
            await service.get_edge("missing")
