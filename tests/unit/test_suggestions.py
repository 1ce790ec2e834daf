"""Unit tests for trust_graph.domain.suggestions and the suggestion service call."""

from __future__ import annotations

import pytest

from tests.fixtures.network import make_edge, make_profile, make_request
from trust_graph.domain.errors import ValidationError
from trust_graph.domain.models import EdgeStatus, SuggestionBadge
from trust_graph.domain.suggestions import assign_badge, suggest
from trust_graph.settings import SuggestionSettings


class TestAssignBadge:
    @pytest.mark.parametrize(
        ("trust", "mutuals", "expected"),
        [
            (0.7, 5, SuggestionBadge.HIGH_TRUST),
            (0.69, 3, SuggestionBadge.MUTUAL_HEAVY),
            (0.6, 2, SuggestionBadge.GOOD_FIT),
            (0.5, 1, SuggestionBadge.GOOD_FIT),
            (0.49, 2, None),
        ],
    )
    def test_first_match_wins(
        self, trust: float, mutuals: int, expected: SuggestionBadge | None
    ) -> None:
        assert assign_badge(trust, mutuals) == expected


async def _profiles(store, *ids: str) -> None:
    for pid in ids:
        await store.upsert_profile(make_profile(pid))


class TestSuggest:
    """Friend-of-friend ranking over the in-memory store."""

    async def test_ranks_by_trust_then_mutuals_then_id(self, store) -> None:
        await _profiles(store, "me", "b1", "b2", "b3", "w", "x", "y", "z")
        store.insert_edge(make_edge("me", "b1", trust=0.9))
        store.insert_edge(make_edge("me", "b2", trust=0.6))
        store.insert_edge(make_edge("me", "b3", trust=0.6))
        # z: via b1 -> trust 0.9, mutuals 1
        store.insert_edge(make_edge("b1", "z", trust=0.4))
        # x: via b2 and b3 -> trust 0.6, mutuals 2
        store.insert_edge(make_edge("b2", "x", trust=0.4))
        store.insert_edge(make_edge("b3", "x", trust=0.4))
        # w and y: one path each at 0.6, tie broken by id
        store.insert_edge(make_edge("b2", "w", trust=0.4))
        store.insert_edge(make_edge("b3", "y", trust=0.4))

        results = await suggest(store, "me", 10, SuggestionSettings())

        assert [s.profile.profile_id for s in results] == ["z", "x", "w", "y"]
        assert [s.mutual_count for s in results] == [1, 2, 1, 1]
        assert results[0].trust_score == pytest.approx(0.9)
        assert results[0].badge == SuggestionBadge.HIGH_TRUST
        assert results[1].badge == SuggestionBadge.GOOD_FIT

    async def test_trust_is_mean_over_first_hop_edges(self, store) -> None:
        await _profiles(store, "me", "b1", "b2", "x")
        store.insert_edge(make_edge("me", "b1", trust=1.0))
        store.insert_edge(make_edge("b1", "x", trust=0.6))
        store.insert_edge(make_edge("me", "b2", trust=0.2))
        store.insert_edge(make_edge("b2", "x", trust=0.2))

        results = await suggest(store, "me", 10, SuggestionSettings())

        assert results[0].trust_score == pytest.approx(0.6)
        assert results[0].suggested_path is not None
        assert results[0].suggested_path.via_profile_id == "b1"
        assert results[0].suggested_path.trust_score == pytest.approx(0.8)

    async def test_weak_second_hop_does_not_lower_trust(self, store) -> None:
        await _profiles(store, "me", "b", "x")
        store.insert_edge(make_edge("me", "b", trust=0.9))
        store.insert_edge(make_edge("b", "x", trust=0.1))

        results = await suggest(store, "me", 10, SuggestionSettings())

        assert results[0].trust_score == pytest.approx(0.9)
        assert results[0].badge == SuggestionBadge.HIGH_TRUST
        assert results[0].suggested_path.trust_score == pytest.approx(0.5)

    async def test_reasons(self, store) -> None:
        await _profiles(store, "me", "b", "x")
        store.insert_edge(make_edge("me", "b"))
        store.insert_edge(make_edge("b", "x"))

        results = await suggest(store, "me", 10, SuggestionSettings())

        messages = [r.message for r in results[0].reasons]
        assert messages == ["1 mutual connection", "introduction via Name b"]

    async def test_excludes_caller_and_neighbors(self, store) -> None:
        await _profiles(store, "me", "b", "c")
        store.insert_edge(make_edge("me", "b"))
        store.insert_edge(make_edge("me", "c"))
        store.insert_edge(make_edge("b", "c"))

        assert await suggest(store, "me", 10, SuggestionSettings()) == []

    async def test_unknown_profiles_dropped(self, store) -> None:
        await _profiles(store, "me", "b")
        store.insert_edge(make_edge("me", "b"))
        store.insert_edge(make_edge("b", "ghost"))

        assert await suggest(store, "me", 10, SuggestionSettings()) == []

    async def test_limit(self, store) -> None:
        await _profiles(store, "me", "b", *[f"c{i}" for i in range(5)])
        store.insert_edge(make_edge("me", "b"))
        for i in range(5):
            store.insert_edge(make_edge("b", f"c{i}"))

        results = await suggest(store, "me", 2, SuggestionSettings())

        assert [s.profile.profile_id for s in results] == ["c0", "c1"]

    async def test_inactive_second_hop_ignored(self, store) -> None:
        await _profiles(store, "me", "b", "x")
        store.insert_edge(make_edge("me", "b"))
        store.insert_edge(make_edge("b", "x", status=EdgeStatus.PENDING))

        assert await suggest(store, "me", 10, SuggestionSettings()) == []


class TestServiceSuggestions:
    """Exclusions and limits applied by the service."""

    async def _two_hop(self, store) -> None:
        await _profiles(store, "me", "b", "x", "y")
        store.insert_edge(make_edge("me", "b"))
        store.insert_edge(make_edge("b", "x"))
        store.insert_edge(make_edge("b", "y"))

    async def test_excludes_any_existing_edge(self, service, store) -> None:
        await self._two_hop(store)
        store.insert_edge(make_edge("me", "x", status=EdgeStatus.REMOVED))

        results = await service.get_connection_suggestions("me")

        assert [s.profile.profile_id for s in results] == ["y"]

    @pytest.mark.parametrize("direction", ["outgoing", "incoming"])
    async def test_excludes_pending_requests(self, service, store, clock, direction) -> None:
        await self._two_hop(store)
        pair = ("me", "x") if direction == "outgoing" else ("x", "me")
        await store.create_request(make_request(*pair), clock())

        results = await service.get_connection_suggestions("me")

        assert [s.profile.profile_id for s in results] == ["y"]

    @pytest.mark.parametrize("limit", [0, 51])
    async def test_limit_out_of_range(self, service, limit: int) -> None:
        with pytest.raises(ValidationError):
            await service.get_connection_suggestions("me", limit=limit)

    async def test_default_limit(self, service, store) -> None:
        await _profiles(store, "me", "b", *[f"c{i:02d}" for i in range(12)])
        store.insert_edge(make_edge("me", "b"))
        for i in range(12):
            store.insert_edge(make_edge("b", f"c{i:02d}"))

        results = await service.get_connection_suggestions("me")

        assert len(results) == 10
