"""Unit tests for trust_graph.domain.paths."""

from __future__ import annotations

import pytest

from tests.fixtures.network import make_edge, make_profile
from trust_graph.domain.models import EdgeStatus
from trust_graph.domain.paths import PATH_REASON, find_introduction_paths, rank_vias


class TestRankVias:
    def test_score_desc_then_id_asc(self) -> None:
        ranked = rank_vias({"c": 0.5, "b": 0.7, "a": 0.5}, k=3)
        assert ranked == [("b", 0.7), ("a", 0.5), ("c", 0.5)]

    def test_truncates(self) -> None:
        assert rank_vias({"a": 0.1, "b": 0.2}, k=1) == [("b", 0.2)]

    def test_non_positive_k(self) -> None:
        assert rank_vias({"a": 0.1}, k=0) == []


class TestFindIntroductionPaths:
    """Two-hop path search over the in-memory store."""

    async def test_single_path_scored_by_mean_trust(self, store) -> None:
        await store.upsert_profile(make_profile("b", name="Bea"))
        store.insert_edge(make_edge("a", "b", trust=0.8))
        store.insert_edge(make_edge("b", "c", trust=0.6))

        paths = await find_introduction_paths(store, "a", "c")

        assert len(paths) == 1
        assert paths[0].via_profile_id == "b"
        assert paths[0].via_profile_name == "Bea"
        assert paths[0].trust_score == pytest.approx(0.7)
        assert paths[0].reason == PATH_REASON

    async def test_unknown_via_falls_back_to_id(self, store) -> None:
        store.insert_edge(make_edge("a", "b"))
        store.insert_edge(make_edge("b", "c"))
        paths = await find_introduction_paths(store, "a", "c")
        assert paths[0].via_profile_name == "b"

    async def test_ordering_and_k(self, store) -> None:
        for via, trust in [("v1", 0.5), ("v2", 0.9), ("v3", 0.5), ("v4", 0.2)]:
            store.insert_edge(make_edge("a", via, trust=trust))
            store.insert_edge(make_edge(via, "z", trust=trust))

        paths = await find_introduction_paths(store, "a", "z", k=3)

        assert [p.via_profile_id for p in paths] == ["v2", "v1", "v3"]

    async def test_inactive_edges_excluded(self, store) -> None:
        store.insert_edge(make_edge("a", "b"))
        store.insert_edge(make_edge("b", "c", status=EdgeStatus.BLOCKED))
        store.insert_edge(make_edge("a", "d", status=EdgeStatus.REMOVED))
        store.insert_edge(make_edge("d", "c"))

        assert await find_introduction_paths(store, "a", "c") == []

    async def test_endpoints_never_used_as_via(self, store) -> None:
        # Direct edge a-c: c is a's neighbor and a is c's neighbor.
        store.insert_edge(make_edge("a", "c"))
        store.insert_edge(make_edge("a", "b"))
        store.insert_edge(make_edge("b", "c"))

        paths = await find_introduction_paths(store, "a", "c")

        assert [p.via_profile_id for p in paths] == ["b"]

    async def test_no_three_hop_paths(self, store) -> None:
        store.insert_edge(make_edge("a", "b"))
        store.insert_edge(make_edge("b", "c"))
        store.insert_edge(make_edge("c", "d"))

        assert await find_introduction_paths(store, "a", "d") == []

    async def test_same_profile(self, store) -> None:
        store.insert_edge(make_edge("a", "b"))
        assert await find_introduction_paths(store, "a", "a") == []

    async def test_edge_direction_irrelevant(self, store) -> None:
        store.insert_edge(make_edge("b", "a", trust=0.4))
        store.insert_edge(make_edge("c", "b", trust=0.6))
        paths = await find_introduction_paths(store, "a", "c")
        assert paths[0].trust_score == pytest.approx(0.5)
