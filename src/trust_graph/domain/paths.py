"""Two-hop introduction path finding.

A path is from -> via -> to where both edges are active. Paths are scored
by the mean trust of their two edges and ranked by score (desc) then via
profile id (asc) so results are reproducible. Nothing deeper than two hops
is ever searched.

Written only against the ``GraphReader`` adjacency protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from trust_graph.domain.models import EdgeStatus, IntroductionPath

if TYPE_CHECKING:
    from trust_graph.domain.models import NetworkEdge
    from trust_graph.ports.network_store import GraphReader

PATH_REASON = "high-trust introduction path"


def path_score(first: NetworkEdge, second: NetworkEdge) -> float:
    """Mean trust of the two edges on a path."""
    return (first.trust + second.trust) / 2


def rank_vias(scored: dict[str, float], k: int) -> list[tuple[str, float]]:
    """Order (via, score) pairs by score desc then via id asc, keep ``k``."""
    if k <= 0:
        return []
    ranked = sorted(scored.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:k]


async def find_introduction_paths(
    graph: GraphReader,
    from_profile_id: str,
    to_profile_id: str,
    k: int = 3,
) -> list[IntroductionPath]:
    """Find up to ``k`` introduction paths between two profiles."""
    if k <= 0 or from_profile_id == to_profile_id:
        return []

    from_neighbors = set(await graph.active_neighbors(from_profile_id))
    to_neighbors = set(await graph.active_neighbors(to_profile_id))
    vias = sorted((from_neighbors & to_neighbors) - {from_profile_id, to_profile_id})

    scored: dict[str, float] = {}
    for via in vias:
        first = await graph.edge_between(from_profile_id, via)
        second = await graph.edge_between(via, to_profile_id)
        if first is None or second is None:
            continue
        if first.status != EdgeStatus.ACTIVE or second.status != EdgeStatus.ACTIVE:
            continue
        scored[via] = path_score(first, second)

    ranked = rank_vias(scored, k)
    if not ranked:
        return []

    profiles = await graph.get_profiles([via for via, _ in ranked])
    return [
        IntroductionPath(
            via_profile_id=via,
            via_profile_name=profiles[via].name if via in profiles else via,
            trust_score=score,
            reason=PATH_REASON,
        )
        for via, score in ranked
    ]
