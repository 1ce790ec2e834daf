"""Friend-of-friend connection suggestions.

Candidates are profiles one active edge away from one of the caller's active
neighbors. For each candidate:

  - mutual_count = distinct shared first-hop neighbors
  - trust_score  = mean trust of the caller's edges to those shared neighbors;
                   the second hop only shapes the suggested introduction path

Ranking: trust_score desc, mutual_count desc, profile id asc.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from trust_graph.domain.models import (
    ConnectionSuggestion,
    DecisionReason,
    EdgeStatus,
    IntroductionPath,
    ReasonType,
    SuggestionBadge,
)
from trust_graph.domain.paths import PATH_REASON, path_score

if TYPE_CHECKING:
    from collections.abc import Collection

    from trust_graph.ports.network_store import GraphReader
    from trust_graph.settings import SuggestionSettings


@dataclass
class _Candidate:
    profile_id: str
    first_hop_trust: dict[str, float] = field(default_factory=dict)
    path_scores: dict[str, float] = field(default_factory=dict)

    @property
    def mutual_count(self) -> int:
        return len(self.path_scores)

    @property
    def trust_score(self) -> float:
        return sum(self.first_hop_trust.values()) / len(self.first_hop_trust)

    def best_via(self) -> tuple[str, float]:
        return min(self.path_scores.items(), key=lambda item: (-item[1], item[0]))


def assign_badge(
    trust_score: float,
    mutual_count: int,
    high_trust_threshold: float = 0.7,
    mutual_heavy_count: int = 3,
    good_fit_threshold: float = 0.5,
) -> SuggestionBadge | None:
    """First matching badge wins: high_trust, mutual_heavy, good_fit."""
    if trust_score >= high_trust_threshold:
        return SuggestionBadge.HIGH_TRUST
    if mutual_count >= mutual_heavy_count:
        return SuggestionBadge.MUTUAL_HEAVY
    if trust_score >= good_fit_threshold:
        return SuggestionBadge.GOOD_FIT
    return None


async def collect_candidates(
    graph: GraphReader,
    profile_id: str,
    excluded: Collection[str] = (),
) -> dict[str, _Candidate]:
    """Expand two hops out from ``profile_id`` over active edges."""
    first_hop = await graph.active_neighbors(profile_id)
    blocked = set(excluded) | {profile_id} | set(first_hop)

    candidates: dict[str, _Candidate] = {}
    for via in first_hop:
        first = await graph.edge_between(profile_id, via)
        if first is None or first.status != EdgeStatus.ACTIVE:
            continue
        for candidate_id in await graph.active_neighbors(via):
            if candidate_id in blocked:
                continue
            second = await graph.edge_between(via, candidate_id)
            if second is None or second.status != EdgeStatus.ACTIVE:
                continue
            candidate = candidates.setdefault(candidate_id, _Candidate(candidate_id))
            candidate.first_hop_trust[via] = first.trust
            candidate.path_scores[via] = path_score(first, second)
    return candidates


async def suggest(
    graph: GraphReader,
    profile_id: str,
    limit: int,
    settings: SuggestionSettings,
    excluded: Collection[str] = (),
) -> list[ConnectionSuggestion]:
    """Rank friend-of-friend candidates for ``profile_id``.

    ``excluded`` carries profiles that must never be suggested beyond the
    caller and its active neighbors (non-active edges, pending requests).
    """
    if limit <= 0:
        return []

    candidates = await collect_candidates(graph, profile_id, excluded)
    if not candidates:
        return []

    profiles = await graph.get_profiles(sorted(candidates))
    ranked = sorted(
        (c for c in candidates.values() if c.profile_id in profiles),
        key=lambda c: (-c.trust_score, -c.mutual_count, c.profile_id),
    )[:limit]

    via_ids = sorted({c.best_via()[0] for c in ranked})
    via_profiles = await graph.get_profiles(via_ids) if via_ids else {}

    suggestions: list[ConnectionSuggestion] = []
    for candidate in ranked:
        via_id, via_score = candidate.best_via()
        via_name = via_profiles[via_id].name if via_id in via_profiles else via_id
        mutuals = candidate.mutual_count
        label = "mutual connection" if mutuals == 1 else "mutual connections"
        trust_score = min(1.0, candidate.trust_score)
        suggestions.append(
            ConnectionSuggestion(
                profile=profiles[candidate.profile_id],
                trust_score=trust_score,
                mutual_count=mutuals,
                reasons=[
                    DecisionReason(type=ReasonType.MUTUAL, message=f"{mutuals} {label}"),
                    DecisionReason(type=ReasonType.TRUST, message=f"introduction via {via_name}"),
                ],
                suggested_path=IntroductionPath(
                    via_profile_id=via_id,
                    via_profile_name=via_name,
                    trust_score=via_score,
                    reason=PATH_REASON,
                ),
                badge=assign_badge(
                    trust_score,
                    mutuals,
                    high_trust_threshold=settings.high_trust_threshold,
                    mutual_heavy_count=settings.mutual_heavy_count,
                    good_fit_threshold=settings.good_fit_threshold,
                ),
            )
        )
    return suggestions
