"""Network health reporting.

Pure domain module, ZERO framework imports.

Summarizes one profile's edges:
  - total_connections: active and pending edges; blocked and removed ones
    are no longer connections
  - active_connections: active edges
  - average_trust / strength_score: means over active edges, 0 when none
  - diversity_score: distinct domains among active neighbors / ceiling, max 1
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from trust_graph.domain.models import EdgeStatus, NetworkHealthScore

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from trust_graph.domain.models import NetworkEdge, ProfileSummary
    from trust_graph.settings import HealthSettings

SUGGEST_GROW = "Grow your network: connect with more people you have worked with"
SUGGEST_DEEPEN = "Deepen trust: collaborate or exchange feedback with existing connections"
SUGGEST_DIVERSIFY = "Diversify: connect with people outside your usual domains"

_CONNECTED = frozenset({EdgeStatus.ACTIVE, EdgeStatus.PENDING})


def diversity_score(domains: set[str], ceiling: int = 5) -> float:
    if ceiling <= 0:
        return 0.0
    return min(1.0, len(domains) / ceiling)


def summarize_network(
    profile_id: str,
    edges: Sequence[NetworkEdge],
    neighbor_profiles: Mapping[str, ProfileSummary],
    settings: HealthSettings,
) -> NetworkHealthScore:
    """Build the health report for ``profile_id`` from its edges.

    ``neighbor_profiles`` maps counterpart ids to profile summaries; missing
    counterparts simply contribute no domains.
    """
    counted = [e for e in edges if e.status in _CONNECTED]
    active = [e for e in counted if e.status == EdgeStatus.ACTIVE]

    if active:
        average_trust = sum(e.trust for e in active) / len(active)
        strength = sum(e.strength for e in active) / len(active)
    else:
        average_trust = 0.0
        strength = 0.0

    domains: set[str] = set()
    for edge in active:
        profile = neighbor_profiles.get(edge.other_end(profile_id))
        if profile is not None:
            domains.update(profile.domains)
    diversity = diversity_score(domains, settings.diversity_ceiling)

    suggestions: list[str] = []
    if len(active) < settings.min_connections:
        suggestions.append(SUGGEST_GROW)
    if average_trust < settings.low_trust_threshold:
        suggestions.append(SUGGEST_DEEPEN)
    if diversity < settings.low_diversity_threshold:
        suggestions.append(SUGGEST_DIVERSIFY)

    return NetworkHealthScore(
        total_connections=len(counted),
        active_connections=len(active),
        average_trust=average_trust,
        diversity_score=diversity,
        strength_score=strength,
        suggestions=suggestions,
    )
