"""Network decision engine.

Evaluated per call, no persisted state:
  1. no target             -> hold, confidence 0
  2. active edge exists    -> do, confidence 100 (short-circuit, no scoring)
  3. otherwise score the signals already recorded on the pair's edge and
     look for two-hop introduction paths
  4. total >= do_threshold -> do; total >= consider_threshold or a path
     exists -> consider; else hold

Every decision carries at least one reason.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from trust_graph.domain.models import (
    DecisionReason,
    EdgeStatus,
    NetworkDecision,
    ReasonType,
    Recommendation,
)
from trust_graph.domain.paths import find_introduction_paths
from trust_graph.domain.trust import score_signals

if TYPE_CHECKING:
    from collections.abc import Mapping

    from trust_graph.domain.models import IntroductionPath, NetworkIntent, TrustBreakdown
    from trust_graph.ports.network_store import NetworkStore
    from trust_graph.settings import DecisionSettings

REASON_NO_TARGET = "no target specified"
REASON_ALREADY_CONNECTED = "already connected"
REASON_MUTUALS = "you share mutual connections"
REASON_COLLABORATION = "shared collaboration history"
REASON_SIGNALS = "trust signals on record for this pair"
REASON_NOTHING_YET = "no shared connections or trust signals yet"


def recommend(
    total: float,
    has_path: bool,
    do_threshold: float = 0.7,
    consider_threshold: float = 0.4,
) -> Recommendation:
    """Map total trust and path availability to a recommendation."""
    if total >= do_threshold:
        return Recommendation.DO
    if total >= consider_threshold or has_path:
        return Recommendation.CONSIDER
    return Recommendation.HOLD


def build_reasons(
    breakdown: TrustBreakdown,
    paths: list[IntroductionPath],
    mutual_reason_threshold: float = 0.1,
) -> list[DecisionReason]:
    """Explainability reasons, in a fixed order. Never returns an empty list."""
    reasons: list[DecisionReason] = []
    if breakdown.mutuals > mutual_reason_threshold:
        reasons.append(DecisionReason(type=ReasonType.MUTUAL, message=REASON_MUTUALS))
    if breakdown.collaboration > 0:
        reasons.append(DecisionReason(type=ReasonType.HISTORY, message=REASON_COLLABORATION))
    if paths:
        reasons.append(
            DecisionReason(
                type=ReasonType.TRUST,
                message=f"introduction via {paths[0].via_profile_name} is recommended",
            )
        )
    if not reasons:
        message = REASON_SIGNALS if breakdown.total > 0 else REASON_NOTHING_YET
        reasons.append(DecisionReason(type=ReasonType.TRUST, message=message))
    return reasons


async def decide(
    store: NetworkStore,
    from_profile_id: str,
    intent: NetworkIntent | None,
    target_profile_id: str | None,
    settings: DecisionSettings,
    weights: Mapping[str, float] | None = None,
    now: datetime | None = None,
) -> NetworkDecision:
    """Produce an explainable recommendation for acting on ``target_profile_id``."""
    if now is None:
        now = datetime.now(UTC)

    if not target_profile_id:
        return NetworkDecision(
            recommendation=Recommendation.HOLD,
            confidence=0,
            reasons=[DecisionReason(type=ReasonType.TRUST, message=REASON_NO_TARGET)],
            intent=intent,
        )

    existing = await store.edge_between(from_profile_id, target_profile_id)
    if existing is not None and existing.status == EdgeStatus.ACTIVE:
        return NetworkDecision(
            recommendation=Recommendation.DO,
            confidence=100,
            reasons=[DecisionReason(type=ReasonType.TRUST, message=REASON_ALREADY_CONNECTED)],
            intent=intent,
        )

    signals = await store.get_signals(existing.edge_id, now) if existing is not None else []
    breakdown = score_signals(signals, weights=weights, now=now)
    paths = await find_introduction_paths(
        store, from_profile_id, target_profile_id, k=settings.max_paths
    )

    recommendation = recommend(
        breakdown.total,
        bool(paths),
        do_threshold=settings.do_threshold,
        consider_threshold=settings.consider_threshold,
    )
    reasons = build_reasons(
        breakdown, paths, mutual_reason_threshold=settings.mutual_reason_threshold
    )

    return NetworkDecision(
        recommendation=recommendation,
        confidence=round(breakdown.total * 100),
        reasons=reasons,
        suggested_path=paths or None,
        trust_breakdown=breakdown,
        intent=intent,
    )
