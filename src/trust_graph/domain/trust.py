"""Trust scoring.

Two related calculations live here and are deliberately kept apart:

  - Decision trust: signals are grouped into five components (mean weight
    per component), then combined with fixed weights:
      total = 0.35*collaboration + 0.20*mutuals + 0.20*endorsement
            + 0.15*interaction_quality + 0.10*freshness
  - Edge trust (persisted): mean weight of the edge's signals times an
    amplification factor, capped at 1.0. An edge without signals keeps
    whatever trust it already had.

Expired signals never contribute to either. Raw connection count is not an
input to anything in this module.

Pure Python + stdlib, ZERO framework imports.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from trust_graph.domain.models import SignalType, TrustBreakdown, TrustComponent
from trust_graph.settings import TRUST_AMPLIFICATION, TRUST_COMPONENT_WEIGHTS

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from trust_graph.domain.models import TrustSignal

# Each signal type feeds exactly one component.
SIGNAL_COMPONENTS: dict[str, TrustComponent] = {
    SignalType.COLLABORATION: TrustComponent.COLLABORATION,
    SignalType.SHARED_PROJECT: TrustComponent.COLLABORATION,
    SignalType.MUTUAL_OVERLAP: TrustComponent.MUTUALS,
    SignalType.MUTUAL_CONNECTION: TrustComponent.MUTUALS,
    SignalType.ENDORSEMENT: TrustComponent.ENDORSEMENT,
    SignalType.REPUTATION: TrustComponent.ENDORSEMENT,
    SignalType.INTERACTION_QUALITY: TrustComponent.INTERACTION_QUALITY,
    SignalType.INTRO_HISTORY: TrustComponent.INTERACTION_QUALITY,
    SignalType.FRESHNESS: TrustComponent.FRESHNESS,
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def active_signals(
    signals: Iterable[TrustSignal],
    now: datetime | None = None,
) -> list[TrustSignal]:
    """Drop signals whose ``expires_at`` has passed."""
    if now is None:
        now = datetime.now(UTC)
    return [s for s in signals if s.is_active(now)]


def compute_component_values(
    signals: Iterable[TrustSignal],
    now: datetime | None = None,
) -> dict[str, float]:
    """Mean weight per component over non-expired signals.

    Components without any signal are 0.0. Values are clamped to [0, 1].
    """
    buckets: dict[str, list[float]] = {str(c): [] for c in TrustComponent}
    for signal in active_signals(signals, now):
        component = SIGNAL_COMPONENTS[signal.signal_type]
        buckets[component].append(signal.weight)
    return {
        component: _clamp(sum(weights) / len(weights)) if weights else 0.0
        for component, weights in buckets.items()
    }


def compute_weighted_total(
    components: Mapping[str, float],
    weights: Mapping[str, float] | None = None,
) -> float:
    """Combine component values with the trust weight table, clamped to [0, 1]."""
    if weights is None:
        weights = TRUST_COMPONENT_WEIGHTS
    raw = sum(weights.get(name, 0.0) * value for name, value in components.items())
    return _clamp(raw)


def score_signals(
    signals: Iterable[TrustSignal],
    weights: Mapping[str, float] | None = None,
    now: datetime | None = None,
) -> TrustBreakdown:
    """Score a signal set into a five-component breakdown plus total."""
    components = compute_component_values(signals, now=now)
    total = compute_weighted_total(components, weights)
    return TrustBreakdown(
        collaboration=components[TrustComponent.COLLABORATION],
        mutuals=components[TrustComponent.MUTUALS],
        endorsement=components[TrustComponent.ENDORSEMENT],
        interaction_quality=components[TrustComponent.INTERACTION_QUALITY],
        freshness=components[TrustComponent.FRESHNESS],
        total=total,
    )


def compute_edge_trust(
    signals: Iterable[TrustSignal],
    prior_trust: float,
    amplification: float = TRUST_AMPLIFICATION,
    now: datetime | None = None,
) -> float:
    """Persisted edge trust: min(1, mean(weight) * amplification).

    Returns ``prior_trust`` unchanged when the edge has no live signals.
    """
    live = active_signals(signals, now)
    if not live:
        return prior_trust
    mean_weight = sum(s.weight for s in live) / len(live)
    return _clamp(mean_weight * amplification)
