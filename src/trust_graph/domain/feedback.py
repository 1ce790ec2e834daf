"""Interaction feedback rules.

Pure domain module, ZERO framework imports.

  positive -> strength + step (capped at 1.0), plus a collaboration signal
  negative -> strength - step (floored at 0.0), no signal
  neutral  -> no change
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from trust_graph.domain.models import FeedbackRating, SignalType, TrustSignal

if TYPE_CHECKING:
    from datetime import datetime

POSITIVE_FEEDBACK_EVIDENCE = "positive feedback"


def adjust_strength(strength: float, rating: FeedbackRating, step: float = 0.1) -> float:
    """Apply one feedback rating to an edge strength."""
    if rating == FeedbackRating.POSITIVE:
        return min(1.0, strength + step)
    if rating == FeedbackRating.NEGATIVE:
        return max(0.0, strength - step)
    return strength


def feedback_signal(
    edge_id: str,
    rating: FeedbackRating,
    feedback_id: str,
    now: datetime,
    weight: float = 0.2,
) -> TrustSignal | None:
    """The trust signal a rating produces, if any."""
    if rating != FeedbackRating.POSITIVE:
        return None
    return TrustSignal(
        signal_id=str(uuid.uuid4()),
        edge_id=edge_id,
        signal_type=SignalType.COLLABORATION,
        weight=weight,
        evidence=POSITIVE_FEEDBACK_EVIDENCE,
        reference_id=feedback_id,
        reference_type="feedback",
        created_at=now,
    )
