"""Factory functions for trust graph records.

Every function accepts **overrides so callers can replace any field.
``FIXED_NOW`` gives tests a deterministic clock.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from trust_graph.domain.models import (
    ConnectionRequest,
    EdgeStatus,
    NetworkEdge,
    ProfileSummary,
    SignalType,
    TrustSignal,
)

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def make_profile(profile_id: str, **overrides) -> ProfileSummary:
    defaults: dict = {
        "profile_id": profile_id,
        "name": f"Name {profile_id}",
        "headline": None,
        "role_tags": [],
        "domains": [],
    }
    defaults.update(overrides)
    return ProfileSummary(**defaults)


def make_edge(from_id: str, to_id: str, trust: float = 0.5, **overrides) -> NetworkEdge:
    """Create an active edge between two profiles."""
    defaults: dict = {
        "edge_id": f"edge-{uuid4().hex[:8]}",
        "from_profile_id": from_id,
        "to_profile_id": to_id,
        "trust": trust,
        "status": EdgeStatus.ACTIVE,
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
    }
    defaults.update(overrides)
    return NetworkEdge(**defaults)


def make_signal(
    edge_id: str,
    signal_type: SignalType = SignalType.COLLABORATION,
    weight: float = 0.5,
    **overrides,
) -> TrustSignal:
    defaults: dict = {
        "signal_id": f"sig-{uuid4().hex[:8]}",
        "edge_id": edge_id,
        "signal_type": signal_type,
        "weight": weight,
        "created_at": FIXED_NOW,
    }
    defaults.update(overrides)
    return TrustSignal(**defaults)


def make_request(from_id: str, to_id: str, **overrides) -> ConnectionRequest:
    defaults: dict = {
        "request_id": f"req-{uuid4().hex[:8]}",
        "from_profile_id": from_id,
        "to_profile_id": to_id,
        "created_at": FIXED_NOW,
        "expires_at": FIXED_NOW + timedelta(days=30),
    }
    defaults.update(overrides)
    return ConnectionRequest(**defaults)


class MutableClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)
