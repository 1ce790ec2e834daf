"""Request and edge lifecycle rules.

Pure domain module, ZERO framework imports.

Request flow:
  pending -> accepted | declined | expired   (all terminal)

Edge status changes triggered by a participant:
  active | pending -> blocked | removed
  removed          -> blocked
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

from trust_graph.domain.errors import InvalidStateError, ValidationError
from trust_graph.domain.models import (
    ConnectionRequest,
    EdgeStatus,
    EdgeType,
    NetworkEdge,
    RequestType,
    SignalType,
    TrustSignal,
)

if TYPE_CHECKING:
    from datetime import datetime

INTRO_EVIDENCE = "accepted introduction"

ALLOWED_EDGE_TRANSITIONS: dict[EdgeStatus, frozenset[EdgeStatus]] = {
    EdgeStatus.PENDING: frozenset({EdgeStatus.BLOCKED, EdgeStatus.REMOVED}),
    EdgeStatus.ACTIVE: frozenset({EdgeStatus.BLOCKED, EdgeStatus.REMOVED}),
    EdgeStatus.REMOVED: frozenset({EdgeStatus.BLOCKED}),
    EdgeStatus.BLOCKED: frozenset(),
}


def new_request(
    from_profile_id: str,
    to_profile_id: str,
    now: datetime,
    ttl_days: int = 30,
    message: str | None = None,
    introducer_profile_id: str | None = None,
) -> ConnectionRequest:
    """Build a pending request. An introducer makes it an introduction."""
    if from_profile_id == to_profile_id:
        raise ValidationError("to_profile_id", "cannot send a connection request to yourself")
    if introducer_profile_id is not None and introducer_profile_id in (
        from_profile_id,
        to_profile_id,
    ):
        raise ValidationError("introducer_profile_id", "introducer must be a third profile")

    request_type = RequestType.INTRODUCTION if introducer_profile_id else RequestType.DIRECT
    return ConnectionRequest(
        request_id=str(uuid.uuid4()),
        from_profile_id=from_profile_id,
        to_profile_id=to_profile_id,
        request_type=request_type,
        message=message,
        introducer_profile_id=introducer_profile_id,
        created_at=now,
        expires_at=now + timedelta(days=ttl_days),
    )


def edge_for_request(
    request: ConnectionRequest,
    now: datetime,
    default_trust: float = 0.5,
    default_strength: float = 0.5,
) -> NetworkEdge:
    """The active edge an accepted request creates when the pair has none."""
    is_intro = request.request_type == RequestType.INTRODUCTION
    return NetworkEdge(
        edge_id=str(uuid.uuid4()),
        from_profile_id=request.from_profile_id,
        to_profile_id=request.to_profile_id,
        edge_type=EdgeType.INTRODUCED if is_intro else EdgeType.DIRECT,
        strength=default_strength,
        trust=default_trust,
        status=EdgeStatus.ACTIVE,
        introduced_by=request.introducer_profile_id,
        introduction_message=request.message if is_intro else None,
        created_at=now,
        updated_at=now,
    )


def intro_signal(
    request: ConnectionRequest,
    edge_id: str,
    now: datetime,
    weight: float = 0.6,
) -> TrustSignal | None:
    """The intro_history signal recorded when an introduction is accepted."""
    if request.request_type != RequestType.INTRODUCTION:
        return None
    return TrustSignal(
        signal_id=str(uuid.uuid4()),
        edge_id=edge_id,
        signal_type=SignalType.INTRO_HISTORY,
        weight=weight,
        evidence=INTRO_EVIDENCE,
        reference_id=request.request_id,
        reference_type="connection_request",
        created_at=now,
    )


def check_edge_transition(edge: NetworkEdge, target: EdgeStatus) -> None:
    """Raise ``InvalidStateError`` unless ``edge`` may move to ``target``."""
    if target not in ALLOWED_EDGE_TRANSITIONS[edge.status]:
        msg = f"Edge {edge.edge_id} cannot move from {edge.status} to {target}"
        raise InvalidStateError(msg)
