"""Edge endpoints.

GET  /v1/edges/{edge_id}           read one edge
POST /v1/edges/{edge_id}/signals   append a trust signal (recomputes trust)
POST /v1/edges/{edge_id}/feedback  submit interaction feedback
POST /v1/edges/{edge_id}/block     block the edge (participant only)
POST /v1/edges/{edge_id}/remove    remove the edge (participant only)
"""

from __future__ import annotations

from datetime import datetime  # noqa: TCH003 - runtime: request body field
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from trust_graph.api.dependencies import get_service
from trust_graph.domain.models import (  # noqa: TCH001 - runtime: response models
    InteractionFeedback,
    NetworkEdge,
    TrustSignal,
)
from trust_graph.services.network_graph import (  # noqa: TCH001 - runtime: Depends()
    NetworkGraphService,
)

router = APIRouter(prefix="/edges", tags=["edges"])

ServiceDep = Annotated[NetworkGraphService, Depends(get_service)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

# Enum-valued fields are plain strings and ``weight`` is unconstrained so the
# service reports bad values as domain validation errors.


class SignalBody(BaseModel):
    signal_type: str
    weight: float
    evidence: str | None = None
    reference_id: str | None = None
    reference_type: str | None = None
    expires_at: datetime | None = None


class FeedbackBody(BaseModel):
    from_profile_id: str = Field(..., min_length=1)
    interaction_type: str
    rating: str
    note: str | None = None


class ParticipantBody(BaseModel):
    """The participant performing a block or remove."""

    profile_id: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/{edge_id}")
async def get_edge(edge_id: str, service: ServiceDep) -> NetworkEdge:
    return await service.get_edge(edge_id)


@router.post("/{edge_id}/signals", status_code=201)
async def add_signal(edge_id: str, body: SignalBody, service: ServiceDep) -> TrustSignal:
    return await service.add_trust_signal(
        edge_id,
        body.signal_type,
        body.weight,
        evidence=body.evidence,
        reference_id=body.reference_id,
        reference_type=body.reference_type,
        expires_at=body.expires_at,
    )


@router.post("/{edge_id}/feedback", status_code=201)
async def submit_feedback(
    edge_id: str,
    body: FeedbackBody,
    service: ServiceDep,
) -> InteractionFeedback:
    return await service.submit_interaction_feedback(
        edge_id,
        body.from_profile_id,
        body.interaction_type,
        body.rating,
        note=body.note,
    )


@router.post("/{edge_id}/block")
async def block_edge(edge_id: str, body: ParticipantBody, service: ServiceDep) -> NetworkEdge:
    return await service.block_edge(edge_id, body.profile_id)


@router.post("/{edge_id}/remove")
async def remove_edge(edge_id: str, body: ParticipantBody, service: ServiceDep) -> NetworkEdge:
    return await service.remove_edge(edge_id, body.profile_id)
