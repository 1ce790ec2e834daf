"""Decision endpoint.

POST /v1/decisions  explainable recommendation for acting on a target profile
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from trust_graph.api.dependencies import get_service
from trust_graph.domain.models import NetworkDecision  # noqa: TCH001 - runtime: response model
from trust_graph.services.network_graph import (  # noqa: TCH001 - runtime: Depends()
    NetworkGraphService,
)

router = APIRouter(tags=["decisions"])

ServiceDep = Annotated[NetworkGraphService, Depends(get_service)]


class DecisionBody(BaseModel):
    """Decision request.

    ``intent`` stays a plain string here so an unknown value is reported
    as a domain validation error naming the field.
    """

    from_profile_id: str = Field(..., min_length=1)
    intent: str | None = None
    target_profile_id: str | None = None


@router.post("/decisions")
async def get_decision(body: DecisionBody, service: ServiceDep) -> NetworkDecision:
    return await service.get_network_decision(
        body.from_profile_id,
        intent=body.intent,
        target_profile_id=body.target_profile_id,
    )
