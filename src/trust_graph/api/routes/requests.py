"""Connection request endpoints.

POST /v1/requests                      send a connection or introduction request
POST /v1/requests/{request_id}/accept  accept; returns the active edge
POST /v1/requests/{request_id}/decline decline
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from trust_graph.api.dependencies import get_service
from trust_graph.domain.models import (  # noqa: TCH001 - runtime: response models
    ConnectionRequest,
    NetworkEdge,
)
from trust_graph.services.network_graph import (  # noqa: TCH001 - runtime: Depends()
    NetworkGraphService,
)

router = APIRouter(prefix="/requests", tags=["requests"])

ServiceDep = Annotated[NetworkGraphService, Depends(get_service)]


class SendRequestBody(BaseModel):
    """Body for a new connection request. An introducer makes it an introduction."""

    from_profile_id: str = Field(..., min_length=1)
    to_profile_id: str = Field(..., min_length=1)
    message: str | None = None
    introducer_profile_id: str | None = None


class DeclineResponse(BaseModel):
    request_id: str
    declined: bool


@router.post("", status_code=201)
async def send_request(body: SendRequestBody, service: ServiceDep) -> ConnectionRequest:
    return await service.send_connection_request(
        body.from_profile_id,
        body.to_profile_id,
        message=body.message,
        introducer_profile_id=body.introducer_profile_id,
    )


@router.post("/{request_id}/accept")
async def accept_request(request_id: str, service: ServiceDep) -> NetworkEdge:
    return await service.accept_connection_request(request_id)


@router.post("/{request_id}/decline")
async def decline_request(request_id: str, service: ServiceDep) -> DeclineResponse:
    declined = await service.decline_connection_request(request_id)
    return DeclineResponse(request_id=request_id, declined=declined)
