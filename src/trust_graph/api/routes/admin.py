"""Admin endpoints.

POST /v1/admin/expire-requests  expire every pending request past its TTL
GET  /v1/admin/stats            store-wide counts
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from trust_graph.api.dependencies import get_service
from trust_graph.domain.models import NetworkStats  # noqa: TCH001 - runtime: response model
from trust_graph.services.network_graph import (  # noqa: TCH001 - runtime: Depends()
    NetworkGraphService,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

ServiceDep = Annotated[NetworkGraphService, Depends(get_service)]


class ExpireResponse(BaseModel):
    """Result of an expiry sweep."""

    expired: int = 0


@router.post("/expire-requests")
async def expire_requests(service: ServiceDep) -> ExpireResponse:
    expired = await service.expire_requests()
    logger.info("admin_expire_requests", expired=expired)
    return ExpireResponse(expired=expired)


@router.get("/stats")
async def get_stats(service: ServiceDep) -> NetworkStats:
    return await service.get_stats()
