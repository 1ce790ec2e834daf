"""Profile-scoped endpoints.

PUT /v1/profiles/{profile_id}              upsert the profile summary
GET /v1/profiles/{profile_id}/connections  active connections with profiles
GET /v1/profiles/{profile_id}/requests     pending incoming requests
GET /v1/profiles/{profile_id}/suggestions  ranked friend-of-friend suggestions
GET /v1/profiles/{profile_id}/health       network health report
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from trust_graph.api.dependencies import get_service
from trust_graph.domain.models import (  # noqa: TCH001 - runtime: response models
    ConnectionRequestWithProfile,
    ConnectionSuggestion,
    ConnectionWithProfile,
    NetworkHealthScore,
    ProfileSummary,
)
from trust_graph.services.network_graph import (  # noqa: TCH001 - runtime: Depends()
    NetworkGraphService,
)

router = APIRouter(prefix="/profiles", tags=["profiles"])

ServiceDep = Annotated[NetworkGraphService, Depends(get_service)]


class ProfileBody(BaseModel):
    """Display data pushed by the profile subsystem."""

    name: str = Field(..., min_length=1)
    headline: str | None = None
    photo_url: str | None = None
    role_tags: list[str] = Field(default_factory=list)
    domains: list[str] = Field(default_factory=list)


@router.put("/{profile_id}")
async def upsert_profile(
    profile_id: str,
    body: ProfileBody,
    service: ServiceDep,
) -> ProfileSummary:
    """Insert or replace the profile summary mirrored by the engine."""
    profile = ProfileSummary(profile_id=profile_id, **body.model_dump())
    return await service.upsert_profile(profile)


@router.get("/{profile_id}/connections")
async def get_connections(profile_id: str, service: ServiceDep) -> list[ConnectionWithProfile]:
    return await service.get_connections(profile_id)


@router.get("/{profile_id}/requests")
async def get_pending_requests(
    profile_id: str,
    service: ServiceDep,
) -> list[ConnectionRequestWithProfile]:
    return await service.get_pending_requests(profile_id)


@router.get("/{profile_id}/suggestions")
async def get_suggestions(
    profile_id: str,
    service: ServiceDep,
    limit: Annotated[int | None, Query()] = None,
) -> list[ConnectionSuggestion]:
    """Friend-of-friend suggestions; ``limit`` must be between 1 and the configured max."""
    return await service.get_connection_suggestions(profile_id, limit=limit)


@router.get("/{profile_id}/health")
async def get_health(profile_id: str, service: ServiceDep) -> NetworkHealthScore:
    return await service.get_network_health_score(profile_id)
