"""Health check endpoint.

GET /v1/health  reports the status of the store and lock backends.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends

from trust_graph.api.dependencies import get_service, get_settings
from trust_graph.services.network_graph import (  # noqa: TCH001 - runtime: Depends()
    NetworkGraphService,
)
from trust_graph.settings import Settings  # noqa: TCH001 - runtime: Depends()

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


async def _probe(name: str, ping: Any) -> bool:
    try:
        return bool(await ping())
    except Exception:
        logger.warning("health_check_failed", backend=name, exc_info=True)
        return False


@router.get("/health")
async def health_check(
    service: Annotated[NetworkGraphService, Depends(get_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any]:
    """Ping the network store and the edge locker.

    "healthy" when both answer, "degraded" when one does, "unhealthy"
    when neither does.
    """
    store_ok = await _probe(settings.store_backend, service.store.ping)
    locks_ok = await _probe(settings.lock_backend, service.locker.ping)

    if store_ok and locks_ok:
        status = "healthy"
    elif store_ok or locks_ok:
        status = "degraded"
    else:
        status = "unhealthy"

    return {
        "status": status,
        "store": store_ok,
        "locks": locks_ok,
        "store_backend": settings.store_backend,
        "lock_backend": settings.lock_backend,
        "version": "0.1.0",
    }
