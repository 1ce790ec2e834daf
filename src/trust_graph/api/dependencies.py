"""FastAPI dependency injection helpers.

Extracts shared resources from ``app.state`` so route handlers can
declare them via ``Depends()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request  # noqa: TCH002 (runtime: FastAPI dependency injection)

if TYPE_CHECKING:
    from trust_graph.services.network_graph import NetworkGraphService
    from trust_graph.settings import Settings


def get_settings(request: Request) -> Settings:
    """Return the application settings from app state."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_service(request: Request) -> NetworkGraphService:
    """Return the network graph service from app state."""
    return request.app.state.service  # type: ignore[no-any-return]
