"""Unit test conftest: FastAPI test client over the in-memory backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from trust_graph.services.network_graph import NetworkGraphService
    from trust_graph.settings import Settings


@pytest.fixture()
def test_client(service: NetworkGraphService, settings: Settings) -> TestClient:
    """FastAPI TestClient with in-memory store and locker (no Neo4j/Redis needed)."""
    from fastapi import FastAPI
    from fastapi.responses import ORJSONResponse
    from fastapi.testclient import TestClient as _TestClient

    from trust_graph.api.middleware import register_middleware
    from trust_graph.api.routes.admin import router as admin_router
    from trust_graph.api.routes.decisions import router as decisions_router
    from trust_graph.api.routes.edges import router as edges_router
    from trust_graph.api.routes.health import router as health_router
    from trust_graph.api.routes.profiles import router as profiles_router
    from trust_graph.api.routes.requests import router as requests_router

    app = FastAPI(default_response_class=ORJSONResponse)
    register_middleware(app)
    app.include_router(health_router, prefix="/v1")
    app.include_router(profiles_router, prefix="/v1")
    app.include_router(requests_router, prefix="/v1")
    app.include_router(decisions_router, prefix="/v1")
    app.include_router(edges_router, prefix="/v1")
    app.include_router(admin_router, prefix="/v1")

    app.state.settings = settings
    app.state.service = service

    return _TestClient(app)
