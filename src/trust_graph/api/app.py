"""FastAPI application factory.

Creates and configures the Trust Graph API with lifespan management
for the network store and the edge locker.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from trust_graph.adapters.memory.locks import InMemoryEdgeLocker
from trust_graph.adapters.memory.store import InMemoryNetworkStore
from trust_graph.adapters.neo4j.store import Neo4jNetworkStore
from trust_graph.adapters.redis.locks import RedisEdgeLocker
from trust_graph.api.middleware import register_middleware
from trust_graph.api.routes.admin import router as admin_router
from trust_graph.api.routes.decisions import router as decisions_router
from trust_graph.api.routes.edges import router as edges_router
from trust_graph.api.routes.health import router as health_router
from trust_graph.api.routes.profiles import router as profiles_router
from trust_graph.api.routes.requests import router as requests_router
from trust_graph.services.network_graph import NetworkGraphService
from trust_graph.settings import Settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from trust_graph.ports.edge_locker import EdgeLocker
    from trust_graph.ports.network_store import NetworkStore

logger = structlog.get_logger(__name__)


def configure_logging(level: str) -> None:
    """Filter structlog output below ``level`` (e.g. "INFO")."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(numeric))


async def build_store(settings: Settings) -> NetworkStore:
    if settings.store_backend == "memory":
        return InMemoryNetworkStore()
    store = Neo4jNetworkStore(settings.neo4j)
    await store.ensure_constraints()
    return store


def build_locker(settings: Settings) -> EdgeLocker:
    if settings.lock_backend == "memory":
        return InMemoryEdgeLocker(blocking_timeout_s=settings.redis.lock_blocking_timeout_s)
    return RedisEdgeLocker.create(settings.redis)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage store + locker connections across the app lifecycle."""
    settings = Settings()
    configure_logging(settings.log_level)

    # -- Startup: create adapters and attach the service to app state ------
    store = await build_store(settings)
    locker = build_locker(settings)

    app.state.settings = settings
    app.state.service = NetworkGraphService(store, locker, settings)

    logger.info(
        "app_started",
        store_backend=settings.store_backend,
        lock_backend=settings.lock_backend,
    )

    yield

    # -- Shutdown: release connections -------------------------------------
    await locker.close()
    await store.close()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Build and return the configured FastAPI application."""
    app = FastAPI(
        title="Trust Graph API",
        description="Trust-weighted professional network graph engine",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_middleware(app)

    app.include_router(health_router, prefix="/v1")
    app.include_router(profiles_router, prefix="/v1")
    app.include_router(requests_router, prefix="/v1")
    app.include_router(decisions_router, prefix="/v1")
    app.include_router(edges_router, prefix="/v1")
    app.include_router(admin_router, prefix="/v1")

    return app
