"""Shared pytest fixtures for the trust-graph test suite.

Wires the service to the in-memory store and locker with a controllable
clock. No external service dependencies are required for unit tests.
"""

from __future__ import annotations

import pytest

from tests.fixtures.network import MutableClock, make_edge, make_profile
from trust_graph.adapters.memory.locks import InMemoryEdgeLocker
from trust_graph.adapters.memory.store import InMemoryNetworkStore
from trust_graph.services.network_graph import NetworkGraphService
from trust_graph.settings import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings(store_backend="memory", lock_backend="memory")


@pytest.fixture()
def clock() -> MutableClock:
    """A clock pinned to ``FIXED_NOW`` that tests can advance."""
    return MutableClock()


@pytest.fixture()
def store() -> InMemoryNetworkStore:
    """Return a fresh in-memory network store."""
    return InMemoryNetworkStore()


@pytest.fixture()
def locker() -> InMemoryEdgeLocker:
    return InMemoryEdgeLocker()


@pytest.fixture()
def service(
    store: InMemoryNetworkStore,
    locker: InMemoryEdgeLocker,
    settings: Settings,
    clock: MutableClock,
) -> NetworkGraphService:
    return NetworkGraphService(store, locker, settings, clock=clock)


@pytest.fixture()
def profile_factory():
    """Return the ``make_profile`` factory callable."""
    return make_profile


@pytest.fixture()
def edge_factory():
    """Return the ``make_edge`` factory callable."""
    return make_edge
