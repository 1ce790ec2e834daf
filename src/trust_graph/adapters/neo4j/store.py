"""Neo4j NetworkStore adapter.

Implements the ``NetworkStore`` protocol using the neo4j async driver.
Multi-step writes (request creation, acceptance, version-checked edge
updates) each run inside one ``execute_write`` transaction function.
Uniqueness constraint violations surface as ``ConflictError``.

Datetimes are stored as ISO 8601 UTC strings with microsecond precision.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from neo4j import AsyncGraphDatabase
from neo4j.exceptions import ConstraintError

from trust_graph.adapters.neo4j import queries
from trust_graph.domain.errors import ConflictError, InvalidStateError, NotFoundError
from trust_graph.domain.models import (
    ConnectionRequest,
    EdgeStatus,
    NetworkEdge,
    NetworkStats,
    ProfileSummary,
    RequestStatus,
    TrustSignal,
    pair_key,
)

if TYPE_CHECKING:
    from neo4j import AsyncDriver, AsyncManagedTransaction
    from pydantic import BaseModel

    from trust_graph.domain.models import InteractionFeedback
    from trust_graph.settings import Neo4jSettings

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _iso(value: datetime) -> str:
    """Normalize a datetime to a fixed-width UTC ISO string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def _to_params(model: BaseModel) -> dict[str, Any]:
    """Dump a model to driver-safe parameters (plain str enums, ISO datetimes)."""
    params: dict[str, Any] = {}
    for key, value in model.model_dump().items():
        if isinstance(value, datetime):
            params[key] = _iso(value)
        elif isinstance(value, str):
            params[key] = str(value)
        else:
            params[key] = value
    return params


def _pending_key(from_profile_id: str, to_profile_id: str) -> str:
    return f"{from_profile_id}|{to_profile_id}"


def _edge(node: Any) -> NetworkEdge:
    return NetworkEdge.model_validate(dict(node))


def _request(node: Any) -> ConnectionRequest:
    return ConnectionRequest.model_validate(dict(node))


# ---------------------------------------------------------------------------
# Neo4jNetworkStore
# ---------------------------------------------------------------------------


class Neo4jNetworkStore:
    """Neo4j implementation of the NetworkStore protocol."""

    def __init__(self, settings: Neo4jSettings) -> None:
        self._settings = settings
        self._driver: AsyncDriver = AsyncGraphDatabase.driver(
            settings.uri,
            auth=(settings.username, settings.password),
            max_connection_pool_size=settings.max_connection_pool_size,
        )
        self._database = settings.database

    async def _read(self, query: str, params: dict[str, Any]) -> list[Any]:
        async with self._driver.session(database=self._database) as session:
            result = await session.run(query, params)
            return [record async for record in result]

    # ------------------------------------------------------------------
    # Schema management
    # ------------------------------------------------------------------

    async def ensure_constraints(self) -> None:
        """Create uniqueness constraints if they do not exist."""
        async with self._driver.session(database=self._database) as session:
            for constraint_query in queries.ALL_CONSTRAINTS:
                await session.run(constraint_query)
        logger.info("ensured_constraints", count=len(queries.ALL_CONSTRAINTS))

    async def ping(self) -> bool:
        async with self._driver.session(database=self._database) as session:
            await session.run("RETURN 1")
        return True

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    async def upsert_profile(self, profile: ProfileSummary) -> None:
        """MERGE a profile summary. Idempotent."""
        params = _to_params(profile)
        async with self._driver.session(database=self._database) as session:
            await session.execute_write(lambda tx: tx.run(queries.UPSERT_PROFILE, params))
        logger.debug("upserted_profile", profile_id=profile.profile_id)

    async def get_profile(self, profile_id: str) -> ProfileSummary | None:
        profiles = await self.get_profiles([profile_id])
        return profiles.get(profile_id)

    async def get_profiles(self, profile_ids: list[str]) -> dict[str, ProfileSummary]:
        if not profile_ids:
            return {}
        records = await self._read(queries.GET_PROFILES, {"profile_ids": profile_ids})
        profiles = [ProfileSummary.model_validate(dict(record["p"])) for record in records]
        return {p.profile_id: p for p in profiles}

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    async def get_edge(self, edge_id: str) -> NetworkEdge | None:
        records = await self._read(queries.GET_EDGE, {"edge_id": edge_id})
        return _edge(records[0]["c"]) if records else None

    async def edge_between(self, profile_a: str, profile_b: str) -> NetworkEdge | None:
        records = await self._read(
            queries.GET_EDGE_BY_PAIR, {"pair_key": pair_key(profile_a, profile_b)}
        )
        return _edge(records[0]["c"]) if records else None

    async def active_neighbors(self, profile_id: str) -> list[str]:
        records = await self._read(queries.GET_ACTIVE_NEIGHBORS, {"profile_id": profile_id})
        return [record["profile_id"] for record in records]

    async def edges_for_profile(
        self,
        profile_id: str,
        status: EdgeStatus | None = None,
    ) -> list[NetworkEdge]:
        records = await self._read(
            queries.GET_EDGES_FOR_PROFILE,
            {"profile_id": profile_id, "status": str(status) if status else None},
        )
        return [_edge(record["c"]) for record in records]

    async def update_edge(self, edge: NetworkEdge) -> NetworkEdge:
        """Version-checked write of the mutable edge fields."""
        params = _to_params(edge)
        params["expected_version"] = edge.version

        async def _work(tx: AsyncManagedTransaction) -> NetworkEdge:
            result = await tx.run(queries.UPDATE_EDGE_IF_VERSION, params)
            record = await result.single()
            if record is not None:
                return _edge(record["c"])
            existing = await tx.run(queries.GET_EDGE, {"edge_id": edge.edge_id})
            if await existing.single() is None:
                msg = f"Edge {edge.edge_id} not found"
                raise NotFoundError(msg)
            msg = f"Edge {edge.edge_id} was modified concurrently"
            raise ConflictError(msg)

        async with self._driver.session(database=self._database) as session:
            try:
                updated = await session.execute_write(_work)
            except ConflictError:
                logger.info("edge_version_conflict", edge_id=edge.edge_id, expected=edge.version)
                raise
        logger.debug("updated_edge", edge_id=edge.edge_id, version=updated.version)
        return updated

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    @staticmethod
    async def _append_signal_tx(tx: AsyncManagedTransaction, signal: TrustSignal) -> None:
        result = await tx.run(queries.APPEND_SIGNAL, _to_params(signal))
        if await result.single() is None:
            msg = f"Edge {signal.edge_id} not found"
            raise NotFoundError(msg)

    async def append_signal(self, signal: TrustSignal) -> TrustSignal:
        async with self._driver.session(database=self._database) as session:
            await session.execute_write(self._append_signal_tx, signal)
        logger.debug("appended_signal", edge_id=signal.edge_id, signal_id=signal.signal_id)
        return signal

    async def get_signals(self, edge_id: str, now: datetime) -> list[TrustSignal]:
        records = await self._read(
            queries.GET_ACTIVE_SIGNALS, {"edge_id": edge_id, "now": _iso(now)}
        )
        return [TrustSignal.model_validate(dict(record["s"])) for record in records]

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def create_request(self, request: ConnectionRequest, now: datetime) -> ConnectionRequest:
        """Create a pending request, expiring a stale one on the same ordered pair."""
        params = _to_params(request)
        params["pending_key"] = _pending_key(request.from_profile_id, request.to_profile_id)
        now_iso = _iso(now)

        async def _work(tx: AsyncManagedTransaction) -> None:
            await tx.run(
                queries.EXPIRE_STALE_PENDING_FOR_PAIR,
                {"pending_key": params["pending_key"], "now": now_iso},
            )
            await tx.run(queries.CREATE_REQUEST, params)

        async with self._driver.session(database=self._database) as session:
            try:
                await session.execute_write(_work)
            except ConstraintError as exc:
                msg = "A pending connection request already exists for this pair"
                raise ConflictError(msg) from exc
        return request

    async def get_request(self, request_id: str) -> ConnectionRequest | None:
        records = await self._read(queries.GET_REQUEST, {"request_id": request_id})
        return _request(records[0]["r"]) if records else None

    async def pending_requests_for(self, profile_id: str, now: datetime) -> list[ConnectionRequest]:
        records = await self._read(
            queries.GET_PENDING_REQUESTS_FOR, {"profile_id": profile_id, "now": _iso(now)}
        )
        return [_request(record["r"]) for record in records]

    async def pending_request_peers(self, profile_id: str, now: datetime) -> set[str]:
        records = await self._read(
            queries.GET_PENDING_REQUEST_PEERS, {"profile_id": profile_id, "now": _iso(now)}
        )
        return {record["peer_id"] for record in records}

    async def accept_request(
        self,
        request_id: str,
        now: datetime,
        new_edge: NetworkEdge,
        intro_signal: TrustSignal | None = None,
    ) -> tuple[ConnectionRequest, NetworkEdge] | None:
        """Claim the request, upsert the pair's edge and attach the intro signal.

        Raises InvalidStateError without claiming when the pair is blocked.
        """
        now_iso = _iso(now)

        async def _work(tx: AsyncManagedTransaction) -> tuple[ConnectionRequest, NetworkEdge] | None:
            locked = await tx.run(queries.LOCK_EDGE_BY_PAIR, {"pair_key": new_edge.pair_key})
            existing = await locked.single()
            if existing is not None and existing["status"] == str(EdgeStatus.BLOCKED):
                msg = (
                    f"Connection between {new_edge.from_profile_id} and "
                    f"{new_edge.to_profile_id} is blocked"
                )
                raise InvalidStateError(msg)

            claim = await tx.run(
                queries.CLAIM_PENDING_REQUEST,
                {"request_id": request_id, "status": str(RequestStatus.ACCEPTED), "now": now_iso},
            )
            claimed = await claim.single()
            if claimed is None:
                return None

            edge_params = _to_params(new_edge)
            edge_params["pair_key"] = new_edge.pair_key
            edge_params["updated_at"] = now_iso
            upsert = await tx.run(queries.UPSERT_ACCEPTED_EDGE, edge_params)
            edge_record = await upsert.single()
            edge = _edge(edge_record["c"])

            if intro_signal is not None:
                signal = intro_signal.model_copy(update={"edge_id": edge.edge_id})
                await self._append_signal_tx(tx, signal)

            return _request(claimed["r"]), edge

        async with self._driver.session(database=self._database) as session:
            try:
                return await session.execute_write(_work)
            except ConstraintError as exc:
                msg = f"Connection for request {request_id} was created concurrently"
                raise ConflictError(msg) from exc

    async def respond_request(
        self,
        request_id: str,
        status: RequestStatus,
        now: datetime,
    ) -> ConnectionRequest | None:
        params = {"request_id": request_id, "status": str(status), "now": _iso(now)}

        async def _work(tx: AsyncManagedTransaction) -> ConnectionRequest | None:
            result = await tx.run(queries.RESPOND_PENDING_REQUEST, params)
            record = await result.single()
            return _request(record["r"]) if record is not None else None

        async with self._driver.session(database=self._database) as session:
            return await session.execute_write(_work)

    async def expire_requests(self, now: datetime) -> int:
        async def _work(tx: AsyncManagedTransaction) -> int:
            result = await tx.run(queries.EXPIRE_REQUESTS, {"now": _iso(now)})
            record = await result.single()
            return int(record["expired"]) if record else 0

        async with self._driver.session(database=self._database) as session:
            expired = await session.execute_write(_work)
        logger.info("expired_requests", count=expired)
        return expired

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    async def append_feedback(self, feedback: InteractionFeedback) -> InteractionFeedback:
        params = _to_params(feedback)

        async def _work(tx: AsyncManagedTransaction) -> None:
            result = await tx.run(queries.APPEND_FEEDBACK, params)
            if await result.single() is None:
                msg = f"Edge {feedback.edge_id} not found"
                raise NotFoundError(msg)

        async with self._driver.session(database=self._database) as session:
            await session.execute_write(_work)
        return feedback

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    async def get_stats(self) -> NetworkStats:
        """Store-wide counts, best effort (no snapshot across queries)."""

        async def _count(query: str) -> int:
            records = await self._read(query, {})
            return int(records[0]["cnt"]) if records else 0

        edge_records = await self._read(queries.COUNT_EDGES_BY_STATUS, {})
        return NetworkStats(
            profiles=await _count(queries.COUNT_PROFILES),
            edges_by_status={r["status"]: int(r["cnt"]) for r in edge_records},
            signals=await _count(queries.COUNT_SIGNALS),
            pending_requests=await _count(queries.COUNT_PENDING_REQUESTS),
            feedback=await _count(queries.COUNT_FEEDBACK),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release connections."""
        await self._driver.close()
        logger.info("neo4j_driver_closed")
