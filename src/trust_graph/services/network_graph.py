"""Network graph service.

The library surface of the engine. Every call re-reads the store; there is
no cached graph state. Edge read-modify-write cycles run inside the edge
lock and finish with a version-checked ``update_edge``.
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TypeVar

import structlog

from trust_graph.domain import decision, feedback, health, lifecycle, suggestions
from trust_graph.domain.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from trust_graph.domain.models import (
    ConnectionRequestWithProfile,
    ConnectionWithProfile,
    EdgeStatus,
    FeedbackRating,
    InteractionFeedback,
    InteractionType,
    NetworkIntent,
    ProfileSummary,
    RequestStatus,
    SignalType,
    TrustSignal,
)
from trust_graph.domain.trust import compute_edge_trust

if TYPE_CHECKING:
    from collections.abc import Callable

    from trust_graph.domain.models import (
        ConnectionRequest,
        ConnectionSuggestion,
        NetworkDecision,
        NetworkEdge,
        NetworkHealthScore,
        NetworkStats,
    )
    from trust_graph.ports.edge_locker import EdgeLocker
    from trust_graph.ports.network_store import NetworkStore
    from trust_graph.settings import Settings

log = structlog.get_logger(__name__)

E = TypeVar("E", bound=enum.StrEnum)


def _coerce(enum_cls: type[E], value: E | str, field: str) -> E:
    """Parse a raw string into ``enum_cls`` or raise ``ValidationError``."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(field, f"must be one of: {allowed}") from None


def _placeholder_profile(profile_id: str) -> ProfileSummary:
    return ProfileSummary(profile_id=profile_id, name=profile_id)


class NetworkGraphService:
    """Trust-weighted network operations over a ``NetworkStore``."""

    def __init__(
        self,
        store: NetworkStore,
        locker: EdgeLocker,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._locker = locker
        self._settings = settings
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def store(self) -> NetworkStore:
        return self._store

    @property
    def locker(self) -> EdgeLocker:
        return self._locker

    def _now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Profiles and edges
    # ------------------------------------------------------------------

    async def upsert_profile(self, profile: ProfileSummary) -> ProfileSummary:
        await self._store.upsert_profile(profile)
        log.debug("profile_upserted", profile_id=profile.profile_id)
        return profile

    async def get_edge(self, edge_id: str) -> NetworkEdge:
        edge = await self._store.get_edge(edge_id)
        if edge is None:
            msg = f"Edge {edge_id} not found"
            raise NotFoundError(msg)
        return edge

    async def get_connections(self, profile_id: str) -> list[ConnectionWithProfile]:
        """Active edges of ``profile_id`` joined with the counterpart profile.

        Ordered by trust desc, then most recently updated first.
        """
        edges = await self._store.edges_for_profile(profile_id, status=EdgeStatus.ACTIVE)
        if not edges:
            return []

        now = self._now()
        mine = set(await self._store.active_neighbors(profile_id))
        others = [edge.other_end(profile_id) for edge in edges]
        profiles = await self._store.get_profiles(others)

        connections: list[ConnectionWithProfile] = []
        for edge, other in zip(edges, others, strict=True):
            theirs = set(await self._store.active_neighbors(other))
            connections.append(
                ConnectionWithProfile(
                    **edge.model_dump(),
                    profile=profiles.get(other) or _placeholder_profile(other),
                    mutual_count=len((mine & theirs) - {profile_id, other}),
                    signals=await self._store.get_signals(edge.edge_id, now),
                )
            )
        connections.sort(key=lambda c: c.updated_at, reverse=True)
        connections.sort(key=lambda c: c.trust, reverse=True)
        return connections

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def send_connection_request(
        self,
        from_profile_id: str,
        to_profile_id: str,
        message: str | None = None,
        introducer_profile_id: str | None = None,
    ) -> ConnectionRequest:
        now = self._now()
        request = lifecycle.new_request(
            from_profile_id,
            to_profile_id,
            now,
            ttl_days=self._settings.request.ttl_days,
            message=message,
            introducer_profile_id=introducer_profile_id,
        )

        wanted = [from_profile_id, to_profile_id]
        if introducer_profile_id is not None:
            wanted.append(introducer_profile_id)
        known = await self._store.get_profiles(wanted)
        missing = [pid for pid in wanted if pid not in known]
        if missing:
            msg = f"Profile {missing[0]} not found"
            raise NotFoundError(msg)

        existing = await self._store.edge_between(from_profile_id, to_profile_id)
        if existing is not None and existing.status == EdgeStatus.ACTIVE:
            msg = "These profiles are already connected"
            raise ConflictError(msg)
        if existing is not None and existing.status == EdgeStatus.BLOCKED:
            msg = "Connection between these profiles is blocked"
            raise InvalidStateError(msg)

        created = await self._store.create_request(request, now)
        log.info(
            "connection_request_sent",
            request_id=created.request_id,
            from_profile_id=from_profile_id,
            to_profile_id=to_profile_id,
            request_type=str(created.request_type),
        )
        return created

    async def get_pending_requests(self, profile_id: str) -> list[ConnectionRequestWithProfile]:
        """Live pending requests addressed to ``profile_id``, newest first."""
        requests = await self._store.pending_requests_for(profile_id, self._now())
        if not requests:
            return []

        wanted = {r.from_profile_id for r in requests}
        wanted |= {r.introducer_profile_id for r in requests if r.introducer_profile_id}
        profiles = await self._store.get_profiles(sorted(wanted))

        results: list[ConnectionRequestWithProfile] = []
        for request in requests:
            introducer = None
            if request.introducer_profile_id:
                introducer = profiles.get(request.introducer_profile_id) or _placeholder_profile(
                    request.introducer_profile_id
                )
            results.append(
                ConnectionRequestWithProfile(
                    **request.model_dump(),
                    from_profile=profiles.get(request.from_profile_id)
                    or _placeholder_profile(request.from_profile_id),
                    introducer_profile=introducer,
                )
            )
        return results

    async def _load_pending_request(self, request_id: str, now: datetime) -> ConnectionRequest:
        request = await self._store.get_request(request_id)
        if request is None:
            msg = f"Connection request {request_id} not found"
            raise NotFoundError(msg)
        if request.status != RequestStatus.PENDING:
            msg = f"Connection request {request_id} is already {request.status}"
            raise InvalidStateError(msg)
        if request.is_expired(now):
            await self._store.respond_request(request_id, RequestStatus.EXPIRED, now)
            log.info("connection_request_expired", request_id=request_id)
            msg = f"Connection request {request_id} has expired"
            raise InvalidStateError(msg)
        return request

    async def accept_connection_request(self, request_id: str) -> NetworkEdge:
        """Accept a pending request and return the resulting active edge."""
        now = self._now()
        request = await self._load_pending_request(request_id, now)

        trust_settings = self._settings.trust
        new_edge = lifecycle.edge_for_request(
            request,
            now,
            default_trust=trust_settings.default_trust,
            default_strength=trust_settings.default_strength,
        )
        signal = lifecycle.intro_signal(
            request, new_edge.edge_id, now, weight=self._settings.request.intro_signal_weight
        )

        result = await self._store.accept_request(request_id, now, new_edge, intro_signal=signal)
        if result is None:
            msg = f"Connection request {request_id} is no longer pending"
            raise InvalidStateError(msg)
        _, edge = result

        async with self._locker.hold(edge.edge_id):
            edge = await self._recompute_trust(edge.edge_id, now)

        log.info(
            "connection_request_accepted",
            request_id=request_id,
            edge_id=edge.edge_id,
            edge_type=str(edge.edge_type),
        )
        return edge

    async def decline_connection_request(self, request_id: str) -> bool:
        now = self._now()
        await self._load_pending_request(request_id, now)
        declined = await self._store.respond_request(request_id, RequestStatus.DECLINED, now)
        if declined is None:
            msg = f"Connection request {request_id} is no longer pending"
            raise InvalidStateError(msg)
        log.info("connection_request_declined", request_id=request_id)
        return True

    async def expire_requests(self) -> int:
        expired = await self._store.expire_requests(self._now())
        log.info("requests_expired", count=expired)
        return expired

    # ------------------------------------------------------------------
    # Decisions, suggestions, health
    # ------------------------------------------------------------------

    async def get_network_decision(
        self,
        from_profile_id: str,
        intent: NetworkIntent | str | None = None,
        target_profile_id: str | None = None,
    ) -> NetworkDecision:
        parsed = _coerce(NetworkIntent, intent, "intent") if intent is not None else None
        result = await decision.decide(
            self._store,
            from_profile_id,
            parsed,
            target_profile_id,
            self._settings.decision,
            weights=self._settings.trust.component_weights(),
            now=self._now(),
        )
        log.debug(
            "network_decision_computed",
            from_profile_id=from_profile_id,
            target_profile_id=target_profile_id,
            intent=str(parsed) if parsed is not None else None,
            recommendation=str(result.recommendation),
            confidence=result.confidence,
        )
        return result

    async def get_connection_suggestions(
        self,
        profile_id: str,
        limit: int | None = None,
    ) -> list[ConnectionSuggestion]:
        settings = self._settings.suggestion
        if limit is None:
            limit = settings.default_limit
        if not 1 <= limit <= settings.max_limit:
            raise ValidationError("limit", f"must be between 1 and {settings.max_limit}")

        now = self._now()
        excluded = {e.other_end(profile_id) for e in await self._store.edges_for_profile(profile_id)}
        excluded |= await self._store.pending_request_peers(profile_id, now)

        results = await suggestions.suggest(
            self._store, profile_id, limit, settings, excluded=excluded
        )
        log.debug("suggestions_ranked", profile_id=profile_id, count=len(results))
        return results

    async def get_network_health_score(self, profile_id: str) -> NetworkHealthScore:
        edges = await self._store.edges_for_profile(profile_id)
        neighbors = sorted(
            e.other_end(profile_id) for e in edges if e.status == EdgeStatus.ACTIVE
        )
        profiles = await self._store.get_profiles(neighbors) if neighbors else {}
        return health.summarize_network(profile_id, edges, profiles, self._settings.health)

    # ------------------------------------------------------------------
    # Edge writes
    # ------------------------------------------------------------------

    async def _locked_edge(self, edge_id: str, profile_id: str | None = None) -> NetworkEdge:
        edge = await self._store.get_edge(edge_id)
        if edge is None or (profile_id is not None and not edge.involves(profile_id)):
            msg = f"Edge {edge_id} not found"
            raise NotFoundError(msg)
        return edge

    async def _recompute_trust(self, edge_id: str, now: datetime) -> NetworkEdge:
        """Recompute and persist edge trust. Caller holds the edge lock."""
        edge = await self._locked_edge(edge_id)
        signals = await self._store.get_signals(edge_id, now)
        trust = compute_edge_trust(
            signals, edge.trust, amplification=self._settings.trust.amplification, now=now
        )
        updated = await self._store.update_edge(
            edge.model_copy(update={"trust": trust, "updated_at": now})
        )
        log.debug(
            "edge_trust_recomputed",
            edge_id=edge_id,
            signals=len(signals),
            previous=edge.trust,
            trust=trust,
        )
        return updated

    async def add_trust_signal(
        self,
        edge_id: str,
        signal_type: SignalType | str,
        weight: float,
        evidence: str | None = None,
        reference_id: str | None = None,
        reference_type: str | None = None,
        expires_at: datetime | None = None,
    ) -> TrustSignal:
        parsed_type = _coerce(SignalType, signal_type, "signal_type")
        if not 0.0 <= weight <= 1.0:
            raise ValidationError("weight", "must be between 0 and 1")

        now = self._now()
        async with self._locker.hold(edge_id):
            await self._locked_edge(edge_id)
            signal = await self._store.append_signal(
                TrustSignal(
                    signal_id=str(uuid.uuid4()),
                    edge_id=edge_id,
                    signal_type=parsed_type,
                    weight=weight,
                    evidence=evidence,
                    reference_id=reference_id,
                    reference_type=reference_type,
                    created_at=now,
                    expires_at=expires_at,
                )
            )
            await self._recompute_trust(edge_id, now)

        log.info(
            "trust_signal_added",
            edge_id=edge_id,
            signal_type=str(parsed_type),
            weight=weight,
        )
        return signal

    async def submit_interaction_feedback(
        self,
        edge_id: str,
        from_profile_id: str,
        interaction_type: InteractionType | str,
        rating: FeedbackRating | str,
        note: str | None = None,
    ) -> InteractionFeedback:
        parsed_type = _coerce(InteractionType, interaction_type, "interaction_type")
        parsed_rating = _coerce(FeedbackRating, rating, "rating")
        fb_settings = self._settings.feedback

        now = self._now()
        async with self._locker.hold(edge_id):
            edge = await self._locked_edge(edge_id, from_profile_id)
            if edge.status != EdgeStatus.ACTIVE:
                msg = f"Edge {edge_id} is {edge.status}; feedback needs an active connection"
                raise InvalidStateError(msg)
            record = await self._store.append_feedback(
                InteractionFeedback(
                    feedback_id=str(uuid.uuid4()),
                    edge_id=edge_id,
                    from_profile_id=from_profile_id,
                    interaction_type=parsed_type,
                    rating=parsed_rating,
                    note=note,
                    created_at=now,
                )
            )

            if parsed_rating != FeedbackRating.NEUTRAL:
                signal = feedback.feedback_signal(
                    edge_id,
                    parsed_rating,
                    record.feedback_id,
                    now,
                    weight=fb_settings.positive_signal_weight,
                )
                trust = edge.trust
                if signal is not None:
                    await self._store.append_signal(signal)
                    trust = compute_edge_trust(
                        await self._store.get_signals(edge_id, now),
                        edge.trust,
                        amplification=self._settings.trust.amplification,
                        now=now,
                    )
                await self._store.update_edge(
                    edge.model_copy(
                        update={
                            "strength": feedback.adjust_strength(
                                edge.strength, parsed_rating, step=fb_settings.strength_step
                            ),
                            "trust": trust,
                            "last_interaction_at": now,
                            "updated_at": now,
                        }
                    )
                )

        log.info(
            "feedback_recorded",
            edge_id=edge_id,
            from_profile_id=from_profile_id,
            rating=str(parsed_rating),
        )
        return record

    async def _change_status(
        self, edge_id: str, profile_id: str, target: EdgeStatus
    ) -> NetworkEdge:
        now = self._now()
        async with self._locker.hold(edge_id):
            edge = await self._locked_edge(edge_id, profile_id)
            lifecycle.check_edge_transition(edge, target)
            updated = await self._store.update_edge(
                edge.model_copy(update={"status": target, "updated_at": now})
            )
        log.info(
            "edge_status_changed",
            edge_id=edge_id,
            profile_id=profile_id,
            previous=str(edge.status),
            status=str(target),
        )
        return updated

    async def block_edge(self, edge_id: str, profile_id: str) -> NetworkEdge:
        return await self._change_status(edge_id, profile_id, EdgeStatus.BLOCKED)

    async def remove_edge(self, edge_id: str, profile_id: str) -> NetworkEdge:
        return await self._change_status(edge_id, profile_id, EdgeStatus.REMOVED)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def get_stats(self) -> NetworkStats:
        return await self._store.get_stats()
