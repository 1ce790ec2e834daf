"""Domain models for the trust graph.

Records owned by the engine (edges, signals, requests, feedback) and the
read models returned to callers (decisions, suggestions, health reports).
Profiles are owned elsewhere; only a display summary is mirrored here.

All models are pure Python + Pydantic v2. Zero framework imports.
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EdgeType(enum.StrEnum):
    """How a relationship formed (provenance)."""

    DIRECT = "direct"
    INTRODUCED = "introduced"
    COLLEAGUE = "colleague"
    COLLABORATED = "collaborated"
    ENDORSED = "endorsed"
    EVENT_PEER = "event_peer"


class EdgeContext(enum.StrEnum):
    """Domain in which a relationship lives."""

    GENERAL = "general"
    BUSINESS = "business"
    EVENT = "event"
    JOB = "job"
    TEAM = "team"
    MENTOR = "mentor"
    PROJECT = "project"


class EdgeStatus(enum.StrEnum):
    """Edge lifecycle status. Transitions are soft; edges are never deleted."""

    PENDING = "pending"
    ACTIVE = "active"
    BLOCKED = "blocked"
    REMOVED = "removed"


class SignalType(enum.StrEnum):
    """Kinds of trust evidence that can be attached to an edge."""

    COLLABORATION = "collaboration"
    SHARED_PROJECT = "shared_project"
    MUTUAL_OVERLAP = "mutual_overlap"
    MUTUAL_CONNECTION = "mutual_connection"
    ENDORSEMENT = "endorsement"
    REPUTATION = "reputation"
    INTERACTION_QUALITY = "interaction_quality"
    INTRO_HISTORY = "intro_history"
    FRESHNESS = "freshness"


class TrustComponent(enum.StrEnum):
    """The five components of decision-time trust."""

    COLLABORATION = "collaboration"
    MUTUALS = "mutuals"
    ENDORSEMENT = "endorsement"
    INTERACTION_QUALITY = "interaction_quality"
    FRESHNESS = "freshness"


class RequestType(enum.StrEnum):
    """Connection request type."""

    DIRECT = "direct"
    INTRODUCTION = "introduction"


class RequestStatus(enum.StrEnum):
    """Connection request status. Every status but PENDING is terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class InteractionType(enum.StrEnum):
    """What a piece of feedback is about."""

    CONNECTION = "connection"
    INTRODUCTION = "introduction"
    COLLABORATION = "collaboration"
    MESSAGE = "message"


class FeedbackRating(enum.StrEnum):
    """Post-interaction rating."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class NetworkIntent(enum.StrEnum):
    """Why the caller is asking the decision engine."""

    CONNECT = "connect"
    INTRODUCE = "introduce"
    COLLABORATE = "collaborate"
    MENTOR = "mentor"


class Recommendation(enum.StrEnum):
    """Decision engine output."""

    DO = "do"
    CONSIDER = "consider"
    HOLD = "hold"


class ReasonType(enum.StrEnum):
    """Category of an explainability reason."""

    TRUST = "trust"
    MUTUAL = "mutual"
    DOMAIN = "domain"
    HISTORY = "history"


class SuggestionBadge(enum.StrEnum):
    """Categorical explainability label attached to a suggestion."""

    HIGH_TRUST = "high_trust"
    MUTUAL_HEAVY = "mutual_heavy"
    GOOD_FIT = "good_fit"


# ---------------------------------------------------------------------------
# Profile mirror
# ---------------------------------------------------------------------------


class ProfileSummary(BaseModel):
    """Display data for a profile, referenced by id only."""

    profile_id: str = Field(..., min_length=1)
    name: str
    headline: str | None = None
    photo_url: str | None = None
    role_tags: list[str] = Field(default_factory=list)
    domains: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


def pair_key(profile_a: str, profile_b: str) -> str:
    """Normalized key for an unordered pair of profiles."""
    low, high = sorted((profile_a, profile_b))
    return f"{low}|{high}"


class NetworkEdge(BaseModel):
    """Relationship between two profiles.

    Undirected for queries; ``from_profile_id`` keeps the original direction.
    ``version`` is bumped on every write and used for compare-and-swap.
    """

    edge_id: str
    from_profile_id: str
    to_profile_id: str
    edge_type: EdgeType = EdgeType.DIRECT
    context: EdgeContext = EdgeContext.GENERAL
    strength: float = Field(default=0.5, ge=0.0, le=1.0)
    trust: float = Field(default=0.5, ge=0.0, le=1.0)
    status: EdgeStatus = EdgeStatus.PENDING
    introduced_by: str | None = None
    introduction_message: str | None = None
    created_at: datetime
    updated_at: datetime
    last_interaction_at: datetime | None = None
    version: int = Field(default=0, ge=0)

    @property
    def pair_key(self) -> str:
        return pair_key(self.from_profile_id, self.to_profile_id)

    def involves(self, profile_id: str) -> bool:
        return profile_id in (self.from_profile_id, self.to_profile_id)

    def other_end(self, profile_id: str) -> str:
        """Return the counterpart of ``profile_id`` on this edge."""
        if profile_id == self.from_profile_id:
            return self.to_profile_id
        if profile_id == self.to_profile_id:
            return self.from_profile_id
        msg = f"Profile {profile_id} is not part of edge {self.edge_id}"
        raise ValueError(msg)


class TrustSignal(BaseModel):
    """One piece of trust evidence attached to exactly one edge. Append-only."""

    signal_id: str
    edge_id: str
    signal_type: SignalType
    weight: float = Field(..., ge=0.0, le=1.0)
    evidence: str | None = None
    reference_id: str | None = None
    reference_type: str | None = None
    created_at: datetime
    expires_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


class ConnectionRequest(BaseModel):
    """A pending negotiation that becomes an edge on acceptance."""

    request_id: str
    from_profile_id: str
    to_profile_id: str
    request_type: RequestType = RequestType.DIRECT
    message: str | None = None
    introducer_profile_id: str | None = None
    status: RequestStatus = RequestStatus.PENDING
    created_at: datetime
    responded_at: datetime | None = None
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class InteractionFeedback(BaseModel):
    """Append-only rating of an interaction tied to an edge."""

    feedback_id: str
    edge_id: str
    from_profile_id: str
    interaction_type: InteractionType
    rating: FeedbackRating
    note: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class TrustBreakdown(BaseModel):
    """Per-component trust values for explainability."""

    collaboration: float = Field(default=0.0, ge=0.0, le=1.0)
    mutuals: float = Field(default=0.0, ge=0.0, le=1.0)
    endorsement: float = Field(default=0.0, ge=0.0, le=1.0)
    interaction_quality: float = Field(default=0.0, ge=0.0, le=1.0)
    freshness: float = Field(default=0.0, ge=0.0, le=1.0)
    total: float = Field(default=0.0, ge=0.0, le=1.0)


class IntroductionPath(BaseModel):
    """Two-hop chain from -> via -> to."""

    via_profile_id: str
    via_profile_name: str
    trust_score: float = Field(..., ge=0.0, le=1.0)
    reason: str


class DecisionReason(BaseModel):
    """Human-readable justification attached to a recommendation."""

    type: ReasonType
    message: str


class NetworkDecision(BaseModel):
    """Decision engine output. ``reasons`` is never empty."""

    recommendation: Recommendation
    confidence: int = Field(..., ge=0, le=100)
    reasons: list[DecisionReason] = Field(default_factory=list)
    suggested_path: list[IntroductionPath] | None = None
    trust_breakdown: TrustBreakdown | None = None
    intent: NetworkIntent | None = None


class ConnectionSuggestion(BaseModel):
    """A ranked friend-of-friend candidate."""

    profile: ProfileSummary
    trust_score: float = Field(..., ge=0.0, le=1.0)
    mutual_count: int = Field(..., ge=0)
    reasons: list[DecisionReason] = Field(default_factory=list)
    suggested_path: IntroductionPath | None = None
    badge: SuggestionBadge | None = None


class NetworkHealthScore(BaseModel):
    """Aggregate statistics for one profile's network."""

    total_connections: int = 0
    active_connections: int = 0
    average_trust: float = 0.0
    diversity_score: float = 0.0
    strength_score: float = 0.0
    suggestions: list[str] = Field(default_factory=list)


class ConnectionWithProfile(NetworkEdge):
    """Active edge joined with the counterpart's profile."""

    profile: ProfileSummary
    mutual_count: int = 0
    signals: list[TrustSignal] = Field(default_factory=list)


class ConnectionRequestWithProfile(ConnectionRequest):
    """Pending request joined with sender and introducer profiles."""

    from_profile: ProfileSummary
    introducer_profile: ProfileSummary | None = None


class NetworkStats(BaseModel):
    """Store-wide counts for the admin endpoint."""

    profiles: int = 0
    edges_by_status: dict[str, int] = Field(default_factory=dict)
    signals: int = 0
    pending_requests: int = 0
    feedback: int = 0
