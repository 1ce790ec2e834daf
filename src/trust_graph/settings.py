"""Application settings via Pydantic BaseSettings.

All configuration uses the TG_ environment variable prefix.
Centralized here to prevent hardcoded magic numbers across the codebase:
trust weighting, recommendation thresholds, badge cut-offs, health rules,
request TTL and feedback step sizes are all tunable per deployment.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

# ---------------------------------------------------------------------------
# Trust weighting policy
# ---------------------------------------------------------------------------

# Decision-time trust: weighted sum of the five signal components.
# Raw connection count is intentionally absent from this table.
TRUST_COMPONENT_WEIGHTS: dict[str, float] = {
    "collaboration": 0.35,
    "mutuals": 0.20,
    "endorsement": 0.20,
    "interaction_quality": 0.15,
    "freshness": 0.10,
}

# Storage-time trust: mean signal weight multiplied by this factor, capped at 1.0.
TRUST_AMPLIFICATION: float = 1.2


class Neo4jSettings(BaseSettings):
    """Neo4j connection settings."""

    model_config = {"env_prefix": "TG_NEO4J_"}

    uri: str = "bolt://localhost:7687"
    username: str = "neo4j"
    password: str = "trust-graph-dev-password"
    database: str = "neo4j"
    max_connection_pool_size: int = 50


class RedisSettings(BaseSettings):
    """Redis connection settings for per-edge write locks."""

    model_config = {"env_prefix": "TG_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str | None = None

    lock_key_prefix: str = "lock:edge:"

    # Lock auto-release (seconds) in case the holder dies mid-update
    lock_timeout_s: float = 5.0

    # How long a writer waits for a busy edge before reporting a conflict
    lock_blocking_timeout_s: float = 2.0


class TrustSettings(BaseSettings):
    """Trust scoring parameters."""

    model_config = {"env_prefix": "TG_TRUST_"}

    weight_collaboration: float = TRUST_COMPONENT_WEIGHTS["collaboration"]
    weight_mutuals: float = TRUST_COMPONENT_WEIGHTS["mutuals"]
    weight_endorsement: float = TRUST_COMPONENT_WEIGHTS["endorsement"]
    weight_interaction_quality: float = TRUST_COMPONENT_WEIGHTS["interaction_quality"]
    weight_freshness: float = TRUST_COMPONENT_WEIGHTS["freshness"]

    amplification: float = TRUST_AMPLIFICATION

    # Values a freshly created edge starts with before any signal lands
    default_trust: float = Field(default=0.5, ge=0.0, le=1.0)
    default_strength: float = Field(default=0.5, ge=0.0, le=1.0)

    def component_weights(self) -> dict[str, float]:
        """Return the component weight table keyed like ``TRUST_COMPONENT_WEIGHTS``."""
        return {
            "collaboration": self.weight_collaboration,
            "mutuals": self.weight_mutuals,
            "endorsement": self.weight_endorsement,
            "interaction_quality": self.weight_interaction_quality,
            "freshness": self.weight_freshness,
        }


class DecisionSettings(BaseSettings):
    """Decision engine thresholds."""

    model_config = {"env_prefix": "TG_DECISION_"}

    do_threshold: float = 0.7
    consider_threshold: float = 0.4

    # Mutuals component above this earns a "mutual connections" reason
    mutual_reason_threshold: float = 0.1

    max_paths: int = 3


class SuggestionSettings(BaseSettings):
    """Suggestion ranker limits and badge cut-offs."""

    model_config = {"env_prefix": "TG_SUGGEST_"}

    default_limit: int = 10
    max_limit: int = 50

    high_trust_threshold: float = 0.7
    mutual_heavy_count: int = 3
    good_fit_threshold: float = 0.5


class HealthSettings(BaseSettings):
    """Network health rules."""

    model_config = {"env_prefix": "TG_HEALTH_"}

    min_connections: int = 10
    low_trust_threshold: float = 0.5
    low_diversity_threshold: float = 0.5

    # Distinct domains at which diversity_score saturates at 1.0
    diversity_ceiling: int = 5


class RequestSettings(BaseSettings):
    """Connection request lifecycle settings."""

    model_config = {"env_prefix": "TG_REQUEST_"}

    ttl_days: int = 30
    intro_signal_weight: float = Field(default=0.6, ge=0.0, le=1.0)


class FeedbackSettings(BaseSettings):
    """Interaction feedback reinforcement settings."""

    model_config = {"env_prefix": "TG_FEEDBACK_"}

    positive_signal_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    strength_step: float = 0.1


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "TG_"}

    app_name: str = "trust-graph"
    debug: bool = False
    log_level: str = "INFO"

    store_backend: Literal["neo4j", "memory"] = "neo4j"
    lock_backend: Literal["redis", "memory"] = "redis"

    neo4j: Neo4jSettings = Field(default_factory=Neo4jSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    trust: TrustSettings = Field(default_factory=TrustSettings)
    decision: DecisionSettings = Field(default_factory=DecisionSettings)
    suggestion: SuggestionSettings = Field(default_factory=SuggestionSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    request: RequestSettings = Field(default_factory=RequestSettings)
    feedback: FeedbackSettings = Field(default_factory=FeedbackSettings)
