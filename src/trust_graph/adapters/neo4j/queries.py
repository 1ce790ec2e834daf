"""Cypher query templates for the trust graph.

Graph layout:

  (:Connection)-[:FROM]->(:Profile)
  (:Connection)-[:TO]->(:Profile)
  (:Connection)-[:HAS_SIGNAL]->(:TrustSignal)
  (:Connection)-[:HAS_FEEDBACK]->(:InteractionFeedback)
  (:ConnectionRequest)            standalone, keyed by request_id

A connection is a node rather than a relationship so it can carry a
uniqueness constraint on its normalized ``pair_key``. Pending requests carry
``pending_key`` ("from|to"), cleared on any terminal transition, which makes
"one pending request per ordered pair" a database constraint.

Datetimes are ISO-8601 UTC strings with fixed microsecond precision, so
string comparison orders them correctly.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------

CONSTRAINT_PROFILE_PK = (
    "CREATE CONSTRAINT profile_pk IF NOT EXISTS FOR (p:Profile) REQUIRE p.profile_id IS UNIQUE"
)

CONSTRAINT_CONNECTION_PK = (
    "CREATE CONSTRAINT connection_pk IF NOT EXISTS "
    "FOR (c:Connection) REQUIRE c.edge_id IS UNIQUE"
)

CONSTRAINT_CONNECTION_PAIR = (
    "CREATE CONSTRAINT connection_pair IF NOT EXISTS "
    "FOR (c:Connection) REQUIRE c.pair_key IS UNIQUE"
)

CONSTRAINT_SIGNAL_PK = (
    "CREATE CONSTRAINT trust_signal_pk IF NOT EXISTS "
    "FOR (s:TrustSignal) REQUIRE s.signal_id IS UNIQUE"
)

CONSTRAINT_REQUEST_PK = (
    "CREATE CONSTRAINT request_pk IF NOT EXISTS "
    "FOR (r:ConnectionRequest) REQUIRE r.request_id IS UNIQUE"
)

CONSTRAINT_REQUEST_PENDING = (
    "CREATE CONSTRAINT request_pending IF NOT EXISTS "
    "FOR (r:ConnectionRequest) REQUIRE r.pending_key IS UNIQUE"
)

CONSTRAINT_FEEDBACK_PK = (
    "CREATE CONSTRAINT feedback_pk IF NOT EXISTS "
    "FOR (f:InteractionFeedback) REQUIRE f.feedback_id IS UNIQUE"
)

ALL_CONSTRAINTS = [
    CONSTRAINT_PROFILE_PK,
    CONSTRAINT_CONNECTION_PK,
    CONSTRAINT_CONNECTION_PAIR,
    CONSTRAINT_SIGNAL_PK,
    CONSTRAINT_REQUEST_PK,
    CONSTRAINT_REQUEST_PENDING,
    CONSTRAINT_FEEDBACK_PK,
]

# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

UPSERT_PROFILE = """
MERGE (p:Profile {profile_id: $profile_id})
SET p.name = $name,
    p.headline = $headline,
    p.photo_url = $photo_url,
    p.role_tags = $role_tags,
    p.domains = $domains
""".strip()

# Profile nodes created implicitly by an edge have no name until the
# profile subsystem pushes a summary; those count as unknown.
GET_PROFILES = """
UNWIND $profile_ids AS pid
MATCH (p:Profile {profile_id: pid})
WHERE p.name IS NOT NULL
RETURN p
""".strip()

# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------

GET_EDGE = """
MATCH (c:Connection {edge_id: $edge_id})
RETURN c
""".strip()

GET_EDGE_BY_PAIR = """
MATCH (c:Connection {pair_key: $pair_key})
RETURN c
""".strip()

GET_ACTIVE_NEIGHBORS = """
MATCH (:Profile {profile_id: $profile_id})<-[:FROM|TO]-(c:Connection {status: 'active'})
MATCH (c)-[:FROM|TO]->(other:Profile)
WHERE other.profile_id <> $profile_id
RETURN DISTINCT other.profile_id AS profile_id
ORDER BY profile_id
""".strip()

GET_EDGES_FOR_PROFILE = """
MATCH (:Profile {profile_id: $profile_id})<-[:FROM|TO]-(c:Connection)
WHERE $status IS NULL OR c.status = $status
RETURN c
""".strip()

# Compare-and-swap on version; no row back means missing or stale.
UPDATE_EDGE_IF_VERSION = """
MATCH (c:Connection {edge_id: $edge_id})
WHERE c.version = $expected_version
SET c.edge_type = $edge_type,
    c.context = $context,
    c.strength = $strength,
    c.trust = $trust,
    c.status = $status,
    c.introduced_by = $introduced_by,
    c.introduction_message = $introduction_message,
    c.updated_at = $updated_at,
    c.last_interaction_at = $last_interaction_at,
    c.version = c.version + 1
RETURN c
""".strip()

# Write-locks the pair's connection for the rest of the transaction so a
# concurrent block cannot land between the status check and the upsert.
LOCK_EDGE_BY_PAIR = """
MATCH (c:Connection {pair_key: $pair_key})
SET c._lock = true
WITH c
REMOVE c._lock
RETURN c.status AS status
""".strip()

# Create the pair's connection or reactivate the existing one. Callers must
# refuse a blocked pair first (LOCK_EDGE_BY_PAIR).
UPSERT_ACCEPTED_EDGE = """
MERGE (c:Connection {pair_key: $pair_key})
ON CREATE SET c.edge_id = $edge_id,
              c.from_profile_id = $from_profile_id,
              c.to_profile_id = $to_profile_id,
              c.edge_type = $edge_type,
              c.context = $context,
              c.strength = $strength,
              c.trust = $trust,
              c.status = 'active',
              c.introduced_by = $introduced_by,
              c.introduction_message = $introduction_message,
              c.created_at = $created_at,
              c.updated_at = $updated_at,
              c.version = 0
ON MATCH SET c.status = 'active',
             c.edge_type = $edge_type,
             c.introduced_by = coalesce($introduced_by, c.introduced_by),
             c.introduction_message = coalesce($introduction_message, c.introduction_message),
             c.updated_at = $updated_at,
             c.version = c.version + 1
WITH c
MERGE (a:Profile {profile_id: c.from_profile_id})
MERGE (b:Profile {profile_id: c.to_profile_id})
MERGE (c)-[:FROM]->(a)
MERGE (c)-[:TO]->(b)
RETURN c
""".strip()

# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

APPEND_SIGNAL = """
MATCH (c:Connection {edge_id: $edge_id})
CREATE (s:TrustSignal {
    signal_id: $signal_id,
    edge_id: $edge_id,
    signal_type: $signal_type,
    weight: $weight,
    evidence: $evidence,
    reference_id: $reference_id,
    reference_type: $reference_type,
    created_at: $created_at,
    expires_at: $expires_at
})
CREATE (c)-[:HAS_SIGNAL]->(s)
RETURN s.signal_id AS signal_id
""".strip()

GET_ACTIVE_SIGNALS = """
MATCH (:Connection {edge_id: $edge_id})-[:HAS_SIGNAL]->(s:TrustSignal)
WHERE s.expires_at IS NULL OR s.expires_at > $now
RETURN s
ORDER BY s.weight DESC, s.created_at ASC
""".strip()

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

EXPIRE_STALE_PENDING_FOR_PAIR = """
MATCH (r:ConnectionRequest {pending_key: $pending_key})
WHERE r.expires_at <= $now
SET r.status = 'expired',
    r.responded_at = $now,
    r.pending_key = null
RETURN count(r) AS expired
""".strip()

CREATE_REQUEST = """
CREATE (r:ConnectionRequest {
    request_id: $request_id,
    from_profile_id: $from_profile_id,
    to_profile_id: $to_profile_id,
    request_type: $request_type,
    message: $message,
    introducer_profile_id: $introducer_profile_id,
    status: 'pending',
    created_at: $created_at,
    expires_at: $expires_at,
    pending_key: $pending_key
})
RETURN r
""".strip()

GET_REQUEST = """
MATCH (r:ConnectionRequest {request_id: $request_id})
RETURN r
""".strip()

GET_PENDING_REQUESTS_FOR = """
MATCH (r:ConnectionRequest {to_profile_id: $profile_id, status: 'pending'})
WHERE r.expires_at > $now
RETURN r
ORDER BY r.created_at DESC
""".strip()

GET_PENDING_REQUEST_PEERS = """
MATCH (r:ConnectionRequest {status: 'pending'})
WHERE (r.from_profile_id = $profile_id OR r.to_profile_id = $profile_id)
  AND r.expires_at > $now
RETURN DISTINCT CASE
    WHEN r.from_profile_id = $profile_id THEN r.to_profile_id
    ELSE r.from_profile_id
END AS peer_id
""".strip()

# The leading SET takes the node write lock before status is read, so two
# concurrent transactions cannot both see 'pending'.
CLAIM_PENDING_REQUEST = """
MATCH (r:ConnectionRequest {request_id: $request_id})
SET r._claim = true
WITH r
REMOVE r._claim
WITH r
WHERE r.status = 'pending' AND r.expires_at > $now
SET r.status = $status,
    r.responded_at = $now,
    r.pending_key = null
RETURN r
""".strip()

# Unlike the claim, a pending request past its TTL may still be moved to
# 'expired' (or any other terminal status) here.
RESPOND_PENDING_REQUEST = """
MATCH (r:ConnectionRequest {request_id: $request_id})
SET r._claim = true
WITH r
REMOVE r._claim
WITH r
WHERE r.status = 'pending'
SET r.status = $status,
    r.responded_at = $now,
    r.pending_key = null
RETURN r
""".strip()

EXPIRE_REQUESTS = """
MATCH (r:ConnectionRequest {status: 'pending'})
WHERE r.expires_at <= $now
SET r.status = 'expired',
    r.responded_at = $now,
    r.pending_key = null
RETURN count(r) AS expired
""".strip()

# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------

APPEND_FEEDBACK = """
MATCH (c:Connection {edge_id: $edge_id})
CREATE (f:InteractionFeedback {
    feedback_id: $feedback_id,
    edge_id: $edge_id,
    from_profile_id: $from_profile_id,
    interaction_type: $interaction_type,
    rating: $rating,
    note: $note,
    created_at: $created_at
})
CREATE (c)-[:HAS_FEEDBACK]->(f)
RETURN f.feedback_id AS feedback_id
""".strip()

# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

COUNT_PROFILES = """
MATCH (p:Profile)
WHERE p.name IS NOT NULL
RETURN count(p) AS cnt
""".strip()

COUNT_EDGES_BY_STATUS = """
MATCH (c:Connection)
RETURN c.status AS status, count(c) AS cnt
""".strip()

COUNT_SIGNALS = "MATCH (s:TrustSignal) RETURN count(s) AS cnt"

COUNT_PENDING_REQUESTS = "MATCH (r:ConnectionRequest {status: 'pending'}) RETURN count(r) AS cnt"

COUNT_FEEDBACK = "MATCH (f:InteractionFeedback) RETURN count(f) AS cnt"
