"""PostgreSQL schema used by the governance adapters.

Statements are idempotent (``IF NOT EXISTS``) and applied in order by
``create_governance_schema``. Ballot uniqueness per (motion, member) is
enforced by the ``uq_ballots_motion_member`` constraint.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

SCHEMA_DDL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS quorum_policies (
        id UUID PRIMARY KEY,
        tenant_id UUID NOT NULL,
        name TEXT NOT NULL,
        mode TEXT NOT NULL DEFAULT 'single',
        denominator TEXT NOT NULL DEFAULT 'eligible_members',
        threshold DOUBLE PRECISION NOT NULL,
        threshold_call2 DOUBLE PRECISION,
        denominator2 TEXT,
        threshold2 DOUBLE PRECISION,
        include_proxies BOOLEAN NOT NULL DEFAULT TRUE,
        count_remote BOOLEAN NOT NULL DEFAULT TRUE,
        is_default BOOLEAN NOT NULL DEFAULT FALSE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS vote_policies (
        id UUID PRIMARY KEY,
        tenant_id UUID NOT NULL,
        name TEXT NOT NULL,
        base TEXT NOT NULL DEFAULT 'expressed',
        threshold DOUBLE PRECISION NOT NULL,
        abstention_as_against BOOLEAN NOT NULL DEFAULT FALSE,
        is_default BOOLEAN NOT NULL DEFAULT FALSE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS meetings (
        id UUID PRIMARY KEY,
        tenant_id UUID NOT NULL,
        title TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'draft',
        president_name TEXT,
        convocation_no SMALLINT NOT NULL DEFAULT 1,
        quorum_policy_id UUID REFERENCES quorum_policies (id),
        vote_policy_id UUID REFERENCES vote_policies (id),
        current_motion_id UUID,
        scheduled_at TIMESTAMPTZ,
        started_at TIMESTAMPTZ,
        ended_at TIMESTAMPTZ,
        frozen_at TIMESTAMPTZ,
        frozen_by TEXT,
        opened_by TEXT,
        paused_at TIMESTAMPTZ,
        paused_by TEXT,
        closed_by TEXT,
        validated_at TIMESTAMPTZ,
        validated_by TEXT,
        archived_at TIMESTAMPTZ,
        archived_by TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS members (
        id UUID PRIMARY KEY,
        tenant_id UUID NOT NULL,
        full_name TEXT NOT NULL,
        voting_power DOUBLE PRECISION NOT NULL DEFAULT 1,
        is_active BOOLEAN NOT NULL DEFAULT TRUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS motions (
        id UUID PRIMARY KEY,
        tenant_id UUID NOT NULL,
        meeting_id UUID NOT NULL REFERENCES meetings (id),
        title TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        secret BOOLEAN NOT NULL DEFAULT FALSE,
        position INTEGER NOT NULL DEFAULT 0,
        vote_policy_id UUID,
        quorum_policy_id UUID,
        opened_at TIMESTAMPTZ,
        closed_at TIMESTAMPTZ,
        manual_for DOUBLE PRECISION,
        manual_against DOUBLE PRECISION,
        manual_abstain DOUBLE PRECISION,
        manual_total DOUBLE PRECISION,
        manual_justification TEXT,
        official_for DOUBLE PRECISION,
        official_against DOUBLE PRECISION,
        official_abstain DOUBLE PRECISION,
        official_total DOUBLE PRECISION,
        official_source TEXT,
        decision TEXT NOT NULL DEFAULT 'pending',
        decision_reason TEXT,
        result_hash TEXT,
        consolidated_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS attendances (
        meeting_id UUID NOT NULL REFERENCES meetings (id),
        member_id UUID NOT NULL REFERENCES members (id),
        tenant_id UUID NOT NULL,
        mode TEXT NOT NULL,
        voting_power DOUBLE PRECISION NOT NULL DEFAULT 1,
        present_from_at TIMESTAMPTZ,
        PRIMARY KEY (meeting_id, member_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS proxies (
        id UUID PRIMARY KEY,
        meeting_id UUID NOT NULL REFERENCES meetings (id),
        tenant_id UUID NOT NULL,
        giver_member_id UUID NOT NULL REFERENCES members (id),
        receiver_member_id UUID NOT NULL REFERENCES members (id),
        created_at TIMESTAMPTZ NOT NULL,
        revoked_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ballots (
        id UUID PRIMARY KEY,
        tenant_id UUID NOT NULL,
        meeting_id UUID NOT NULL REFERENCES meetings (id),
        motion_id UUID NOT NULL REFERENCES motions (id),
        member_id UUID NOT NULL REFERENCES members (id),
        choice TEXT NOT NULL,
        weight DOUBLE PRECISION NOT NULL,
        cast_at TIMESTAMPTZ NOT NULL,
        source TEXT NOT NULL DEFAULT 'tablet',
        proxy_source_member_id UUID,
        CONSTRAINT uq_ballots_motion_member UNIQUE (motion_id, member_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS audit_events (
        id UUID PRIMARY KEY,
        tenant_id UUID NOT NULL,
        meeting_id UUID,
        event_type TEXT NOT NULL,
        resource_type TEXT NOT NULL,
        resource_id UUID NOT NULL,
        payload JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_motions_meeting ON motions (meeting_id, position)",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_proxies_active_giver "
    "ON proxies (meeting_id, giver_member_id) WHERE revoked_at IS NULL",
    "CREATE INDEX IF NOT EXISTS ix_audit_events_meeting ON audit_events (meeting_id, created_at)",
)


async def create_governance_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        for statement in SCHEMA_DDL:
            await conn.execute(text(statement))
