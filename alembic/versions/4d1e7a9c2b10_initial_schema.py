from alembic import op
import sqlalchemy as sa
from pgvector.sqlalchemy import Vector


revision = "4d1e7a9c2b10"
down_revision = None
branch_labels = None
depends_on = None


UUID = sa.dialects.postgresql.UUID(as_uuid=True)
EMBEDDING_DIMENSIONS = 3072

# Weeks start on Sunday: shift by a day around Postgres' Monday-based date_trunc.
POINT_SUMMARIES_VIEW = """
CREATE OR REPLACE VIEW point_summaries AS
SELECT
    profile_id,
    COALESCE(SUM(points), 0) AS total_points,
    COALESCE(SUM(points) FILTER (
        WHERE timestamp >= date_trunc('week', now() + interval '1 day') - interval '1 day'
    ), 0) AS weekly_points,
    COALESCE(SUM(points) FILTER (
        WHERE timestamp >= date_trunc('month', now())
    ), 0) AS monthly_points
FROM events
WHERE is_active
GROUP BY profile_id
"""


FIND_SIMILAR_EVENTS_FUNCTION = """
CREATE OR REPLACE FUNCTION find_similar_events(
    search_embedding vector,
    similarity_threshold double precision,
    max_results integer
)
RETURNS TABLE (
    id uuid,
    name varchar,
    description varchar,
    normalized_description varchar,
    points integer,
    "timestamp" timestamp,
    template_id uuid,
    profile_id uuid,
    similarity double precision
)
LANGUAGE sql STABLE
AS $$
    SELECT
        e.id,
        e.name,
        e.description,
        e.normalized_description,
        e.points,
        e.timestamp,
        e.template_id,
        e.profile_id,
        1 - (e.description_embedding <=> search_embedding) AS similarity
    FROM events e
    WHERE e.is_active
      AND e.description_embedding IS NOT NULL
      AND 1 - (e.description_embedding <=> search_embedding) >= similarity_threshold
    ORDER BY e.description_embedding <=> search_embedding
    LIMIT max_results
$$
"""


def _table_exists(bind, table_name: str) -> bool:
    insp = sa.inspect(bind)
    return table_name in insp.get_table_names()


def _embedding_type(bind):
    if bind.dialect.name == "postgresql":
        return Vector(EMBEDDING_DIMENSIONS)
    return sa.JSON()


def _timestamps():
    return [
        sa.Column("created_at", sa.TIMESTAMP(), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(), server_default=sa.text("now()"), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()

    if bind.dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    if not _table_exists(bind, "profiles"):
        op.create_table(
            "profiles",
            sa.Column("id", UUID, primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("avatar_url", sa.String(length=1000), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
        )

    if not _table_exists(bind, "templates"):
        op.create_table(
            "templates",
            sa.Column("id", UUID, primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.String(length=1000), nullable=False),
            sa.Column("default_points", sa.Integer(), nullable=False),
            sa.Column("frequency", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("last_seen", sa.TIMESTAMP(), nullable=True),
            sa.Column("ai_confidence", sa.Float(), nullable=True),
            sa.Column("generation_batch", sa.String(length=100), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
        )
        op.create_index("ix_templates_generation_batch", "templates", ["generation_batch"])

    if not _table_exists(bind, "events"):
        op.create_table(
            "events",
            sa.Column("id", UUID, primary_key=True, nullable=False),
            sa.Column("profile_id", UUID, sa.ForeignKey("profiles.id"), nullable=True),
            sa.Column("template_id", UUID, sa.ForeignKey("templates.id"), nullable=True),
            sa.Column("name", sa.String(length=200), nullable=True),
            sa.Column("description", sa.String(length=1000), nullable=False),
            sa.Column("normalized_description", sa.String(length=1000), nullable=True),
            sa.Column("description_embedding", _embedding_type(bind), nullable=True),
            sa.Column("points", sa.Integer(), nullable=False),
            sa.Column("timestamp", sa.TIMESTAMP(), nullable=False, server_default=sa.text("now()")),
            sa.Column("day_of_week", sa.String(length=10), nullable=False),
            sa.Column("day_of_month", sa.Integer(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
        )
        op.create_index("ix_events_profile_id", "events", ["profile_id"])
        op.create_index("ix_events_template_id", "events", ["template_id"])
        op.create_index("ix_events_timestamp", "events", ["timestamp"])

    if not _table_exists(bind, "rewards"):
        op.create_table(
            "rewards",
            sa.Column("id", UUID, primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("description", sa.String(length=255), nullable=True),
            sa.Column("point_cost", sa.Integer(), nullable=False),
            sa.Column("image_url", sa.String(length=1000), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.CheckConstraint("point_cost > 0", name="ck_rewards_point_cost_positive"),
        )

    if not _table_exists(bind, "redemptions"):
        op.create_table(
            "redemptions",
            sa.Column("id", UUID, primary_key=True, nullable=False),
            sa.Column("reward_id", UUID, sa.ForeignKey("rewards.id"), nullable=False),
            sa.Column("profile_id", UUID, sa.ForeignKey("profiles.id"), nullable=True),
            sa.Column("points_spent", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
            sa.Column("redeemed_at", sa.TIMESTAMP(), nullable=False, server_default=sa.text("now()")),
            sa.Column("withdrawn_at", sa.TIMESTAMP(), nullable=True),
            sa.CheckConstraint("status IN ('active', 'withdrawn')", name="ck_redemptions_status"),
        )
        op.create_index("ix_redemptions_reward_id", "redemptions", ["reward_id"])
        op.create_index("ix_redemptions_profile_id", "redemptions", ["profile_id"])

    if not _table_exists(bind, "template_analysis_runs"):
        op.create_table(
            "template_analysis_runs",
            sa.Column("id", UUID, primary_key=True, nullable=False),
            sa.Column("batch_id", sa.String(length=100), nullable=False),
            sa.Column("analyzed_events", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("templates_generated", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("model_input", sa.JSON(), nullable=True),
            sa.Column("model_output", sa.Text(), nullable=True),
            sa.Column("created_at", sa.TIMESTAMP(), server_default=sa.text("now()"), nullable=True),
        )
        op.create_index("ix_template_analysis_runs_batch_id", "template_analysis_runs", ["batch_id"])

    if bind.dialect.name == "postgresql":
        op.execute(POINT_SUMMARIES_VIEW)
        op.execute(FIND_SIMILAR_EVENTS_FUNCTION)


def downgrade() -> None:
    bind = op.get_bind()

    if bind.dialect.name == "postgresql":
        op.execute("DROP FUNCTION IF EXISTS find_similar_events(vector, double precision, integer)")
        op.execute("DROP VIEW IF EXISTS point_summaries")

    for table_name in (
        "template_analysis_runs",
        "redemptions",
        "rewards",
        "events",
        "templates",
        "profiles",
    ):
        if _table_exists(bind, table_name):
            op.drop_table(table_name)
