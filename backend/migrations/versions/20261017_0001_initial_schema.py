from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "contests",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=24), nullable=False),
        sa.Column("status", sa.String(length=24), nullable=False, server_default="DRAFT"),
        sa.Column("registration_start", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("registration_end", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("contest_start", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("contest_end", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("results_published", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "results_published IS NULL OR status = 'COMPLETED'",
            name="ck_contest_results_only_when_completed",
        ),
    )
    op.create_index("ix_contests_created_by", "contests", ["created_by"])

    op.create_table(
        "contest_user_roles",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("contest_id", sa.Uuid(), sa.ForeignKey("contests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(length=24), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "contest_id", name="uq_contest_role_one_per_user"),
    )
    op.create_index("ix_contest_user_roles_contest_id", "contest_user_roles", ["contest_id"])
    op.create_index("ix_contest_user_roles_user_id", "contest_user_roles", ["user_id"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("contest_id", sa.Uuid(), sa.ForeignKey("contests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("age_min", sa.Integer(), nullable=True),
        sa.Column("age_max", sa.Integer(), nullable=True),
        sa.Column("sex", sa.String(length=16), nullable=True),
        sa.Column("product_type", sa.String(length=80), nullable=True),
        sa.Column("weight_min", sa.Float(), nullable=True),
        sa.Column("weight_max", sa.Float(), nullable=True),
        sa.Column("max_entries", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_categories_contest_id", "categories", ["contest_id"])

    op.create_table(
        "criteria",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("contest_id", sa.Uuid(), sa.ForeignKey("contests.id", ondelete="CASCADE"), nullable=True),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id", ondelete="CASCADE"), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=False, server_default="1"),
        sa.Column("max_score", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "(contest_id IS NOT NULL AND category_id IS NULL) OR (contest_id IS NULL AND category_id IS NOT NULL)",
            name="ck_criteria_single_scope",
        ),
        sa.CheckConstraint("weight > 0", name="ck_criteria_weight_positive"),
        sa.CheckConstraint("max_score > 0", name="ck_criteria_max_score_positive"),
    )
    op.create_index("ix_criteria_contest_id", "criteria", ["contest_id"])
    op.create_index("ix_criteria_category_id", "criteria", ["category_id"])

    op.create_table(
        "participations",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("contest_id", sa.Uuid(), sa.ForeignKey("contests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="PENDING"),
        sa.Column("registered_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("approved_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("user_id", "contest_id", name="uq_participation_one_per_contest"),
    )
    op.create_index("ix_participations_contest_id", "participations", ["contest_id"])
    op.create_index("ix_participations_user_id", "participations", ["user_id"])

    op.create_table(
        "livestock",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("breed", sa.String(length=80), nullable=True),
        sa.Column("sex", sa.String(length=16), nullable=True),
        sa.Column("registration_number", sa.String(length=64), nullable=True),
        sa.Column("born_on", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_livestock_owner_id", "livestock", ["owner_id"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("participation_id", sa.Uuid(), sa.ForeignKey("participations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("contest_id", sa.Uuid(), sa.ForeignKey("contests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("livestock_id", sa.Uuid(), sa.ForeignKey("livestock.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="DRAFT"),
        sa.Column("metadata_json", JSONType, nullable=False),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_submissions_participation_id", "submissions", ["participation_id"])
    op.create_index("ix_submissions_contest_id", "submissions", ["contest_id"])
    op.create_index("ix_submissions_category_id", "submissions", ["category_id"])
    op.create_index("ix_submissions_livestock_id", "submissions", ["livestock_id"])

    op.create_table(
        "submission_media",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("mime_type", sa.String(length=64), nullable=True),
        sa.Column("caption", sa.String(length=255), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_submission_media_submission_id", "submission_media", ["submission_id"])

    op.create_table(
        "judging_scores",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("judge_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("criteria_id", sa.Uuid(), sa.ForeignKey("criteria.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.UniqueConstraint("judge_id", "submission_id", "criteria_id", name="uq_score_once_per_judge_criteria"),
        sa.CheckConstraint("score >= 0", name="ck_score_non_negative"),
    )
    op.create_index("ix_judging_scores_judge_id", "judging_scores", ["judge_id"])
    op.create_index("ix_judging_scores_submission_id", "judging_scores", ["submission_id"])
    op.create_index("ix_judging_scores_criteria_id", "judging_scores", ["criteria_id"])


def downgrade() -> None:
    op.drop_table("judging_scores")
    op.drop_table("submission_media")
    op.drop_table("submissions")
    op.drop_table("livestock")
    op.drop_table("participations")
    op.drop_table("criteria")
    op.drop_table("categories")
    op.drop_table("contest_user_roles")
    op.drop_table("contests")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
