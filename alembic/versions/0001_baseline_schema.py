"""Baseline schema: accounts, wallet, badges, challenges, participants, posts

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_baseline"
down_revision = None
branch_labels = None
depends_on = None


def _ts(name: str, **kw) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), **kw)


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(15), nullable=True, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="farmer"),
        sa.Column("profile_image", sa.String(500), server_default=""),
        sa.Column("is_email_verified", sa.Boolean(), server_default=sa.false()),
        sa.Column("is_phone_verified", sa.Boolean(), server_default=sa.false()),
        sa.Column("otp_code", sa.String(6), nullable=True),
        _ts("otp_expires_at", nullable=True),
        sa.Column("language", sa.String(5), server_default="en"),
        sa.Column("theme", sa.String(10), server_default="light"),
        sa.Column("notify_email", sa.Boolean(), server_default=sa.true()),
        sa.Column("notify_push", sa.Boolean(), server_default=sa.true()),
        sa.Column("notify_sms", sa.Boolean(), server_default=sa.false()),
        sa.Column("location_state", sa.String(100), nullable=True),
        sa.Column("location_district", sa.String(100), nullable=True),
        sa.Column("location_village", sa.String(100), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("farming_experience", sa.String(20), server_default="beginner"),
        sa.Column("farm_size", sa.Float(), nullable=True),
        sa.Column("crops", postgresql.JSONB(), nullable=True),
        sa.Column("irrigation_type", sa.String(20), nullable=True),
        sa.Column("level", sa.Integer(), server_default="1"),
        sa.Column("experience", sa.Integer(), server_default="0"),
        sa.Column("points", sa.Integer(), server_default="0"),
        sa.Column("streak", sa.Integer(), server_default="0"),
        _ts("last_active_at", nullable=True),
        sa.Column("balance", sa.Integer(), server_default="0"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        _ts("last_login_at", nullable=True),
        _ts("created_at", server_default=sa.func.now()),
        _ts("updated_at", server_default=sa.func.now()),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index("ix_accounts_points_desc", "accounts", ["points"])
    op.create_index("ix_accounts_level_desc", "accounts", ["level"])

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "account_id", sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(255), server_default=""),
        _ts("timestamp", server_default=sa.func.now()),
    )
    op.create_index(
        "ix_wallet_transactions_account_time", "wallet_transactions", ["account_id", "timestamp"],
    )

    op.create_table(
        "account_badges",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "account_id", sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("badge_id", sa.String(64), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        _ts("earned_at", server_default=sa.func.now()),
        sa.UniqueConstraint("account_id", "badge_id", name="uq_account_badges_account_badge"),
    )

    op.create_table(
        "challenges",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("difficulty", sa.String(10), server_default="easy"),
        sa.Column("type", sa.String(10), server_default="daily"),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("requirements", postgresql.JSONB(), nullable=True),
        sa.Column("instructions", postgresql.JSONB(), nullable=True),
        sa.Column("resources", postgresql.JSONB(), nullable=True),
        sa.Column("rewards", postgresql.JSONB(), nullable=True),
        sa.Column("tags", postgresql.JSONB(), nullable=True),
        _ts("starts_at", server_default=sa.func.now()),
        _ts("ends_at", nullable=True),
        sa.Column("time_limit_minutes", sa.Integer(), nullable=True),
        sa.Column("eligible_roles", postgresql.JSONB(), nullable=True),
        sa.Column("eligible_experience", sa.String(20), nullable=True),
        sa.Column("eligible_states", postgresql.JSONB(), nullable=True),
        sa.Column("eligible_districts", postgresql.JSONB(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("is_featured", sa.Boolean(), server_default=sa.false()),
        sa.Column(
            "created_by", sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("total_participants", sa.Integer(), server_default="0"),
        sa.Column("completed_participants", sa.Integer(), server_default="0"),
        sa.Column("average_completion_minutes", sa.Float(), nullable=True),
        sa.Column("success_rate", sa.Float(), nullable=True),
        _ts("created_at", server_default=sa.func.now()),
        _ts("updated_at", server_default=sa.func.now()),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index("ix_challenges_category", "challenges", ["category"])
    op.create_index("ix_challenges_difficulty", "challenges", ["difficulty"])
    op.create_index("ix_challenges_type", "challenges", ["type"])
    op.create_index("ix_challenges_active_featured", "challenges", ["is_active", "is_featured"])
    op.create_index("ix_challenges_window", "challenges", ["starts_at", "ends_at"])

    op.create_table(
        "challenge_participants",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "challenge_id", sa.Integer(),
            sa.ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "account_id", sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _ts("joined_at", server_default=sa.func.now()),
        _ts("completed_at", nullable=True),
        sa.Column("submissions", postgresql.JSONB(), nullable=True),
        sa.Column("points_earned", sa.Integer(), server_default="0"),
        sa.UniqueConstraint(
            "challenge_id", "account_id", name="uq_challenge_participants_challenge_account",
        ),
    )
    op.create_index(
        "ix_challenge_participants_account", "challenge_participants", ["account_id"],
    )

    op.create_table(
        "community_posts",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "author_id", sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("author_name", sa.String(101), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("likes", sa.Integer(), server_default="0"),
        sa.Column("comments", sa.Integer(), server_default="0"),
        _ts("created_at", server_default=sa.func.now()),
    )
    op.create_index(
        "ix_community_posts_category_time", "community_posts", ["category", "created_at"],
    )


def downgrade() -> None:
    op.drop_table("community_posts")
    op.drop_table("challenge_participants")
    op.drop_table("challenges")
    op.drop_table("account_badges")
    op.drop_table("wallet_transactions")
    op.drop_table("accounts")
