"""create federation tables

Revision ID: a3f1c9d2e7b4
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM

from alembic import op

# revision identifiers, used by Alembic.
revision: str | None = "a3f1c9d2e7b4"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

account_type_enum = ENUM("ADMIN", "VIEWER", name="account_type", create_type=True)
email_campaign_status_enum = ENUM(
    "SENDING", "COMPLETED", name="email_campaign_status", create_type=True
)


def upgrade() -> None:
    account_type_enum.create(op.get_bind(), checkfirst=True)
    email_campaign_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column(
            "account_type",
            ENUM(name="account_type", create_type=False),
            server_default="VIEWER",
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("game_type", sa.String(), nullable=False),
        sa.Column("level", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("game_type", "level"),
    )
    op.create_index(op.f("ix_categories_id"), "categories", ["id"], unique=False)

    op.create_table(
        "players",
        sa.Column("licence", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("club", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("telephone", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="t", nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("licence"),
    )

    op.create_table(
        "tournaments",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("category_id", sa.BigInteger(), nullable=False),
        sa.Column("tournament_number", sa.Integer(), nullable=False),
        sa.Column("season", sa.String(), nullable=False),
        sa.Column("tournament_date", sa.Date(), nullable=True),
        sa.Column("import_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("results_email_sent", sa.Boolean(), server_default="f", nullable=False),
        sa.Column("results_email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("tournament_number BETWEEN 1 AND 4", name="ck_tournaments_number"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category_id", "tournament_number", "season"),
    )
    op.create_index(op.f("ix_tournaments_id"), "tournaments", ["id"], unique=False)
    op.create_index(op.f("ix_tournaments_category_id"), "tournaments", ["category_id"], unique=False)
    op.create_index(op.f("ix_tournaments_season"), "tournaments", ["season"], unique=False)

    op.create_table(
        "tournament_results",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("tournament_id", sa.BigInteger(), nullable=False),
        sa.Column("licence", sa.String(), nullable=False),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("match_points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("moyenne", sa.Float(), server_default="0", nullable=False),
        sa.Column("serie", sa.Integer(), server_default="0", nullable=False),
        sa.Column("points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("reprises", sa.Integer(), server_default="0", nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["licence"], ["players.licence"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tournament_id", "licence"),
    )
    op.create_index(op.f("ix_tournament_results_id"), "tournament_results", ["id"], unique=False)
    op.create_index(
        op.f("ix_tournament_results_tournament_id"), "tournament_results", ["tournament_id"], unique=False
    )
    op.create_index(op.f("ix_tournament_results_licence"), "tournament_results", ["licence"], unique=False)

    op.create_table(
        "rankings",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("category_id", sa.BigInteger(), nullable=False),
        sa.Column("season", sa.String(), nullable=False),
        sa.Column("licence", sa.String(), nullable=False),
        sa.Column("total_match_points", sa.Integer(), nullable=False),
        sa.Column("total_points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_reprises", sa.Integer(), server_default="0", nullable=False),
        sa.Column("avg_moyenne", sa.Float(), nullable=False),
        sa.Column("best_serie", sa.Integer(), nullable=False),
        sa.Column("rank_position", sa.Integer(), nullable=False),
        sa.Column("tournament_1_points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("tournament_2_points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("tournament_3_points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category_id", "season", "licence"),
    )
    op.create_index(op.f("ix_rankings_id"), "rankings", ["id"], unique=False)
    op.create_index(op.f("ix_rankings_category_id"), "rankings", ["category_id"], unique=False)
    op.create_index(op.f("ix_rankings_season"), "rankings", ["season"], unique=False)

    op.create_table(
        "app_settings",
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )

    op.create_table(
        "email_campaigns",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("template_key", sa.String(), nullable=False),
        sa.Column("recipients_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("sent_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("failed_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "status",
            ENUM(name="email_campaign_status", create_type=False),
            server_default="SENDING",
            nullable=False,
        ),
        sa.Column("tournament_id", sa.BigInteger(), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_email_campaigns_id"), "email_campaigns", ["id"], unique=False)
    op.create_index(
        op.f("ix_email_campaigns_template_key"), "email_campaigns", ["template_key"], unique=False
    )

    op.create_table(
        "finale_relances",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("category_id", sa.BigInteger(), nullable=False),
        sa.Column("season", sa.String(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("recipients_count", sa.Integer(), server_default="0", nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category_id", "season"),
    )
    op.create_index(op.f("ix_finale_relances_id"), "finale_relances", ["id"], unique=False)


def downgrade() -> None:
    op.drop_table("finale_relances")
    op.drop_table("email_campaigns")
    op.drop_table("app_settings")
    op.drop_table("rankings")
    op.drop_table("tournament_results")
    op.drop_table("tournaments")
    op.drop_table("players")
    op.drop_table("categories")
    op.drop_table("users")
    email_campaign_status_enum.drop(op.get_bind(), checkfirst=True)
    account_type_enum.drop(op.get_bind(), checkfirst=True)
