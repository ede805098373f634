from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base  # type: ignore[attr-defined]
from sqlalchemy.sql.sqltypes import BigInteger, Boolean, Date, DateTime, Enum, Float, Text

Base = declarative_base()
metadata = Base.metadata
DateTimeTZ = DateTime(timezone=True)

users = Table(
    "users",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("username", String, nullable=False, index=True, unique=True),
    Column("email", String, nullable=True),
    Column("password_hash", String, nullable=False),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column(
        "account_type",
        Enum("ADMIN", "VIEWER", name="account_type"),
        nullable=False,
        server_default="VIEWER",
    ),
)

categories = Table(
    "categories",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("game_type", String, nullable=False),
    Column("level", String, nullable=False),
    Column("display_name", String, nullable=False),
    UniqueConstraint("game_type", "level"),
)

players = Table(
    "players",
    metadata,
    Column("licence", String, primary_key=True),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("club", String, nullable=False),
    Column("email", String, nullable=True),
    Column("telephone", String, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default="t"),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

tournaments = Table(
    "tournaments",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("category_id", BigInteger, ForeignKey("categories.id"), nullable=False, index=True),
    Column("tournament_number", Integer, nullable=False),
    Column("season", String, nullable=False, index=True),
    Column("tournament_date", Date, nullable=True),
    Column("import_date", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("location", String, nullable=True),
    Column("results_email_sent", Boolean, nullable=False, server_default="f"),
    Column("results_email_sent_at", DateTimeTZ, nullable=True),
    UniqueConstraint("category_id", "tournament_number", "season"),
    CheckConstraint("tournament_number BETWEEN 1 AND 4", name="ck_tournaments_number"),
)

tournament_results = Table(
    "tournament_results",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column(
        "tournament_id",
        BigInteger,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("licence", String, ForeignKey("players.licence"), nullable=False, index=True),
    Column("player_name", String, nullable=False),
    Column("position", Integer, nullable=False),
    Column("match_points", Integer, nullable=False, server_default="0"),
    Column("moyenne", Float, nullable=False, server_default="0"),
    Column("serie", Integer, nullable=False, server_default="0"),
    Column("points", Integer, nullable=False, server_default="0"),
    Column("reprises", Integer, nullable=False, server_default="0"),
    UniqueConstraint("tournament_id", "licence"),
)

rankings = Table(
    "rankings",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("category_id", BigInteger, ForeignKey("categories.id"), nullable=False, index=True),
    Column("season", String, nullable=False, index=True),
    Column("licence", String, nullable=False),
    Column("total_match_points", Integer, nullable=False),
    Column("total_points", Integer, nullable=False, server_default="0"),
    Column("total_reprises", Integer, nullable=False, server_default="0"),
    Column("avg_moyenne", Float, nullable=False),
    Column("best_serie", Integer, nullable=False),
    Column("rank_position", Integer, nullable=False),
    Column("tournament_1_points", Integer, nullable=False, server_default="0"),
    Column("tournament_2_points", Integer, nullable=False, server_default="0"),
    Column("tournament_3_points", Integer, nullable=False, server_default="0"),
    Column("updated", DateTimeTZ, nullable=False, server_default=func.now()),
    UniqueConstraint("category_id", "season", "licence"),
)

app_settings = Table(
    "app_settings",
    metadata,
    Column("key", String, primary_key=True),
    Column("value", Text, nullable=False),
    Column("updated", DateTimeTZ, nullable=False, server_default=func.now()),
)

email_campaigns = Table(
    "email_campaigns",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("subject", String, nullable=False),
    Column("body", Text, nullable=False),
    Column("template_key", String, nullable=False, index=True),
    Column("recipients_count", Integer, nullable=False, server_default="0"),
    Column("sent_count", Integer, nullable=False, server_default="0"),
    Column("failed_count", Integer, nullable=False, server_default="0"),
    Column(
        "status",
        Enum("SENDING", "COMPLETED", name="email_campaign_status"),
        nullable=False,
        server_default="SENDING",
    ),
    Column("tournament_id", BigInteger, ForeignKey("tournaments.id", ondelete="SET NULL")),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("sent_at", DateTimeTZ, nullable=True),
)

finale_relances = Table(
    "finale_relances",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("category_id", BigInteger, ForeignKey("categories.id"), nullable=False),
    Column("season", String, nullable=False),
    Column("sent_at", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("recipients_count", Integer, nullable=False, server_default="0"),
    UniqueConstraint("category_id", "season"),
)
