"""initial_watchability_schema

Revision ID: 3c1f9a2b7d10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision = "3c1f9a2b7d10"
down_revision = None
branch_labels = None
depends_on = None

game_status = sa.Enum("UPCOMING", "LIVE", "COMPLETED", name="gamestatus")


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("league", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_teams_name"), "teams", ["name"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("home_team_id", sa.Integer(), nullable=False),
        sa.Column("away_team_id", sa.Integer(), nullable=False),
        sa.Column("status", game_status, nullable=False),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["home_team_id"], ["teams.id"]),
        sa.ForeignKeyConstraint(["away_team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_games_home_team_id"), "games", ["home_team_id"], unique=False)
    op.create_index(op.f("ix_games_away_team_id"), "games", ["away_team_id"], unique=False)
    op.create_index(op.f("ix_games_status"), "games", ["status"], unique=False)
    op.create_index(op.f("ix_games_scheduled_time"), "games", ["scheduled_time"], unique=False)
    op.create_index(
        "ix_games_pair_time",
        "games",
        ["home_team_id", "away_team_id", "scheduled_time"],
        unique=False,
    )

    op.create_table(
        "game_expectations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=True),
        sa.Column("sport_key", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("external_event_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("commence_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("home_team", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("away_team", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("spread_home", sa.Float(), nullable=True),
        sa.Column("spread_away", sa.Float(), nullable=True),
        sa.Column("total_value", sa.Float(), nullable=True),
        sa.Column("total_over_price", sa.Float(), nullable=True),
        sa.Column("total_under_price", sa.Float(), nullable=True),
        sa.Column("source", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("bookmaker", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_game_expectations_game_id"), "game_expectations", ["game_id"], unique=False
    )
    op.create_index(
        op.f("ix_game_expectations_sport_key"), "game_expectations", ["sport_key"], unique=False
    )
    op.create_index(
        op.f("ix_game_expectations_external_event_id"),
        "game_expectations",
        ["external_event_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_game_expectations_captured_at"),
        "game_expectations",
        ["captured_at"],
        unique=False,
    )

    op.create_table(
        "game_state_snapshots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("tension_score", sa.Integer(), nullable=False),
        sa.Column("momentum_shifts", sa.Integer(), nullable=False),
        sa.Column("lead_changes", sa.Integer(), nullable=False),
        sa.Column("close_finish", sa.Boolean(), nullable=False),
        sa.Column("is_final", sa.Boolean(), nullable=False),
        sa.Column("stage", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("competitive", sa.Boolean(), nullable=True),
        sa.Column("activity_level", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_game_state_snapshots_game_id"), "game_state_snapshots", ["game_id"], unique=False
    )
    op.create_index(
        op.f("ix_game_state_snapshots_captured_at"),
        "game_state_snapshots",
        ["captured_at"],
        unique=False,
    )
    op.create_index(
        "ix_snapshot_game_captured",
        "game_state_snapshots",
        ["game_id", "captured_at"],
        unique=False,
    )

    op.create_table(
        "user_teams",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "team_id"),
    )


def downgrade() -> None:
    op.drop_table("user_teams")
    op.drop_index("ix_snapshot_game_captured", table_name="game_state_snapshots")
    op.drop_index(op.f("ix_game_state_snapshots_captured_at"), table_name="game_state_snapshots")
    op.drop_index(op.f("ix_game_state_snapshots_game_id"), table_name="game_state_snapshots")
    op.drop_table("game_state_snapshots")
    op.drop_index(op.f("ix_game_expectations_captured_at"), table_name="game_expectations")
    op.drop_index(op.f("ix_game_expectations_external_event_id"), table_name="game_expectations")
    op.drop_index(op.f("ix_game_expectations_sport_key"), table_name="game_expectations")
    op.drop_index(op.f("ix_game_expectations_game_id"), table_name="game_expectations")
    op.drop_table("game_expectations")
    op.drop_index("ix_games_pair_time", table_name="games")
    op.drop_index(op.f("ix_games_scheduled_time"), table_name="games")
    op.drop_index(op.f("ix_games_status"), table_name="games")
    op.drop_index(op.f("ix_games_away_team_id"), table_name="games")
    op.drop_index(op.f("ix_games_home_team_id"), table_name="games")
    op.drop_table("games")
    op.drop_table("users")
    op.drop_index(op.f("ix_teams_name"), table_name="teams")
    op.drop_table("teams")
    game_status.drop(op.get_bind(), checkfirst=True)
