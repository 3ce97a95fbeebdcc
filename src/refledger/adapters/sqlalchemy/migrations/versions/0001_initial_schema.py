"""Initial schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user_settings",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("home_address", sa.Text(), nullable=False),
        sa.Column("assigning_platforms", sa.JSON(), nullable=False),
        sa.Column("leagues", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id", name="pk_user_settings"),
    )

    # the games -> calendar_events key is added once both tables exist
    op.create_table(
        "games",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("sport", sa.String(32), nullable=False),
        sa.Column("competition_level", sa.String(32), nullable=False),
        sa.Column("league", sa.String(), nullable=True),
        sa.Column("level_detail", sa.String(), nullable=True),
        sa.Column("game_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("location_address", sa.Text(), nullable=False),
        sa.Column("distance_miles", sa.Float(), nullable=True),
        sa.Column("roundtrip_miles", sa.Float(), nullable=True),
        sa.Column("role", sa.String(32), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("game_fee", sa.Float(), nullable=True),
        sa.Column("paid_confirmed", sa.Boolean(), nullable=False),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column("home_team", sa.String(), nullable=True),
        sa.Column("away_team", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("platform_confirmations", sa.JSON(), nullable=False),
        sa.Column("calendar_event_id", sa.String(36), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_games"),
    )
    op.create_index("ix_games_user_id", "games", ["user_id"])
    op.create_index("ix_games_calendar_event_id", "games", ["calendar_event_id"])

    op.create_table(
        "calendar_events",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("start_ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("all_day", sa.Boolean(), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("location_address", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("source", sa.String(32), nullable=False),
        sa.Column("external_ref", sa.String(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("linked_game_id", sa.String(36), nullable=True),
        sa.Column("platform_confirmations", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["linked_game_id"],
            ["games.id"],
            name="fk_calendar_events_linked_game_id_games",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_calendar_events"),
        sa.UniqueConstraint(
            "user_id", "external_ref", name="uq_calendar_events_user_id_external_ref"
        ),
    )
    op.create_index("ix_calendar_events_user_id", "calendar_events", ["user_id"])

    with op.batch_alter_table("games") as batch_op:
        batch_op.create_foreign_key(
            "fk_games_calendar_event_id_calendar_events",
            "calendar_events",
            ["calendar_event_id"],
            ["id"],
            ondelete="SET NULL",
        )

    op.create_table(
        "expenses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("vendor", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tax_deductible", sa.Boolean(), nullable=False),
        sa.Column("game_id", sa.String(36), nullable=True),
        sa.Column("miles", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["game_id"], ["games.id"], name="fk_expenses_game_id_games", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_expenses"),
    )
    op.create_index("ix_expenses_user_id", "expenses", ["user_id"])

    op.create_table(
        "requirement_definitions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("governing_body", sa.String(), nullable=True),
        sa.Column("sport", sa.String(32), nullable=True),
        sa.Column("competition_level", sa.String(32), nullable=True),
        sa.Column("frequency", sa.String(32), nullable=False),
        sa.Column("required_count", sa.Integer(), nullable=True),
        sa.Column("evidence_type", sa.String(32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_requirement_definitions"),
    )
    op.create_index(
        "ix_requirement_definitions_user_id", "requirement_definitions", ["user_id"]
    )

    op.create_table(
        "requirement_instances",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("definition_id", sa.String(36), nullable=False),
        sa.Column("season_name", sa.String(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("completed_date", sa.Date(), nullable=True),
        sa.Column("completion_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["definition_id"],
            ["requirement_definitions.id"],
            name="fk_requirement_instances_definition_id_requirement_definitions",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_requirement_instances"),
    )
    op.create_index("ix_requirement_instances_user_id", "requirement_instances", ["user_id"])

    op.create_table(
        "requirement_activities",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("instance_id", sa.String(36), nullable=False),
        sa.Column("activity_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("result", sa.String(), nullable=True),
        sa.Column("evidence_link", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["instance_id"],
            ["requirement_instances.id"],
            name="fk_requirement_activities_instance_id_requirement_instances",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_requirement_activities"),
    )
    op.create_index(
        "ix_requirement_activities_user_id", "requirement_activities", ["user_id"]
    )

    op.create_table(
        "csv_imports",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("import_type", sa.String(32), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("imported_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("row_count", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_csv_imports"),
    )
    op.create_index("ix_csv_imports_user_id", "csv_imports", ["user_id"])

    op.create_table(
        "csv_import_rows",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("import_id", sa.String(36), nullable=False),
        sa.Column("row_number", sa.Integer(), nullable=False),
        sa.Column("raw_json", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_calendar_event_id", sa.String(36), nullable=True),
        sa.Column("created_game_id", sa.String(36), nullable=True),
        sa.ForeignKeyConstraint(
            ["import_id"],
            ["csv_imports.id"],
            name="fk_csv_import_rows_import_id_csv_imports",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["created_calendar_event_id"],
            ["calendar_events.id"],
            name="fk_csv_import_rows_created_calendar_event_id_calendar_events",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["created_game_id"],
            ["games.id"],
            name="fk_csv_import_rows_created_game_id_games",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_csv_import_rows"),
    )
    op.create_index("ix_csv_import_rows_user_id", "csv_import_rows", ["user_id"])

    op.create_table(
        "calendar_feeds",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("platform", sa.String(32), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("feed_url", sa.Text(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("sport", sa.String(32), nullable=True),
        sa.Column("default_league", sa.String(), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_calendar_feeds"),
    )
    op.create_index("ix_calendar_feeds_user_id", "calendar_feeds", ["user_id"])
    op.create_index(
        "ix_calendar_feeds_user_platform", "calendar_feeds", ["user_id", "platform"]
    )


def downgrade() -> None:
    op.drop_table("calendar_feeds")
    op.drop_table("csv_import_rows")
    op.drop_table("csv_imports")
    op.drop_table("requirement_activities")
    op.drop_table("requirement_instances")
    op.drop_table("requirement_definitions")
    op.drop_table("expenses")
    with op.batch_alter_table("games") as batch_op:
        batch_op.drop_constraint("fk_games_calendar_event_id_calendar_events", type_="foreignkey")
    op.drop_table("calendar_events")
    op.drop_table("games")
    op.drop_table("user_settings")
