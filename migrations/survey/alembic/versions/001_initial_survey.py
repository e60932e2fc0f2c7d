"""Survey schema: surveys, questions, survey_responses

Revision ID: 001
Revises:
Create Date: 2026-10-18

Tables created:
  - surveys            Survey metadata, owner, open/closed state, response counter
  - questions          Typed question definitions (options/bounds as JSONB)
  - survey_responses   Append-only answer sets keyed by question id (JSONB)

PostgreSQL-native ENUM types created:
  - questiontype       multiple_choice / multiple_selection / yes_no / text / scale / date

Downgrade: drops all tables and the ENUM type in reverse dependency order.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

QUESTION_TYPES = ("multiple_choice", "multiple_selection", "yes_no", "text", "scale", "date")


def upgrade() -> None:
    # PostgreSQL has no CREATE TYPE IF NOT EXISTS
    op.execute(
        """
        DO $$ BEGIN
            CREATE TYPE questiontype AS ENUM (
                'multiple_choice',
                'multiple_selection',
                'yes_no',
                'text',
                'scale',
                'date'
            );
        EXCEPTION WHEN duplicate_object THEN NULL;
        END $$;
        """
    )

    op.create_table(
        "surveys",
        sa.Column("survey_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("response_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", postgresql.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", postgresql.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("survey_id", name="pk_surveys"),
    )
    op.create_index("ix_surveys_owner_id", "surveys", ["owner_id"])

    op.create_table(
        "questions",
        sa.Column("question_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("survey_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column(
            "type",
            postgresql.ENUM(*QUESTION_TYPES, name="questiontype", create_type=False),
            nullable=False,
        ),
        sa.Column("options", postgresql.JSONB(), nullable=True),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("validation", postgresql.JSONB(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", postgresql.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", postgresql.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("question_id", name="pk_questions"),
        sa.ForeignKeyConstraint(
            ["survey_id"], ["surveys.survey_id"],
            name="fk_questions_survey_id_surveys", ondelete="CASCADE",
        ),
    )
    op.create_index("ix_questions_survey_id_order", "questions", ["survey_id", "order"])

    op.create_table(
        "survey_responses",
        sa.Column("response_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("survey_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("submitter_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("answers", postgresql.JSONB(), nullable=False),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("ip", sa.String(64), nullable=True),
        sa.Column("submitted_at", postgresql.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("response_id", name="pk_survey_responses"),
        sa.ForeignKeyConstraint(
            ["survey_id"], ["surveys.survey_id"],
            name="fk_survey_responses_survey_id_surveys", ondelete="CASCADE",
        ),
    )
    op.create_index("ix_survey_responses_survey_id", "survey_responses", ["survey_id"])
    op.create_index("ix_survey_responses_submitter_id", "survey_responses", ["submitter_id"])


def downgrade() -> None:
    op.drop_index("ix_survey_responses_submitter_id", table_name="survey_responses")
    op.drop_index("ix_survey_responses_survey_id", table_name="survey_responses")
    op.drop_table("survey_responses")
    op.drop_index("ix_questions_survey_id_order", table_name="questions")
    op.drop_table("questions")
    op.drop_index("ix_surveys_owner_id", table_name="surveys")
    op.drop_table("surveys")
    op.execute("DROP TYPE IF EXISTS questiontype")
