"""Initial schema for the examiner

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.schema import Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import DateTime, Float, Integer, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    # Question bank
    op.create_table(
        "questions",
        Column("question_id", String(22), primary_key=True),
        Column("text", Text, nullable=False),
        Column("difficulty", String, nullable=False),
        Column("topic", String, nullable=False, index=True),
        Column("max_points", Integer, nullable=False),
        Column("position", Integer, nullable=False),
        Column("rubric", Text, nullable=False),
        Column("reference_answer", Text, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    op.create_table(
        "blueprints",
        Column("blueprint_id", String(22), primary_key=True),
        Column("name", String, nullable=False),
        Column("max_followups", Integer, nullable=False),
        Column("time_limit_minutes", Integer, nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    op.create_table(
        "imported_files",
        Column("path", String, primary_key=True),
        Column("sha256", String, nullable=False),
        Column("imported_at", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    # Sessions
    op.create_table(
        "exam_sessions",
        Column("session_id", String(22), primary_key=True),
        Column("blueprint_id", String(22), ForeignKey("blueprints.blueprint_id"), nullable=False),
        Column("respondent_id", String(22), nullable=False, index=True),
        Column("status", String, nullable=False),
        Column("started_at", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("submitted_at", DateTime(timezone=True), nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    op.create_table(
        "threads",
        Column("thread_id", String(22), primary_key=True),
        Column(
            "session_id",
            String(22),
            ForeignKey("exam_sessions.session_id", ondelete="CASCADE"),
            nullable=False,
        ),
        Column("question_id", String(22), ForeignKey("questions.question_id"), nullable=False),
        Column("position", Integer, nullable=False),
        Column("status", String, nullable=False),
        Column("revision", Integer, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("session_id", "position"),
    )

    op.create_table(
        "messages",
        Column("message_id", String(22), primary_key=True),
        Column("thread_id", String(22), ForeignKey("threads.thread_id", ondelete="CASCADE"), nullable=False),
        Column("role", String, nullable=False),
        Column("content", Text, nullable=False),
        Column("position", Integer, nullable=False),
        Column("token_count", Integer, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("thread_id", "position"),
    )

    # Results
    op.create_table(
        "scores",
        Column("thread_id", String(22), ForeignKey("threads.thread_id", ondelete="CASCADE"), primary_key=True),
        Column("auto_score", Float, nullable=False),
        Column("auto_feedback", Text, nullable=False),
        Column("override_score", Float, nullable=True),
        Column("override_comment", Text, nullable=True),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    op.create_table(
        "grades",
        Column(
            "session_id",
            String(22),
            ForeignKey("exam_sessions.session_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        Column("auto_percentage", Float, nullable=False),
        Column("final_percentage", Float, nullable=True),
        Column("reviewed_by", String(22), nullable=True),
        Column("reviewed_at", DateTime(timezone=True), nullable=True),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("grades")
    op.drop_table("scores")
    op.drop_table("messages")
    op.drop_table("threads")
    op.drop_table("exam_sessions")
    op.drop_table("imported_files")
    op.drop_table("blueprints")
    op.drop_table("questions")
