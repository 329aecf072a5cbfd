"""Initial schema for fluentmark evaluations

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import false
from sqlalchemy import func as f
from sqlalchemy.schema import Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import Boolean, DateTime, Float, Integer, JSON, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    # Activities
    op.create_table(
        "activities",
        Column("activity_id", String(22), primary_key=True),
        Column("title", String, nullable=False),
        Column("content_type", String, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    op.create_table(
        "quiz_questions",
        Column("question_id", String(22), primary_key=True),
        Column("activity_id", String(22), ForeignKey("activities.activity_id"), nullable=False),
        Column("position", Integer, nullable=False),
        Column("question_text", Text, nullable=False),
        Column("question_type", String, nullable=False),
        Column("correct_answer", Text, nullable=False),
        Column("points", Float, server_default="1", nullable=False),
        UniqueConstraint("activity_id", "position"),
    )

    # Submissions
    op.create_table(
        "submissions",
        Column("submission_id", String(22), primary_key=True),
        Column("student_id", String(22), nullable=False, index=True),
        Column("activity_id", String(22), ForeignKey("activities.activity_id"), nullable=False),
        Column("content_type", String, nullable=False),
        Column("content", JSON, nullable=False),
        Column("status", String, server_default="pending", nullable=False, index=True),
        Column("submitted_at", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    # Evaluations
    op.create_table(
        "evaluations",
        Column("evaluation_id", String(22), primary_key=True),
        Column("submission_id", String(22), ForeignKey("submissions.submission_id"), unique=True, nullable=False),
        Column("overall_score", Integer, nullable=False),
        Column("ai_confidence", Float, nullable=False),
        Column("evaluated_at", DateTime(timezone=True), nullable=False),
        Column("grammar_score", Integer, nullable=True),
        Column("vocabulary_score", Integer, nullable=True),
        Column("pronunciation_score", Integer, nullable=True),
        Column("logic_score", Integer, nullable=True),
        Column("score_breakdown", JSON, nullable=False),
        Column("reviewed_by_teacher", Boolean, server_default=false(), nullable=False),
        Column("teacher_id", String(22), nullable=True),
        Column("teacher_notes", Text, nullable=True),
        Column("reviewed_at", DateTime(timezone=True), nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    op.create_table(
        "mistakes",
        Column("mistake_id", String(22), primary_key=True),
        Column("evaluation_id", String(22), ForeignKey("evaluations.evaluation_id"), nullable=False, index=True),
        Column("ordinal", Integer, nullable=False),
        Column("category", String, nullable=False),
        Column("severity", String, nullable=False),
        Column("description", Text, nullable=False),
        Column("suggestion", Text, nullable=True),
        Column("position_start", Integer, nullable=True),
        Column("position_end", Integer, nullable=True),
        Column("original_text", Text, nullable=True),
        Column("corrected_text", Text, nullable=True),
        Column("possible_error", Boolean, server_default=false(), nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    op.create_table(
        "feedback",
        Column("feedback_id", String(22), primary_key=True),
        Column("evaluation_id", String(22), ForeignKey("evaluations.evaluation_id"), unique=True, nullable=False),
        Column("text", Text, nullable=False),
        Column("generated_at", DateTime(timezone=True), nullable=False),
        Column("strengths", JSON, nullable=False),
        Column("improvements", JSON, nullable=False),
        Column("recommendations", JSON, nullable=False),
        Column("tone", String, server_default="neutral", nullable=False),
        Column("summarized", Boolean, server_default=false(), nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    # Notifications
    op.create_table(
        "notifications",
        Column("notification_id", String(22), primary_key=True),
        Column("student_id", String(22), nullable=False, index=True),
        Column("type", String, nullable=False),
        Column("title", String, nullable=False),
        Column("message", Text, nullable=False),
        Column("entity_id", String, nullable=True),
        Column("read", Boolean, server_default=false(), nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )


def downgrade() -> None:
    for table in ("notifications", "feedback", "mistakes", "evaluations", "submissions", "quiz_questions", "activities"):
        op.drop_table(table)
