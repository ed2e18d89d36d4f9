"""Initial schema - entries, evidence, assessment_questions, assessment_answers, verifications.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "entries",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("intent_prompt", sa.Text(), nullable=True),
        sa.Column("domain", sa.Text(), nullable=True),
        sa.Column("eligibility", sa.Text(), nullable=True),
        sa.Column("capability_summary", sa.Text(), nullable=True),
        sa.Column("confidence_band", sa.Text(), nullable=True),
    )
    op.create_index("ix_entries_user_id", "entries", ["user_id"])

    op.create_table(
        "evidence",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("entry_id", sa.UUID(), sa.ForeignKey("entries.id"), nullable=False),
        sa.Column("evidence_type", sa.String(10), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("storage_path", sa.Text(), nullable=True),
        sa.Column("original_filename", sa.Text(), nullable=True),
        sa.Column("mime_type", sa.String(255), nullable=True),
        sa.Column("size", sa.BigInteger(), nullable=True),
        sa.Column("transcript", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("evidence_type IN ('text', 'link', 'file')", name="ck_evidence_type"),
    )
    op.create_index("ix_evidence_entry_id", "evidence", ["entry_id"])

    op.create_table(
        "assessment_questions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("entry_id", sa.UUID(), sa.ForeignKey("entries.id"), nullable=False),
        sa.Column("question_number", sa.Integer(), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.UniqueConstraint("entry_id", "question_number", name="uq_questions_entry_number"),
    )

    op.create_table(
        "assessment_answers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("entry_id", sa.UUID(), sa.ForeignKey("entries.id"), nullable=False),
        sa.Column("question_number", sa.Integer(), nullable=False),
        sa.Column("answer_text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("entry_id", "question_number", name="uq_answers_entry_number"),
    )

    op.create_table(
        "verifications",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("entry_id", sa.UUID(), sa.ForeignKey("entries.id"), nullable=False),
        sa.Column("public_id", sa.String(64), nullable=False, unique=True),
        sa.Column("domain", sa.Text(), nullable=False),
        sa.Column("capability_summary", sa.Text(), nullable=False),
        sa.Column("confidence_band", sa.String(10), nullable=False),
        sa.Column("intent_prompt", sa.Text(), nullable=True),
        sa.Column("evidence_summary", sa.Text(), nullable=True),
        sa.Column("layer1_descriptor", sa.String(20), nullable=True),
        sa.Column("layer2_descriptor", sa.String(20), nullable=True),
        sa.Column("layer3_descriptor", sa.String(20), nullable=True),
        sa.Column("layer4_descriptor", sa.String(20), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_verifications_entry_id", "verifications", ["entry_id"])


def downgrade() -> None:
    op.drop_index("ix_verifications_entry_id", table_name="verifications")
    op.drop_table("verifications")
    op.drop_table("assessment_answers")
    op.drop_table("assessment_questions")
    op.drop_index("ix_evidence_entry_id", table_name="evidence")
    op.drop_table("evidence")
    op.drop_index("ix_entries_user_id", table_name="entries")
    op.drop_table("entries")
