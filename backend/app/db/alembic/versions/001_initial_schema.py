"""Initial schema - document and question_draft tables

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create document and question_draft tables."""
    op.create_table(
        "document",
        sa.Column("document_id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("original_file_name", sa.Text(), nullable=False),
        sa.Column("file_kind", sa.Text(), nullable=False),
        sa.Column("extracted_text", sa.Text(), nullable=True),
        sa.Column("categories", json_type, nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "question_generation_status", sa.Text(), nullable=False, server_default="none"
        ),
        sa.Column("question_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_document_org_uploaded", "document", ["org_id", "uploaded_at"])

    op.create_table(
        "question_draft",
        sa.Column("draft_id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "document_id",
            sa.Uuid(),
            sa.ForeignKey("document.document_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("category_node_id", sa.Text(), nullable=True),
        sa.Column("source", sa.Text(), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("question_type", sa.Text(), nullable=False),
        sa.Column("options", json_type, nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("difficulty", sa.Text(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=False),
        sa.Column("focus", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending_review"),
        sa.Column("created_by", sa.Text(), nullable=False, server_default="ai"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_draft_org_created", "question_draft", ["org_id", "created_at"])
    op.create_index("idx_draft_document", "question_draft", ["document_id"])


def downgrade() -> None:
    """Drop question_draft and document tables."""
    op.drop_index("idx_draft_document", table_name="question_draft")
    op.drop_index("idx_draft_org_created", table_name="question_draft")
    op.drop_table("question_draft")
    op.drop_index("idx_document_org_uploaded", table_name="document")
    op.drop_table("document")
