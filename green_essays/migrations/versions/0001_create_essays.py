"""create essays, versions and edit log

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00
"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "green_essays",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("section", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.Text(), nullable=True),
        sa.Column("author_name", sa.String(255), nullable=False),
        sa.Column("cover_image_url", sa.String(1024), nullable=True),
        sa.Column("content_html", sa.Text(), nullable=True),
        sa.Column("content_json", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("reading_time", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("updated_by", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("section", "slug", name="uq_green_essays_section_slug"),
    )
    op.create_index("ix_green_essays_section", "green_essays", ["section"])

    op.create_table(
        "green_essays_versions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("essay_id", sa.String(36), sa.ForeignKey("green_essays.id"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.Text(), nullable=True),
        sa.Column("content_html", sa.Text(), nullable=True),
        sa.Column("content_json", sa.JSON(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_green_essays_versions_essay_id", "green_essays_versions", ["essay_id"])

    op.create_table(
        "ops_edit_log",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("essay_id", sa.String(36), nullable=False),
        sa.Column("user_email", sa.String(255), nullable=False, server_default=""),
        sa.Column("action", sa.String(50), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_ops_edit_log_essay_id", "ops_edit_log", ["essay_id"])


def downgrade():
    op.drop_index("ix_ops_edit_log_essay_id", table_name="ops_edit_log")
    op.drop_table("ops_edit_log")
    op.drop_index("ix_green_essays_versions_essay_id", table_name="green_essays_versions")
    op.drop_table("green_essays_versions")
    op.drop_index("ix_green_essays_section", table_name="green_essays")
    op.drop_table("green_essays")
