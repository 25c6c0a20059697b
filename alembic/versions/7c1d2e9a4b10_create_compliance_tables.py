"""create monthly checklist + compliance document tables

Revision ID: 7c1d2e9a4b10
Revises:
Create Date: 2026-02-01 09:00:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7c1d2e9a4b10"
down_revision = None
branch_labels = None
depends_on = None


def _has_table(name: str) -> bool:
    return name in sa.inspect(op.get_bind()).get_table_names()


def upgrade():
    if not _has_table("compliance_months"):
        op.create_table(
            "compliance_months",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("farm_id", sa.String(length=64), nullable=False),
            sa.Column("month_year", sa.String(length=7), nullable=False),
            sa.Column("catalog_version", sa.String(length=32), nullable=False),
            sa.Column("item_count", sa.Integer, nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.UniqueConstraint("farm_id", "month_year", name="ux_compliance_months"),
        )
        op.create_index("ix_compliance_months_farm_id", "compliance_months", ["farm_id"])
        op.create_index("ix_compliance_months_month_year", "compliance_months", ["month_year"])

    if not _has_table("compliance_checklist_items"):
        op.create_table(
            "compliance_checklist_items",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("farm_id", sa.String(length=64), nullable=False),
            sa.Column("month_year", sa.String(length=7), nullable=False),
            sa.Column("item_id", sa.String(length=64), nullable=False),
            sa.Column("category_id", sa.String(length=64), nullable=False),
            sa.Column("category_name", sa.String(length=128), nullable=False),
            sa.Column("item_text", sa.String(length=255), nullable=False),
            sa.Column("position", sa.Integer, nullable=False, server_default="0"),
            sa.Column("catalog_version", sa.String(length=32), nullable=False),
            sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("completed_by", sa.String(length=64), nullable=True),
            sa.Column("notes", sa.Text, nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.UniqueConstraint("farm_id", "month_year", "item_id", name="ux_compliance_checklist_items"),
        )
        op.create_index("ix_compliance_checklist_items_farm_id", "compliance_checklist_items", ["farm_id"])
        op.create_index("ix_checklist_items_farm_month", "compliance_checklist_items", ["farm_id", "month_year"])

    if not _has_table("compliance_documents"):
        op.create_table(
            "compliance_documents",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("farm_id", sa.String(length=64), nullable=False),
            sa.Column("category", sa.String(length=64), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("file_name", sa.String(length=255), nullable=False),
            sa.Column("file_url", sa.Text, nullable=False),
            sa.Column("date_of_document", sa.Date, nullable=True),
            sa.Column("notes", sa.Text, nullable=True),
            sa.Column("uploaded_by", sa.String(length=64), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        )
        op.create_index("ix_compliance_documents_id", "compliance_documents", ["id"])
        op.create_index("ix_compliance_documents_farm_id", "compliance_documents", ["farm_id"])
        op.create_index("ix_compliance_documents_category", "compliance_documents", ["category"])
        op.create_index("ix_compliance_documents_farm_category", "compliance_documents", ["farm_id", "category"])


def downgrade():
    op.drop_table("compliance_documents")
    op.drop_table("compliance_checklist_items")
    op.drop_table("compliance_months")
