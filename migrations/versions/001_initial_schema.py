"""Initial schema: tenants, plans, staff, clients, patients, uploads, labs, sales and audit log

Revision ID: 001
Revises: 
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _tenant_fk():
    return sa.Column(
        "tenant_id",
        sa.String(36),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    # Create plans table
    op.create_table(
        "plans",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price_monthly", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("price_yearly", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("features", postgresql.JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("limits", postgresql.JSONB, server_default=sa.text("'{}'::jsonb")),
        *_timestamps(),
    )

    # Create tenants table; plan is deliberately not a foreign key
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("plan", sa.String(50), nullable=False, server_default="Trial"),
        sa.Column("billing_period", sa.String(10), nullable=False, server_default="monthly"),
        sa.Column("status", sa.String(20), nullable=False, server_default="Active"),
        sa.Column("storage_used", sa.Float, nullable=False, server_default="0"),
        sa.Column("settings", postgresql.JSONB, server_default=sa.text("'{}'::jsonb")),
        *_timestamps(),
        sa.CheckConstraint("status IN ('Active', 'Restricted', 'Suspended')", name="valid_tenant_status"),
        sa.CheckConstraint("billing_period IN ('monthly', 'yearly')", name="valid_billing_period"),
    )
    op.create_index("idx_tenants_status", "tenants", ["status"])

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("roles", postgresql.JSONB, server_default=sa.text("'[\"Veterinarian\"]'::jsonb")),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_suspended", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])
    op.create_index("idx_users_tenant_email", "users", ["tenant_id", "email"])

    # Create owners table
    op.create_table(
        "owners",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50)),
        sa.Column("email", sa.String(255)),
        sa.Column("address", sa.Text),
        sa.Column("is_portal_active", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("password_hash", sa.String(255)),
        *_timestamps(),
    )
    op.create_index("ix_owners_tenant_id", "owners", ["tenant_id"])

    # Create pets table
    op.create_table(
        "pets",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("owners.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("species", sa.String(100), nullable=False),
        sa.Column("breed", sa.String(100)),
        sa.Column("gender", sa.String(20)),
        sa.Column("color", sa.String(100)),
        sa.Column("age", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_pets_tenant_id", "pets", ["tenant_id"])
    op.create_index("ix_pets_owner_id", "pets", ["owner_id"])

    # Create client_uploads table
    op.create_table(
        "client_uploads",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("owners.id", ondelete="CASCADE"), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_url", sa.Text, nullable=False),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("size_mb", sa.Float, nullable=False, server_default="0"),
        sa.Column("notes", sa.Text),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_client_uploads_tenant_id", "client_uploads", ["tenant_id"])
    op.create_index("ix_client_uploads_owner_id", "client_uploads", ["owner_id"])

    # Create lab_results table
    op.create_table(
        "lab_results",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("pet_id", sa.String(36), sa.ForeignKey("pets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(100), nullable=False, server_default="General"),
        sa.Column("test_name", sa.String(255)),
        sa.Column("result", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_lab_results_tenant_id", "lab_results", ["tenant_id"])
    op.create_index("ix_lab_results_pet_id", "lab_results", ["pet_id"])

    # Create inventory_items table
    op.create_table(
        "inventory_items",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False, server_default="General"),
        sa.Column("sku", sa.String(100)),
        sa.Column("unit", sa.String(20), nullable=False, server_default="pcs"),
        sa.Column("stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("retail_price", sa.Float, nullable=False, server_default="0"),
        sa.Column("purchase_price", sa.Float, nullable=False, server_default="0"),
        sa.Column("supplier", sa.String(255)),
        *_timestamps(),
    )
    op.create_index("ix_inventory_items_tenant_id", "inventory_items", ["tenant_id"])

    # Create sales table
    op.create_table(
        "sales",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("owners.id", ondelete="SET NULL")),
        sa.Column("subtotal", sa.Float, nullable=False, server_default="0"),
        sa.Column("discount", sa.Float, nullable=False, server_default="0"),
        sa.Column("total", sa.Float, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="Completed"),
        sa.Column("items", postgresql.JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("payments", postgresql.JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_sales_tenant_id", "sales", ["tenant_id"])
    op.create_index("ix_sales_owner_id", "sales", ["owner_id"])

    # Create logs table (append-only audit trail)
    op.create_table(
        "logs",
        sa.Column("id", sa.String(36), primary_key=True),
        _tenant_fk(),
        sa.Column("user", sa.String(255), nullable=False),
        sa.Column("action", sa.String(255), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("details", sa.Text, nullable=False, server_default=""),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_logs_tenant_timestamp", "logs", ["tenant_id", "timestamp"])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table("logs")
    op.drop_table("sales")
    op.drop_table("inventory_items")
    op.drop_table("lab_results")
    op.drop_table("client_uploads")
    op.drop_table("pets")
    op.drop_table("owners")
    op.drop_table("users")
    op.drop_table("tenants")
    op.drop_table("plans")
