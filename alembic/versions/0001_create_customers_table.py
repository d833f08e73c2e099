"""Create customers table.

Revision ID: 0001
Revises:
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    uuid_default = None
    if op.get_bind().dialect.name == "postgresql":
        uuid_default = sa.text("gen_random_uuid()")

    op.create_table(
        "customers",
        sa.Column("account_id", sa.Uuid(), primary_key=True, server_default=uuid_default),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("phone_number", sa.String(length=20)),
        sa.Column("address", sa.String(length=255)),
        sa.Column("city", sa.String(length=100)),
        sa.Column("state", sa.String(length=100)),
        sa.Column("country", sa.String(length=100)),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_customers_email", "customers", ["email"])
    op.create_index("idx_customers_date_created", "customers", ["date_created"])
    op.create_index("idx_customers_name", "customers", ["first_name", "last_name"])


def downgrade():
    op.drop_index("idx_customers_name", table_name="customers")
    op.drop_index("idx_customers_date_created", table_name="customers")
    op.drop_index("idx_customers_email", table_name="customers")
    op.drop_table("customers")
