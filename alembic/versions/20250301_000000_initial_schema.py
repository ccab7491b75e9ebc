"""
Initial schema: users, items, cart items, orders and order items.

Revision ID: 20250301_000000_initial_schema
Revises:
Create Date: 2025-03-01 00:00:00
"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20250301_000000_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    json_type = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")

    # users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("permissions", json_type, nullable=False),
        sa.Column("reset_token", sa.String(length=64)),
        sa.Column("reset_token_expiry", sa.DateTime(timezone=True)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="users_pkey"),
        sa.UniqueConstraint("email", name="users_email_key"),
    )
    op.create_index("idx_users_reset_token", "users", ["reset_token"])

    # items
    op.create_table(
        "items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("image", sa.Text()),
        sa.Column("large_image", sa.Text()),
        sa.Column("user_id", sa.Uuid()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="SET NULL", name="items_user_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="items_pkey"),
    )
    op.create_index("idx_items_user", "items", ["user_id"])

    # cart_items
    op.create_table(
        "cart_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="cart_items_user_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["item_id"], ["items.id"], ondelete="CASCADE", name="cart_items_item_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="cart_items_pkey"),
        sa.UniqueConstraint("user_id", "item_id", name="cart_items_user_id_item_id_key"),
    )

    # orders
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("charge", sa.String(length=255), nullable=False),
        sa.Column("payment_platform", sa.String(length=50), nullable=False),
        sa.Column("reference", sa.String(length=255)),
        sa.Column("trans", sa.String(length=255)),
        sa.Column("transaction", sa.String(length=255)),
        sa.Column("trxref", sa.String(length=255)),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="orders_user_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="orders_pkey"),
        sa.UniqueConstraint(
            "payment_platform", "charge", name="orders_payment_platform_charge_key"
        ),
    )
    op.create_index("idx_orders_user", "orders", ["user_id"])

    # order_items
    op.create_table(
        "order_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("image", sa.Text()),
        sa.Column("large_image", sa.Text()),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid()),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["order_id"], ["orders.id"], ondelete="CASCADE", name="order_items_order_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="order_items_user_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["item_id"], ["items.id"], ondelete="SET NULL", name="order_items_item_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="order_items_pkey"),
    )
    op.create_index("idx_order_items_order", "order_items", ["order_id"])


def downgrade() -> None:
    op.drop_index("idx_order_items_order", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("idx_orders_user", table_name="orders")
    op.drop_table("orders")
    op.drop_table("cart_items")
    op.drop_index("idx_items_user", table_name="items")
    op.drop_table("items")
    op.drop_index("idx_users_reset_token", table_name="users")
    op.drop_table("users")
