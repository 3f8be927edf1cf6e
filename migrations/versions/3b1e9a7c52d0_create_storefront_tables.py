"""create storefront tables

Revision ID: 3b1e9a7c52d0
Revises:
Create Date: 2026-10-18 10:12:41.302117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1e9a7c52d0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "admin",
        sa.Column("admin_id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(128), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
    )
    op.create_index("ix_admin_username", "admin", ["username"], unique=True)

    op.create_table(
        "headphones",
        sa.Column("product_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_headphones_stock_non_negative"),
    )

    op.create_table(
        "cart_session",
        sa.Column("session_id", sa.Integer(), primary_key=True),
        sa.Column("user_identifier", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_modified", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_cart_session_user_identifier", "cart_session", ["user_identifier"], unique=True)

    op.create_table(
        "cart_items",
        sa.Column("cart_item_id", sa.Integer(), primary_key=True),
        sa.Column("session_id", sa.Integer(),
                  sa.ForeignKey("cart_session.session_id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("headphones.product_id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.UniqueConstraint("session_id", "product_id", name="uq_cart_items_session_product"),
        sa.CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )
    op.create_index("ix_cart_items_session_id", "cart_items", ["session_id"])

    op.create_table(
        "orders",
        sa.Column("order_id", sa.Integer(), primary_key=True),
        sa.Column("payment_intent_id", sa.String(255), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_orders_payment_intent_id", "orders", ["payment_intent_id"], unique=True)

    op.create_table(
        "order_items",
        sa.Column("order_item_id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("headphones.product_id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_at_time", sa.Numeric(10, 2), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "payment",
        sa.Column("payment_id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.order_id", ondelete="CASCADE"),
                  nullable=False, unique=True),
        sa.Column("stripe_payment_id", sa.String(255), nullable=True),
        sa.Column("payment_status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("amount_received", sa.Numeric(10, 2), nullable=True),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "contact_message",
        sa.Column("message_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("message_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("status", sa.String(16), nullable=False, server_default="UNREAD"),
        sa.Column("admin_response", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_contact_message_message_date", "contact_message", ["message_date"])


def downgrade():
    op.drop_index("ix_contact_message_message_date", table_name="contact_message")
    op.drop_table("contact_message")
    op.drop_table("payment")
    op.drop_index("ix_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("ix_orders_payment_intent_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_cart_items_session_id", table_name="cart_items")
    op.drop_table("cart_items")
    op.drop_index("ix_cart_session_user_identifier", table_name="cart_session")
    op.drop_table("cart_session")
    op.drop_table("headphones")
    op.drop_index("ix_admin_username", table_name="admin")
    op.drop_table("admin")
