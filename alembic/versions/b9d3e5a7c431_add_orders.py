"""add orders, order items, tracking history and daily counters

Revision ID: b9d3e5a7c431
Revises: 7c4e2b8f1a22
Create Date: 2026-10-12 14:20:45.117820

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "b9d3e5a7c431"
down_revision = "7c4e2b8f1a22"
branch_labels = None
depends_on = None

ORDER_STATUSES = ("placed", "confirmed", "preparing", "out_for_delivery", "delivered", "rejected", "cancelled")


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("order_number", sa.String(32), nullable=False),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("restaurant_id", sa.Integer, sa.ForeignKey("restaurants.id"), nullable=False),
        sa.Column("delivery_address", sa.JSON, nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("delivery_fee", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("tax", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.Enum(*ORDER_STATUSES, name="order_status"), nullable=False, server_default="placed"),
        sa.Column(
            "payment_method",
            sa.Enum("cod", "online", "card", name="payment_method"),
            nullable=False,
            server_default="cod",
        ),
        sa.Column(
            "payment_status",
            sa.Enum("pending", "completed", "failed", "refunded", name="payment_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("estimated_delivery_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_delivery_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("special_instructions", sa.String(500), nullable=True),
        sa.Column("cancellation_reason", sa.Text, nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
    )
    op.create_index("ix_orders_id", "orders", ["id"])
    op.create_index("ix_orders_order_number", "orders", ["order_number"], unique=True)
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_index("ix_orders_restaurant_id", "orders", ["restaurant_id"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("menu_item_id", sa.Integer, sa.ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("line_total", sa.Numeric(10, 2), nullable=False),
        sa.Column("special_instructions", sa.String(500), nullable=True),
    )
    op.create_index("ix_order_items_id", "order_items", ["id"])
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "order_tracking_events",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id"), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(*ORDER_STATUSES, name="order_status", create_type=False),
            nullable=False,
        ),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("updated_by_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_order_tracking_events_id", "order_tracking_events", ["id"])
    op.create_index("ix_order_tracking_events_order_id", "order_tracking_events", ["order_id"])

    op.create_table(
        "order_counters",
        sa.Column("day", sa.String(6), primary_key=True),
        sa.Column("last_value", sa.Integer, nullable=False, server_default="0"),
    )


def downgrade() -> None:
    op.drop_table("order_counters")
    op.drop_table("order_tracking_events")
    op.drop_table("order_items")
    op.drop_table("orders")
    for enum_name in ("payment_status", "payment_method", "order_status"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
