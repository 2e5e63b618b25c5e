"""Canteen schema

Revision ID: 001
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _timestamps():
    return [
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _profile_fk(name, nullable=False, ondelete="CASCADE"):
    return sa.Column(name, sa.Integer(), sa.ForeignKey("profiles.id", ondelete=ondelete), nullable=nullable)


def _order_lines(table, parent_column, parent_table):
    op.create_table(
        table,
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(parent_column, sa.Integer(), sa.ForeignKey(f"{parent_table}.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("menu_item_id", sa.Integer(), sa.ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True),
        sa.Column("item_name", sa.String(200), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
    )


def upgrade() -> None:
    # Profiles
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("employee_id", sa.String(50), unique=True, nullable=True, index=True),
        sa.Column("role", sa.Enum("ADMIN", "EMPLOYEE", name="userrole"), nullable=False, server_default="EMPLOYEE"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # Menu
    op.create_table(
        "meal_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("start_time", sa.String(8), nullable=False),
        sa.Column("end_time", sa.String(8), nullable=False),
        sa.Column("order_cutoff_minutes_before", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "daily_menu",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("menu_date", sa.Date(), nullable=False, index=True),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("meal_sessions.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("menu_item_id", sa.Integer(), sa.ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("menu_date", "session_id", "menu_item_id", name="uq_daily_menu_entry"),
    )
    op.create_table(
        "weekly_menu",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("is_veg", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("day_of_week", sa.Integer(), nullable=False, index=True),
        sa.Column("meal_type", sa.String(20), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # Catalogs
    op.create_table(
        "massage_services",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "beverage_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "estate_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(50), nullable=False, server_default=""),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # Orders
    op.create_table(
        "meal_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_type", sa.String(20), nullable=False, index=True),
        sa.Column("order_number", sa.String(30), unique=True, nullable=True),
        _profile_fk("user_id"),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("meal_sessions.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, index=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("order_date", sa.Date(), nullable=False, index=True),
        sa.Column("pickup_time", sa.String(8), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("charge_account", sa.String(100), nullable=True),
        _profile_fk("ordered_by_admin_id", nullable=True, ondelete="SET NULL"),
        sa.Column("ordered_for_employee_id", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_meal_orders_user_id", "meal_orders", ["user_id"])
    _order_lines("meal_order_items", "order_id", "meal_orders")

    op.create_table(
        "party_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        _profile_fk("user_id"),
        sa.Column("department", sa.String(100), nullable=False),
        sa.Column("party_date", sa.Date(), nullable=False, index=True),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("estimated_headcount", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(30), nullable=False, index=True),
        sa.Column("total_cost", sa.Numeric(10, 2), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_party_orders_user_id", "party_orders", ["user_id"])
    _order_lines("party_order_items", "party_order_id", "party_orders")

    op.create_table(
        "massage_bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        _profile_fk("user_id"),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("massage_services.id", ondelete="SET NULL"),
                  nullable=True),
        sa.Column("booking_date", sa.Date(), nullable=False, index=True),
        sa.Column("booking_time", sa.String(8), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(30), nullable=False, index=True),
        *_timestamps(),
    )
    op.create_index("ix_massage_bookings_user_id", "massage_bookings", ["user_id"])

    op.create_table(
        "beverage_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        _profile_fk("user_id"),
        sa.Column("beverage_item_id", sa.Integer(), sa.ForeignKey("beverage_items.id", ondelete="SET NULL"),
                  nullable=True),
        sa.Column("item_name", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False, index=True),
        sa.Column("status", sa.String(30), nullable=False, index=True),
        *_timestamps(),
    )
    op.create_index("ix_beverage_orders_user_id", "beverage_orders", ["user_id"])

    op.create_table(
        "home_meal_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        _profile_fk("user_id"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("delivery_charge", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("building", sa.String(100), nullable=False),
        sa.Column("flat_no", sa.String(50), nullable=False),
        sa.Column("landmark", sa.String(200), nullable=False, server_default=""),
        sa.Column("pin_code", sa.String(10), nullable=False, server_default=""),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("order_date", sa.Date(), nullable=False, index=True),
        sa.Column("status", sa.String(30), nullable=False, index=True),
        *_timestamps(),
    )
    op.create_index("ix_home_meal_orders_user_id", "home_meal_orders", ["user_id"])
    _order_lines("home_meal_order_items", "home_meal_order_id", "home_meal_orders")

    op.create_table(
        "estate_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        _profile_fk("user_id"),
        sa.Column("estate_item_id", sa.Integer(), sa.ForeignKey("estate_items.id", ondelete="SET NULL"),
                  nullable=True),
        sa.Column("item_name", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("room_flat", sa.String(50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("request_date", sa.Date(), nullable=False, index=True),
        sa.Column("status", sa.String(30), nullable=False, index=True),
        *_timestamps(),
    )
    op.create_index("ix_estate_requests_user_id", "estate_requests", ["user_id"])

    # Billing
    op.create_table(
        "employee_deductions",
        sa.Column("id", sa.Integer(), primary_key=True),
        _profile_fk("user_id"),
        sa.Column("source_kind", sa.String(20), nullable=False),
        sa.Column("source_order_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("deduction_date", sa.Date(), nullable=False, index=True),
        sa.Column("deduction_month", sa.Date(), nullable=False, index=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        _created_at(),
        sa.UniqueConstraint("source_kind", "source_order_id", name="uq_deduction_source"),
    )
    op.create_index("ix_employee_deductions_user_id", "employee_deductions", ["user_id"])

    # Stock
    op.create_table(
        "ingredients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), unique=True, nullable=False),
        sa.Column("unit", sa.String(20), nullable=False),
        sa.Column("cost_per_unit", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("current_stock", sa.Numeric(12, 3), nullable=False, server_default="0"),
        sa.Column("low_stock_threshold", sa.Numeric(12, 3), nullable=False, server_default="0"),
        sa.Column("last_restocked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "stock_adjustments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ingredient_id", sa.Integer(), sa.ForeignKey("ingredients.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("adjustment_type", sa.String(10), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("previous_stock", sa.Numeric(12, 3), nullable=False),
        sa.Column("new_stock", sa.Numeric(12, 3), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False, server_default=""),
        _profile_fk("adjusted_by", nullable=True, ondelete="SET NULL"),
        _created_at(),
    )
    op.create_table(
        "stock_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ingredient_id", sa.Integer(), sa.ForeignKey("ingredients.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("change_amount", sa.Numeric(12, 3), nullable=False),
        sa.Column("change_type", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        _profile_fk("created_by", nullable=True, ondelete="SET NULL"),
        _created_at(),
    )
    op.create_table(
        "consumption_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ingredient_id", sa.Integer(), sa.ForeignKey("ingredients.id", ondelete="SET NULL"),
                  nullable=True, index=True),
        sa.Column("quantity_used", sa.Numeric(12, 3), nullable=False),
        sa.Column("consumption_date", sa.Date(), nullable=False, index=True),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        _profile_fk("logged_by", nullable=True, ondelete="SET NULL"),
        _created_at(),
    )

    # Role audit
    op.create_table(
        "admin_role_audit",
        sa.Column("id", sa.Integer(), primary_key=True),
        _profile_fk("user_id"),
        sa.Column("previous_role", sa.String(20), nullable=False),
        sa.Column("new_role", sa.String(20), nullable=False),
        _profile_fk("changed_by"),
        _created_at(),
    )
    op.create_index("ix_admin_role_audit_user_id", "admin_role_audit", ["user_id"])


def downgrade() -> None:
    op.drop_table("admin_role_audit")
    op.drop_table("consumption_logs")
    op.drop_table("stock_history")
    op.drop_table("stock_adjustments")
    op.drop_table("ingredients")
    op.drop_table("employee_deductions")
    op.drop_table("estate_requests")
    op.drop_table("home_meal_order_items")
    op.drop_table("home_meal_orders")
    op.drop_table("beverage_orders")
    op.drop_table("massage_bookings")
    op.drop_table("party_order_items")
    op.drop_table("party_orders")
    op.drop_table("meal_order_items")
    op.drop_table("meal_orders")
    op.drop_table("estate_items")
    op.drop_table("beverage_items")
    op.drop_table("massage_services")
    op.drop_table("weekly_menu")
    op.drop_table("daily_menu")
    op.drop_table("menu_items")
    op.drop_table("meal_sessions")
    op.drop_table("profiles")
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
