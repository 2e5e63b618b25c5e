"""Menu, meal session and weekly menu models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean, Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from canteen.db.base import Base, TimestampMixin
from canteen.models.validators import day_of_week, non_negative


class MealSession(Base, TimestampMixin):
    """A daily meal service (breakfast, lunch, ...) with an ordering window.

    ``start_time`` and ``end_time`` are store-local "HH:MM" strings; new
    orders are accepted until ``order_cutoff_minutes_before`` minutes before
    the end.
    """

    __tablename__ = "meal_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    start_time: Mapped[str] = mapped_column(String(8), nullable=False)
    end_time: Mapped[str] = mapped_column(String(8), nullable=False)
    order_cutoff_minutes_before: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @validates("order_cutoff_minutes_before")
    def _validate_cutoff(self, key, value):
        return non_negative(key, value)


class MenuItem(Base, TimestampMixin):
    """Menu item for ordering."""

    __tablename__ = "menu_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("price")
    def _validate_price(self, key, value):
        return non_negative(key, value)


class DailyMenu(Base):
    """Which menu items are served in which session on a given day."""

    __tablename__ = "daily_menu"
    __table_args__ = (
        UniqueConstraint("menu_date", "session_id", "menu_item_id", name="uq_daily_menu_entry"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    menu_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    session_id: Mapped[int] = mapped_column(
        ForeignKey("meal_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[int] = mapped_column(
        ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False
    )
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    menu_item: Mapped["MenuItem"] = relationship("MenuItem")


class WeeklyMenu(Base, TimestampMixin):
    """Recurring weekly menu plan entry."""

    __tablename__ = "weekly_menu"

    id: Mapped[int] = mapped_column(primary_key=True)
    item_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    is_veg: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False, index=True)  # 0 = Sunday
    meal_type: Mapped[str] = mapped_column(String(20), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("price")
    def _validate_price(self, key, value):
        return non_negative(key, value)

    @validates("day_of_week")
    def _validate_day(self, key, value):
        return day_of_week(key, value)
