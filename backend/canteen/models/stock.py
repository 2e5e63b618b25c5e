"""Stock models: Ingredient, adjustment ledger and consumption logs."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from canteen.db.base import Base, CreatedAtMixin, TimestampMixin
from canteen.models.validators import non_negative, positive


class AdjustmentType(str, Enum):
    """Direction of a manual stock adjustment."""

    ADD = "add"
    SUBTRACT = "subtract"


class Ingredient(Base, TimestampMixin):
    """Kitchen ingredient with its current stock level."""

    __tablename__ = "ingredients"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)  # kg, l, pcs
    cost_per_unit: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    current_stock: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=0)
    low_stock_threshold: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=0)
    last_restocked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @validates("cost_per_unit", "current_stock", "low_stock_threshold")
    def _validate_non_negative(self, key, value):
        return non_negative(key, value)

    @property
    def is_low(self) -> bool:
        return Decimal(self.current_stock) <= Decimal(self.low_stock_threshold)


class StockAdjustment(Base, CreatedAtMixin):
    """Manual add/subtract of an ingredient's stock."""

    __tablename__ = "stock_adjustments"

    id: Mapped[int] = mapped_column(primary_key=True)
    ingredient_id: Mapped[int] = mapped_column(
        ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    adjustment_type: Mapped[str] = mapped_column(String(10), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    previous_stock: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    new_stock: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    adjusted_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    ingredient: Mapped["Ingredient"] = relationship("Ingredient")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)


class StockHistory(Base, CreatedAtMixin):
    """Signed ledger of every stock change (single source of truth)."""

    __tablename__ = "stock_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    ingredient_id: Mapped[int] = mapped_column(
        ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    change_amount: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    change_type: Mapped[str] = mapped_column(String(20), nullable=False)  # adjustment, consumption
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )


class ConsumptionLog(Base, CreatedAtMixin):
    """Ingredient quantity consumed by the kitchen on a given day."""

    __tablename__ = "consumption_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    ingredient_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("ingredients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    quantity_used: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    consumption_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    logged_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    ingredient: Mapped[Optional["Ingredient"]] = relationship("Ingredient")

    @validates("quantity_used")
    def _validate_quantity(self, key, value):
        return positive(key, value)
