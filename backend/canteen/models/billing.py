"""Payroll deduction model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from canteen.db.base import Base, CreatedAtMixin


class EmployeeDeduction(Base, CreatedAtMixin):
    """Amount to be withheld from an employee's salary for a completed order.

    At most one row exists per source order.
    """

    __tablename__ = "employee_deductions"
    __table_args__ = (
        UniqueConstraint("source_kind", "source_order_id", name="uq_deduction_source"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    source_order_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    deduction_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    deduction_month: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    user: Mapped["User"] = relationship("User")
