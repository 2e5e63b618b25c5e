"""Order models, one per order kind.

Each kind is its own mapped class carrying its rules as class attributes
(status set, initial and terminal statuses, amount column, payroll
deductibility), so callers never switch on a type string. Regular and
general meal orders share the ``meal_orders`` table through single-table
inheritance on ``order_type``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import (
    Boolean, Date, ForeignKey, Integer, Numeric, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from canteen.db.base import Base, TimestampMixin
from canteen.models.validators import non_negative, positive


class OrderKind(str, Enum):
    """Kinds of order an employee can place."""

    REGULAR = "regular"
    GENERAL = "general"
    PARTY = "party"
    MASSAGE = "massage"
    BEVERAGE = "beverage"
    HOME_MEAL = "home_meal"
    ESTATE = "estate"


class MealOrderStatus(str, Enum):
    """Status of a canteen meal or beverage order."""

    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class HomeMealStatus(str, Enum):
    """Status of a home-meal delivery order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MassageStatus(str, Enum):
    """Status of a massage booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PartyStatus(str, Enum):
    """Status of a party catering order."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class EstateStatus(str, Enum):
    """Status of an estate / household request."""

    REQUESTED = "requested"
    APPROVED = "approved"
    ISSUED = "issued"
    REJECTED = "rejected"


COMPLETED = "completed"


class OrderKindPolicy:
    """Static per-kind rules, set as class attributes by each order model."""

    # Plain (unannotated) attributes so declarative leaves them unmapped.
    kind = None
    status_enum = None
    initial_status = None
    terminal_statuses = frozenset()
    amount_field = None
    deductible = False
    date_field = "created_at"
    label = "Order"

    @classmethod
    def allowed_statuses(cls) -> List[str]:
        return [s.value for s in cls.status_enum]

    @classmethod
    def accepts_status(cls, status: str) -> bool:
        return status in cls.allowed_statuses()

    @property
    def amount(self) -> Optional[Decimal]:
        """Monetary total of the order, or None for kinds without one."""
        if self.amount_field is None:
            return None
        return getattr(self, self.amount_field)

    @property
    def is_terminal(self) -> bool:
        return self.status in self.terminal_statuses

    @property
    def reference(self) -> str:
        return f"#{self.id}"

    def details(self) -> Dict[str, Any]:
        """Kind-specific columns for listings and exports."""
        return {}


# ==================== MEAL ORDERS (regular / general) ====================

class MealOrder(Base, TimestampMixin, OrderKindPolicy):
    """Canteen meal order placed from a session menu cart."""

    __tablename__ = "meal_orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    order_number: Mapped[Optional[str]] = mapped_column(String(30), unique=True, nullable=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    session_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("meal_sessions.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    order_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    pickup_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    charge_account: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ordered_by_admin_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    ordered_for_employee_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    items: Mapped[List["MealOrderItem"]] = relationship(
        "MealOrderItem", back_populates="order", cascade="all, delete-orphan"
    )

    __mapper_args__ = {"polymorphic_on": "order_type"}

    status_enum = MealOrderStatus
    initial_status = MealOrderStatus.PENDING.value
    terminal_statuses = frozenset({MealOrderStatus.COMPLETED.value, MealOrderStatus.CANCELLED.value})
    amount_field = "total_amount"
    date_field = "order_date"

    @validates("total_amount")
    def _validate_total(self, key, value):
        return non_negative(key, value)

    @property
    def reference(self) -> str:
        return self.order_number or f"#{self.id}"

    def details(self) -> Dict[str, Any]:
        return {
            "Order Number": self.reference,
            "Charge Account": self.charge_account or "",
            "Pickup Time": self.pickup_time or "",
            "Ordered For": self.ordered_for_employee_id or "",
        }


class RegularOrder(MealOrder):
    """Employee meal order, deducted from salary on completion."""

    __mapper_args__ = {"polymorphic_identity": OrderKind.REGULAR.value}

    kind = OrderKind.REGULAR
    deductible = True
    label = "Regular Order"


class GeneralOrder(MealOrder):
    """Meal order charged to a department account rather than payroll."""

    __mapper_args__ = {"polymorphic_identity": OrderKind.GENERAL.value}

    kind = OrderKind.GENERAL
    deductible = False
    label = "General Order"


class MealOrderItem(Base):
    """A line of a meal order; name and price are snapshots."""

    __tablename__ = "meal_order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("meal_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True
    )
    item_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["MealOrder"] = relationship("MealOrder", back_populates="items")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)


# ==================== PARTY ORDERS ====================

class PartyOrder(Base, TimestampMixin, OrderKindPolicy):
    """Department party catering request, billed outside payroll."""

    __tablename__ = "party_orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    party_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    estimated_headcount: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)

    user: Mapped["User"] = relationship("User")
    items: Mapped[List["PartyOrderItem"]] = relationship(
        "PartyOrderItem", back_populates="party_order", cascade="all, delete-orphan"
    )

    kind = OrderKind.PARTY
    status_enum = PartyStatus
    initial_status = PartyStatus.PENDING.value
    terminal_statuses = frozenset({PartyStatus.REJECTED.value, PartyStatus.COMPLETED.value})
    amount_field = "total_cost"
    deductible = False
    date_field = "party_date"
    label = "Party Order"

    @validates("estimated_headcount")
    def _validate_headcount(self, key, value):
        return positive(key, value)

    def details(self) -> Dict[str, Any]:
        return {
            "Department": self.department,
            "Party Date": self.party_date.isoformat(),
            "Headcount": self.estimated_headcount,
        }


class PartyOrderItem(Base):
    """A dish requested for a party."""

    __tablename__ = "party_order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    party_order_id: Mapped[int] = mapped_column(
        ForeignKey("party_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True
    )
    item_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    party_order: Mapped["PartyOrder"] = relationship("PartyOrder", back_populates="items")


# ==================== MASSAGE ====================

class MassageService(Base, TimestampMixin):
    """A bookable massage treatment."""

    __tablename__ = "massage_services"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("price")
    def _validate_price(self, key, value):
        return non_negative(key, value)


class MassageBooking(Base, TimestampMixin, OrderKindPolicy):
    """Massage appointment; price is a snapshot of the service price."""

    __tablename__ = "massage_bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("massage_services.id", ondelete="SET NULL"), nullable=True
    )
    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    booking_time: Mapped[str] = mapped_column(String(8), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    user: Mapped["User"] = relationship("User")
    service: Mapped[Optional["MassageService"]] = relationship("MassageService")

    kind = OrderKind.MASSAGE
    status_enum = MassageStatus
    initial_status = MassageStatus.PENDING.value
    terminal_statuses = frozenset({MassageStatus.COMPLETED.value, MassageStatus.CANCELLED.value})
    amount_field = "price"
    deductible = True
    date_field = "booking_date"
    label = "Massage"

    def details(self) -> Dict[str, Any]:
        return {
            "Service": self.service.name if self.service else "",
            "Booking Time": self.booking_time,
        }


# ==================== BEVERAGES ====================

class BeverageItem(Base, TimestampMixin):
    """Beverage on the drinks counter menu."""

    __tablename__ = "beverage_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("price")
    def _validate_price(self, key, value):
        return non_negative(key, value)


class BeverageOrder(Base, TimestampMixin, OrderKindPolicy):
    """A single beverage line ordered by an employee."""

    __tablename__ = "beverage_orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    beverage_item_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("beverage_items.id", ondelete="SET NULL"), nullable=True
    )
    item_name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    user: Mapped["User"] = relationship("User")

    kind = OrderKind.BEVERAGE
    status_enum = MealOrderStatus
    initial_status = MealOrderStatus.PENDING.value
    terminal_statuses = frozenset({MealOrderStatus.COMPLETED.value, MealOrderStatus.CANCELLED.value})
    amount_field = "total_amount"
    deductible = True
    date_field = "order_date"
    label = "Beverage"

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)

    def details(self) -> Dict[str, Any]:
        return {"Item": self.item_name, "Quantity": self.quantity}


# ==================== HOME MEALS ====================

class HomeMealOrder(Base, TimestampMixin, OrderKindPolicy):
    """Meal delivered to an employee's residence."""

    __tablename__ = "home_meal_orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    delivery_charge: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    building: Mapped[str] = mapped_column(String(100), nullable=False)
    flat_no: Mapped[str] = mapped_column(String(50), nullable=False)
    landmark: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    pin_code: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    order_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    user: Mapped["User"] = relationship("User")
    items: Mapped[List["HomeMealOrderItem"]] = relationship(
        "HomeMealOrderItem", back_populates="order", cascade="all, delete-orphan"
    )

    kind = OrderKind.HOME_MEAL
    status_enum = HomeMealStatus
    initial_status = HomeMealStatus.PENDING.value
    terminal_statuses = frozenset({
        HomeMealStatus.DELIVERED.value,
        HomeMealStatus.COMPLETED.value,
        HomeMealStatus.CANCELLED.value,
    })
    amount_field = "total_amount"
    deductible = True
    date_field = "order_date"
    label = "Home Meal"

    def details(self) -> Dict[str, Any]:
        return {
            "Address": f"{self.building}, {self.flat_no}",
            "Delivery Charge": self.delivery_charge,
        }


class HomeMealOrderItem(Base):
    __tablename__ = "home_meal_order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    home_meal_order_id: Mapped[int] = mapped_column(
        ForeignKey("home_meal_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True
    )
    item_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["HomeMealOrder"] = relationship("HomeMealOrder", back_populates="items")


# ==================== ESTATE ====================

class EstateItem(Base, TimestampMixin):
    """Household item the estate office can issue (bulbs, furniture, ...)."""

    __tablename__ = "estate_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class EstateRequest(Base, TimestampMixin, OrderKindPolicy):
    """Request for an estate item; no monetary amount."""

    __tablename__ = "estate_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    estate_item_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("estate_items.id", ondelete="SET NULL"), nullable=True
    )
    item_name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    room_flat: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    request_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    user: Mapped["User"] = relationship("User")

    kind = OrderKind.ESTATE
    status_enum = EstateStatus
    initial_status = EstateStatus.REQUESTED.value
    terminal_statuses = frozenset({EstateStatus.ISSUED.value, EstateStatus.REJECTED.value})
    amount_field = None
    deductible = False
    date_field = "request_date"
    label = "Estate Request"

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)

    def details(self) -> Dict[str, Any]:
        return {"Item": self.item_name, "Quantity": self.quantity, "Room/Flat": self.room_flat}


ORDER_MODELS: Dict[OrderKind, Type[OrderKindPolicy]] = {
    OrderKind.REGULAR: RegularOrder,
    OrderKind.GENERAL: GeneralOrder,
    OrderKind.PARTY: PartyOrder,
    OrderKind.MASSAGE: MassageBooking,
    OrderKind.BEVERAGE: BeverageOrder,
    OrderKind.HOME_MEAL: HomeMealOrder,
    OrderKind.ESTATE: EstateRequest,
}


def order_model(kind: OrderKind) -> Type[OrderKindPolicy]:
    """Model class for an order kind."""
    return ORDER_MODELS[OrderKind(kind)]
