"""Order placement, listing and status schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from canteen.schemas.billing import DeductionResponse
from canteen.schemas.sessions import validate_clock


# ==================== REQUESTS ====================

class CartLine(BaseModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1, le=100)


class RegularOrderCreate(BaseModel):
    session_id: int
    items: List[CartLine] = Field(..., min_length=1)
    pickup_time: Optional[str] = None
    notes: str = Field("", max_length=1000)

    @field_validator("pickup_time")
    @classmethod
    def check_pickup_time(cls, v):
        return validate_clock(v)


class GeneralOrderCreate(BaseModel):
    session_id: int
    items: List[CartLine] = Field(..., min_length=1)
    charge_account: str = Field(..., min_length=1, max_length=100)
    notes: str = Field("", max_length=1000)


class AdminOrderCreate(BaseModel):
    """Order placed by an admin for an employee, addressed by payroll number."""

    employee_id: str = Field(..., min_length=1, max_length=50)
    session_id: int
    items: List[CartLine] = Field(..., min_length=1)
    notes: str = Field("", max_length=1000)


class PartyOrderCreate(BaseModel):
    department: str = Field(..., min_length=1, max_length=100)
    party_date: date
    estimated_headcount: int = Field(..., ge=1)
    description: str = Field("", max_length=2000)
    items: List[CartLine] = Field(default_factory=list)


class MassageBookingCreate(BaseModel):
    service_id: int
    booking_date: date
    booking_time: str
    notes: str = Field("", max_length=1000)

    @field_validator("booking_time")
    @classmethod
    def check_booking_time(cls, v):
        return validate_clock(v)


class BeverageLine(BaseModel):
    beverage_item_id: int
    quantity: int = Field(..., ge=1, le=50)


class BeverageOrderCreate(BaseModel):
    items: List[BeverageLine] = Field(..., min_length=1)


class HomeMealOrderCreate(BaseModel):
    items: List[CartLine] = Field(..., min_length=1)
    building: str = Field(..., min_length=1, max_length=100)
    flat_no: str = Field(..., min_length=1, max_length=50)
    landmark: str = Field("", max_length=200)
    pin_code: str = Field("", max_length=10)
    notes: str = Field("", max_length=1000)


class EstateRequestCreate(BaseModel):
    estate_item_id: int
    quantity: int = Field(1, ge=1)
    room_flat: str = Field(..., min_length=1, max_length=50)
    notes: str = Field("", max_length=1000)


class StatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=30)


# ==================== RESPONSES ====================

class OrderLineResponse(BaseModel):
    id: int
    menu_item_id: Optional[int] = None
    item_name: str
    quantity: int
    price: Decimal

    model_config = {"from_attributes": True}


class MealOrderResponse(BaseModel):
    id: int
    order_type: str
    order_number: Optional[str] = None
    user_id: int
    session_id: Optional[int] = None
    status: str
    total_amount: Decimal
    order_date: date
    pickup_time: Optional[str] = None
    notes: str
    charge_account: Optional[str] = None
    ordered_by_admin_id: Optional[int] = None
    ordered_for_employee_id: Optional[str] = None
    items: List[OrderLineResponse] = []
    created_at: datetime

    model_config = {"from_attributes": True}


class PartyOrderResponse(BaseModel):
    id: int
    user_id: int
    department: str
    party_date: date
    order_date: date
    description: str
    estimated_headcount: int
    status: str
    total_cost: Decimal
    items: List[OrderLineResponse] = []
    created_at: datetime

    model_config = {"from_attributes": True}


class MassageBookingResponse(BaseModel):
    id: int
    user_id: int
    service_id: Optional[int] = None
    booking_date: date
    booking_time: str
    price: Decimal
    notes: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BeverageOrderResponse(BaseModel):
    id: int
    user_id: int
    beverage_item_id: Optional[int] = None
    item_name: str
    quantity: int
    total_amount: Decimal
    order_date: date
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class HomeMealOrderResponse(BaseModel):
    id: int
    user_id: int
    total_amount: Decimal
    delivery_charge: Decimal
    building: str
    flat_no: str
    landmark: str
    pin_code: str
    notes: str
    order_date: date
    status: str
    items: List[OrderLineResponse] = []
    created_at: datetime

    model_config = {"from_attributes": True}


class EstateRequestResponse(BaseModel):
    id: int
    user_id: int
    estate_item_id: Optional[int] = None
    item_name: str
    quantity: int
    room_flat: str
    notes: str
    request_date: date
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderRow(BaseModel):
    """One order of any kind in the unified admin listing."""

    kind: str
    label: str
    id: int
    reference: str
    user_id: int
    user_name: str
    employee_id: str
    status: str
    allowed_statuses: List[str]
    amount: Optional[Decimal] = None
    order_date: Optional[date] = None
    created_at: datetime
    details: Dict[str, Any] = {}


class StatusChangeResponse(BaseModel):
    kind: str
    order_id: int
    previous_status: str
    status: str
    deduction: Optional[DeductionResponse] = None
    warning: Optional[str] = None
