"""Menu, daily menu and weekly menu schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

MealType = Literal["breakfast", "lunch", "dinner", "snacks"]


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    available: bool = True


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    available: Optional[bool] = None


class MenuItemResponse(BaseModel):
    id: int
    name: str
    description: str
    category: str
    price: Decimal
    image_url: Optional[str] = None
    available: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class DailyMenuCreate(BaseModel):
    menu_date: date
    session_id: int
    menu_item_id: int
    available: bool = True


class DailyMenuResponse(BaseModel):
    id: int
    menu_date: date
    session_id: int
    menu_item_id: int
    available: bool
    menu_item: MenuItemResponse

    model_config = {"from_attributes": True}


class WeeklyMenuCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: Decimal = Field(Decimal("0"), ge=0)
    is_veg: bool = True
    day_of_week: int = Field(..., ge=0, le=6)
    meal_type: MealType
    image_url: Optional[str] = Field(None, max_length=500)
    active: bool = True


class WeeklyMenuUpdate(BaseModel):
    item_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    is_veg: Optional[bool] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    meal_type: Optional[MealType] = None
    image_url: Optional[str] = Field(None, max_length=500)
    active: Optional[bool] = None


class WeeklyMenuResponse(BaseModel):
    id: int
    item_name: str
    description: str
    price: Decimal
    is_veg: bool
    day_of_week: int
    meal_type: str
    image_url: Optional[str] = None
    active: bool

    model_config = {"from_attributes": True}
