"""Schemas for bookable services and orderable catalog items."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class MassageServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    duration_minutes: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    active: bool = True


class MassageServiceResponse(BaseModel):
    id: int
    name: str
    duration_minutes: int
    price: Decimal
    active: bool

    model_config = {"from_attributes": True}


class BeverageItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0)
    available: bool = True


class BeverageItemResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    available: bool

    model_config = {"from_attributes": True}


class EstateItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field("", max_length=50)
    available: bool = True


class EstateItemResponse(BaseModel):
    id: int
    name: str
    category: str
    available: bool

    model_config = {"from_attributes": True}


class CatalogItemUpdate(BaseModel):
    """Partial update shared by the three catalogs; unknown keys are ignored per catalog."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, ge=1)
    category: Optional[str] = Field(None, max_length=50)
    available: Optional[bool] = None
    active: Optional[bool] = None
