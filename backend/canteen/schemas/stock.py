"""Stock and consumption schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from canteen.models.stock import AdjustmentType


class IngredientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    unit: str = Field(..., min_length=1, max_length=20)
    cost_per_unit: Decimal = Field(Decimal("0"), ge=0)
    current_stock: Decimal = Field(Decimal("0"), ge=0)
    low_stock_threshold: Decimal = Field(Decimal("0"), ge=0)


class IngredientUpdate(BaseModel):
    """Ingredient details; stock levels change only through adjustments."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    cost_per_unit: Optional[Decimal] = Field(None, ge=0)
    low_stock_threshold: Optional[Decimal] = Field(None, ge=0)


class IngredientResponse(BaseModel):
    id: int
    name: str
    unit: str
    cost_per_unit: Decimal
    current_stock: Decimal
    low_stock_threshold: Decimal
    last_restocked_at: Optional[datetime] = None
    is_low: bool

    model_config = {"from_attributes": True}


class StockLevelsResponse(BaseModel):
    low: List[IngredientResponse]
    ok: List[IngredientResponse]


class StockAdjustmentRequest(BaseModel):
    """Manual stock adjustment request."""

    adjustment_type: AdjustmentType
    quantity: Decimal = Field(..., gt=0)
    reason: str = Field("", max_length=500)


class StockAdjustmentResponse(BaseModel):
    id: int
    ingredient_id: int
    adjustment_type: str
    quantity: Decimal
    previous_stock: Decimal
    new_stock: Decimal
    reason: str
    adjusted_by: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class StockHistoryResponse(BaseModel):
    id: int
    ingredient_id: int
    change_amount: Decimal
    change_type: str
    notes: str
    created_by: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ConsumptionCreate(BaseModel):
    ingredient_id: int
    quantity_used: Decimal = Field(..., gt=0)
    consumption_date: Optional[date] = None
    notes: str = Field("", max_length=500)


class ConsumptionResponse(BaseModel):
    id: int
    ingredient_id: Optional[int] = None
    quantity_used: Decimal
    consumption_date: date
    notes: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ConsumptionReportRow(BaseModel):
    ingredient_id: Optional[int] = None
    name: str
    unit: str
    total_quantity: Decimal
    total_cost: Decimal


class ConsumptionReportResponse(BaseModel):
    month: date
    items: List[ConsumptionReportRow]
    total_cost: Decimal
