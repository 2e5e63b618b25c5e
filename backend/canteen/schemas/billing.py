"""Billing schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class DeductionResponse(BaseModel):
    id: int
    user_id: int
    source_kind: str
    source_order_id: int
    amount: Decimal
    deduction_date: date
    deduction_month: date
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class StatementResponse(BaseModel):
    user_id: int
    full_name: str
    employee_id: Optional[str] = None
    month: date
    deductions: List[DeductionResponse]
    total: Decimal
