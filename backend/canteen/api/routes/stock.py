"""Ingredient stock routes (admin)."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from canteen.core.exceptions import InsufficientStockError
from canteen.core.rate_limit import limiter
from canteen.core.rbac import RequireAdmin
from canteen.core.sanitize import sanitize_text
from canteen.db.session import DbSession
from canteen.schemas.stock import (
    ConsumptionCreate,
    ConsumptionResponse,
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
    StockAdjustmentRequest,
    StockAdjustmentResponse,
    StockHistoryResponse,
    StockLevelsResponse,
)
from canteen.services.stock_service import StockService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ingredients", response_model=list[IngredientResponse])
@limiter.limit("60/minute")
def list_ingredients(request: Request, db: DbSession, current_user: RequireAdmin):
    return StockService(db).list_ingredients()


@router.post("/ingredients", response_model=IngredientResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_ingredient(request: Request, db: DbSession, current_user: RequireAdmin, body: IngredientCreate):
    values = body.model_dump()
    values["name"] = sanitize_text(values["name"])
    try:
        return StockService(db).create_ingredient(values)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/ingredients/{ingredient_id}", response_model=IngredientResponse)
@limiter.limit("30/minute")
def update_ingredient(
    request: Request, db: DbSession, current_user: RequireAdmin,
    ingredient_id: int, body: IngredientUpdate,
):
    patch = body.model_dump(exclude_unset=True)
    if patch.get("name") is not None:
        patch["name"] = sanitize_text(patch["name"])
    return StockService(db).update_ingredient(ingredient_id, patch)


@router.delete("/ingredients/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_ingredient(request: Request, db: DbSession, current_user: RequireAdmin, ingredient_id: int):
    StockService(db).delete_ingredient(ingredient_id)
    logger.info(f"Ingredient {ingredient_id} deleted by user {current_user.user_id}")


@router.get("/levels", response_model=StockLevelsResponse)
@limiter.limit("60/minute")
def get_stock_levels(request: Request, db: DbSession, current_user: RequireAdmin):
    """Ingredients at or below their low-stock threshold, and the rest."""
    return StockService(db).stock_levels()


@router.post(
    "/ingredients/{ingredient_id}/adjust",
    response_model=StockAdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("30/minute")
def adjust_stock(
    request: Request, db: DbSession, current_user: RequireAdmin,
    ingredient_id: int, body: StockAdjustmentRequest,
):
    try:
        return StockService(db).adjust(
            ingredient_id, body.adjustment_type, body.quantity, current_user, reason=body.reason,
        )
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/adjustments", response_model=list[StockAdjustmentResponse])
@limiter.limit("60/minute")
def list_adjustments(
    request: Request, db: DbSession, current_user: RequireAdmin,
    ingredient_id: Optional[int] = None,
    limit: int = Query(100, ge=1, le=500),
):
    return StockService(db).adjustments(ingredient_id=ingredient_id, limit=limit)


@router.get("/ingredients/{ingredient_id}/history", response_model=list[StockHistoryResponse])
@limiter.limit("60/minute")
def get_stock_history(
    request: Request, db: DbSession, current_user: RequireAdmin,
    ingredient_id: int,
    limit: int = Query(100, ge=1, le=500),
):
    return StockService(db).history(ingredient_id, limit=limit)


@router.post("/consumption", response_model=ConsumptionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def log_consumption(request: Request, db: DbSession, current_user: RequireAdmin, body: ConsumptionCreate):
    try:
        return StockService(db).log_consumption(
            body.ingredient_id, body.quantity_used, current_user,
            consumption_date=body.consumption_date, notes=body.notes,
        )
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))
