"""Ingredient stock service.

Every change to ``current_stock`` goes through this service and is written
together with its ledger rows in one commit:
- manual adjustments write a ``stock_adjustments`` row and a ``stock_history`` row
- kitchen consumption writes a ``consumption_logs`` row and a ``stock_history`` row

Stock never goes negative; a subtraction larger than the stock on hand
raises ``InsufficientStockError`` and nothing is written.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from canteen.core.clock import local_today
from canteen.core.exceptions import InsufficientStockError, RecordNotFound
from canteen.core.rbac import TokenData
from canteen.core.sanitize import sanitize_text
from canteen.db.record_store import RecordStore
from canteen.models.stock import (
    AdjustmentType,
    ConsumptionLog,
    Ingredient,
    StockAdjustment,
    StockHistory,
)

logger = logging.getLogger(__name__)


class StockService:
    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    def _ingredient(self, ingredient_id: int) -> Ingredient:
        ingredient = self.store.get(Ingredient, ingredient_id)
        if ingredient is None:
            raise RecordNotFound(Ingredient.__tablename__, ingredient_id)
        return ingredient

    # ===== INGREDIENTS =====

    def list_ingredients(self) -> List[Ingredient]:
        return self.store.find(Ingredient, order_by=Ingredient.name)

    def create_ingredient(self, values: Dict[str, Any]) -> Ingredient:
        if self.store.find(Ingredient, name=values["name"], limit=1):
            raise ValueError(f"Ingredient '{values['name']}' already exists")
        return self.store.insert(Ingredient, values)

    def update_ingredient(self, ingredient_id: int, patch: Dict[str, Any]) -> Ingredient:
        return self.store.update(Ingredient, ingredient_id, patch)

    def delete_ingredient(self, ingredient_id: int) -> None:
        self.store.delete(Ingredient, ingredient_id)

    def stock_levels(self) -> Dict[str, List[Ingredient]]:
        """Ingredients split into ``low`` (at or below threshold) and ``ok``."""
        ingredients = self.list_ingredients()
        return {
            "low": [i for i in ingredients if i.is_low],
            "ok": [i for i in ingredients if not i.is_low],
        }

    # ===== ADJUSTMENTS =====

    def adjust(
        self,
        ingredient_id: int,
        adjustment_type: AdjustmentType,
        quantity: Decimal,
        actor: TokenData,
        reason: str = "",
    ) -> StockAdjustment:
        """Add to or subtract from an ingredient's stock."""
        ingredient = self._ingredient(ingredient_id)
        adjustment_type = AdjustmentType(adjustment_type)
        quantity = Decimal(str(quantity))
        previous = Decimal(ingredient.current_stock)

        if adjustment_type == AdjustmentType.ADD:
            delta = quantity
        else:
            delta = -quantity
        new_stock = previous + delta
        if new_stock < 0:
            raise InsufficientStockError(ingredient.name, previous, quantity, ingredient.unit)

        ingredient.current_stock = new_stock
        if adjustment_type == AdjustmentType.ADD:
            ingredient.last_restocked_at = datetime.now(timezone.utc)

        reason = sanitize_text(reason) or ""
        adjustment = StockAdjustment(
            ingredient_id=ingredient.id,
            adjustment_type=adjustment_type.value,
            quantity=quantity,
            previous_stock=previous,
            new_stock=new_stock,
            reason=reason,
            adjusted_by=actor.user_id,
        )
        history = StockHistory(
            ingredient_id=ingredient.id,
            change_amount=delta,
            change_type="adjustment",
            notes=reason,
            created_by=actor.user_id,
        )
        self.store.insert_many([adjustment, history])
        logger.info(
            f"Stock {adjustment_type.value} {quantity} {ingredient.unit} of '{ingredient.name}': "
            f"{previous} -> {new_stock} by user {actor.user_id}"
        )
        return adjustment

    def adjustments(self, ingredient_id: Optional[int] = None, limit: int = 100) -> List[StockAdjustment]:
        equals = {}
        if ingredient_id is not None:
            equals["ingredient_id"] = ingredient_id
        return self.store.find(
            StockAdjustment,
            order_by=[StockAdjustment.created_at.desc(), StockAdjustment.id.desc()],
            limit=limit,
            **equals,
        )

    def history(self, ingredient_id: int, limit: int = 100) -> List[StockHistory]:
        self._ingredient(ingredient_id)
        return self.store.find(
            StockHistory,
            ingredient_id=ingredient_id,
            order_by=[StockHistory.created_at.desc(), StockHistory.id.desc()],
            limit=limit,
        )

    # ===== CONSUMPTION =====

    def log_consumption(
        self,
        ingredient_id: int,
        quantity: Decimal,
        actor: TokenData,
        consumption_date: Optional[date] = None,
        notes: str = "",
    ) -> ConsumptionLog:
        """Record kitchen usage and draw it from stock."""
        ingredient = self._ingredient(ingredient_id)
        quantity = Decimal(str(quantity))
        previous = Decimal(ingredient.current_stock)
        if quantity > previous:
            raise InsufficientStockError(ingredient.name, previous, quantity, ingredient.unit)

        ingredient.current_stock = previous - quantity
        notes = sanitize_text(notes) or ""
        log = ConsumptionLog(
            ingredient_id=ingredient.id,
            quantity_used=quantity,
            consumption_date=consumption_date or local_today(),
            notes=notes,
            logged_by=actor.user_id,
        )
        history = StockHistory(
            ingredient_id=ingredient.id,
            change_amount=-quantity,
            change_type="consumption",
            notes=notes,
            created_by=actor.user_id,
        )
        self.store.insert_many([log, history])
        return log
