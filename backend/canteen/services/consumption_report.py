"""Monthly ingredient consumption report."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from canteen.core.clock import month_start
from canteen.db.record_store import RecordStore
from canteen.models.stock import ConsumptionLog, Ingredient
from canteen.services.billing_service import next_month

UNKNOWN_INGREDIENT = "Unknown"


def consumption_report(db: Session, month: date) -> Dict[str, Any]:
    """Quantity and cost used per ingredient in a month, highest cost first.

    Logs whose ingredient no longer exists are grouped under "Unknown"
    with zero cost.
    """
    store = RecordStore(db)
    start = month_start(month)
    logs = store.find(
        ConsumptionLog,
        ConsumptionLog.consumption_date >= start,
        ConsumptionLog.consumption_date < next_month(start),
    )

    totals: Dict[Optional[int], Decimal] = defaultdict(Decimal)
    for log in logs:
        totals[log.ingredient_id] += Decimal(log.quantity_used)

    known_ids = [i for i in totals if i is not None]
    ingredients = {
        i.id: i for i in store.find(Ingredient, Ingredient.id.in_(known_ids))
    } if known_ids else {}

    rows: Dict[Any, Dict[str, Any]] = {}
    for ingredient_id, quantity in totals.items():
        ingredient = ingredients.get(ingredient_id)
        if ingredient is None:
            row = rows.setdefault(UNKNOWN_INGREDIENT, {
                "ingredient_id": None,
                "name": UNKNOWN_INGREDIENT,
                "unit": "",
                "total_quantity": Decimal("0"),
                "total_cost": Decimal("0"),
            })
            row["total_quantity"] += quantity
            continue
        rows[ingredient_id] = {
            "ingredient_id": ingredient.id,
            "name": ingredient.name,
            "unit": ingredient.unit,
            "total_quantity": quantity,
            "total_cost": quantity * Decimal(ingredient.cost_per_unit),
        }

    items: List[Dict[str, Any]] = sorted(
        rows.values(), key=lambda r: r["total_cost"], reverse=True
    )
    return {
        "month": start,
        "items": items,
        "total_cost": sum((r["total_cost"] for r in items), Decimal("0")),
    }
