"""Weekly menu plan routes."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from sqlalchemy import case

from canteen.core.rate_limit import limiter
from canteen.core.rbac import CurrentUser, RequireAdmin
from canteen.core.sanitize import sanitize_text
from canteen.db.record_store import RecordStore
from canteen.db.session import DbSession
from canteen.models.menu import WeeklyMenu
from canteen.schemas.menu import MealType, WeeklyMenuCreate, WeeklyMenuResponse, WeeklyMenuUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

MEAL_TYPE_ORDER = case(
    {"breakfast": 0, "lunch": 1, "snacks": 2, "dinner": 3},
    value=WeeklyMenu.meal_type,
    else_=4,
)


@router.get("/", response_model=list[WeeklyMenuResponse])
@limiter.limit("60/minute")
def list_weekly_menu(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    day_of_week: Optional[int] = Query(None, ge=0, le=6),
    meal_type: Optional[MealType] = None,
    active_only: bool = False,
):
    """Weekly plan ordered by day (Sunday first) then meal of the day."""
    equals = {}
    if day_of_week is not None:
        equals["day_of_week"] = day_of_week
    if meal_type:
        equals["meal_type"] = meal_type
    if active_only:
        equals["active"] = True
    return RecordStore(db).find(
        WeeklyMenu,
        order_by=[WeeklyMenu.day_of_week, MEAL_TYPE_ORDER, WeeklyMenu.item_name],
        **equals,
    )


@router.post("/", response_model=WeeklyMenuResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_weekly_menu_item(request: Request, db: DbSession, current_user: RequireAdmin, body: WeeklyMenuCreate):
    values = body.model_dump()
    values["item_name"] = sanitize_text(values["item_name"])
    values["description"] = sanitize_text(values["description"])
    return RecordStore(db).insert(WeeklyMenu, values)


@router.put("/{entry_id}", response_model=WeeklyMenuResponse)
@limiter.limit("30/minute")
def update_weekly_menu_item(
    request: Request, db: DbSession, current_user: RequireAdmin,
    entry_id: int, body: WeeklyMenuUpdate,
):
    store = RecordStore(db)
    if store.get(WeeklyMenu, entry_id) is None:
        raise HTTPException(status_code=404, detail="Weekly menu entry not found")
    patch = body.model_dump(exclude_unset=True)
    for key in ("item_name", "description"):
        if patch.get(key) is not None:
            patch[key] = sanitize_text(patch[key])
    return store.update(WeeklyMenu, entry_id, patch)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_weekly_menu_item(request: Request, db: DbSession, current_user: RequireAdmin, entry_id: int):
    store = RecordStore(db)
    if store.get(WeeklyMenu, entry_id) is None:
        raise HTTPException(status_code=404, detail="Weekly menu entry not found")
    store.delete(WeeklyMenu, entry_id)
