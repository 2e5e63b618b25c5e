"""Menu item and daily menu routes."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from canteen.core.clock import local_today
from canteen.core.rate_limit import limiter
from canteen.core.rbac import CurrentUser, RequireAdmin
from canteen.core.sanitize import sanitize_text
from canteen.db.record_store import RecordStore
from canteen.db.session import DbSession
from canteen.models.menu import DailyMenu, MealSession, MenuItem
from canteen.schemas.menu import (
    DailyMenuCreate,
    DailyMenuResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== MENU ITEMS ====================

@router.get("/items", response_model=list[MenuItemResponse])
@limiter.limit("60/minute")
def list_menu_items(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    category: Optional[str] = None,
    available_only: bool = False,
):
    equals = {}
    if category:
        equals["category"] = category
    if available_only:
        equals["available"] = True
    return RecordStore(db).find(MenuItem, order_by=[MenuItem.category, MenuItem.name], **equals)


@router.get("/items/{item_id}", response_model=MenuItemResponse)
@limiter.limit("60/minute")
def get_menu_item(request: Request, db: DbSession, current_user: CurrentUser, item_id: int):
    item = RecordStore(db).get(MenuItem, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@router.post("/items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_menu_item(request: Request, db: DbSession, current_user: RequireAdmin, item: MenuItemCreate):
    values = item.model_dump()
    values["name"] = sanitize_text(values["name"])
    values["description"] = sanitize_text(values["description"])
    return RecordStore(db).insert(MenuItem, values)


@router.put("/items/{item_id}", response_model=MenuItemResponse)
@limiter.limit("30/minute")
def update_menu_item(
    request: Request, db: DbSession, current_user: RequireAdmin,
    item_id: int, item: MenuItemUpdate,
):
    store = RecordStore(db)
    if store.get(MenuItem, item_id) is None:
        raise HTTPException(status_code=404, detail="Menu item not found")
    patch = item.model_dump(exclude_unset=True)
    for key in ("name", "description"):
        if patch.get(key) is not None:
            patch[key] = sanitize_text(patch[key])
    return store.update(MenuItem, item_id, patch)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_menu_item(request: Request, db: DbSession, current_user: RequireAdmin, item_id: int):
    """Hard delete; existing orders keep their own name and price copies."""
    store = RecordStore(db)
    if store.get(MenuItem, item_id) is None:
        raise HTTPException(status_code=404, detail="Menu item not found")
    store.delete(MenuItem, item_id)
    logger.info(f"Menu item {item_id} deleted by user {current_user.user_id}")


# ==================== DAILY MENU ====================

@router.get("/daily", response_model=list[DailyMenuResponse])
@limiter.limit("60/minute")
def list_daily_menu(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    menu_date: Optional[date] = Query(None),
    session_id: Optional[int] = None,
):
    equals = {"menu_date": menu_date or local_today()}
    if session_id is not None:
        equals["session_id"] = session_id
    return RecordStore(db).find(DailyMenu, order_by=DailyMenu.id, **equals)


@router.post("/daily", response_model=DailyMenuResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def add_daily_menu_entry(request: Request, db: DbSession, current_user: RequireAdmin, body: DailyMenuCreate):
    store = RecordStore(db)
    if store.get(MealSession, body.session_id) is None:
        raise HTTPException(status_code=404, detail="Meal session not found")
    if store.get(MenuItem, body.menu_item_id) is None:
        raise HTTPException(status_code=404, detail="Menu item not found")
    existing = store.find(
        DailyMenu,
        menu_date=body.menu_date, session_id=body.session_id, menu_item_id=body.menu_item_id,
    )
    if existing:
        raise HTTPException(status_code=400, detail="Item is already on this session's menu")
    return store.insert(DailyMenu, body.model_dump())


@router.delete("/daily/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def remove_daily_menu_entry(request: Request, db: DbSession, current_user: RequireAdmin, entry_id: int):
    store = RecordStore(db)
    if store.get(DailyMenu, entry_id) is None:
        raise HTTPException(status_code=404, detail="Daily menu entry not found")
    store.delete(DailyMenu, entry_id)


@router.get("/sessions/{session_id}/today", response_model=list[MenuItemResponse])
@limiter.limit("60/minute")
def get_session_menu_today(request: Request, db: DbSession, current_user: CurrentUser, session_id: int):
    """Items on today's menu for a session that can currently be ordered."""
    store = RecordStore(db)
    if store.get(MealSession, session_id) is None:
        raise HTTPException(status_code=404, detail="Meal session not found")
    entries = store.find(
        DailyMenu, menu_date=local_today(), session_id=session_id, available=True,
    )
    return [e.menu_item for e in entries if e.menu_item.available]
