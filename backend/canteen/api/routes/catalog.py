"""Catalog routes: massage services, beverages and estate items."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from canteen.core.rate_limit import limiter
from canteen.core.rbac import CurrentUser, RequireAdmin
from canteen.core.sanitize import sanitize_text
from canteen.db.record_store import RecordStore
from canteen.db.session import DbSession
from canteen.models.orders import BeverageItem, EstateItem, MassageService
from canteen.schemas.catalog import (
    BeverageItemCreate,
    BeverageItemResponse,
    CatalogItemUpdate,
    EstateItemCreate,
    EstateItemResponse,
    MassageServiceCreate,
    MassageServiceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CATALOGS = {
    "massage-services": (MassageService, MassageServiceResponse),
    "beverages": (BeverageItem, BeverageItemResponse),
    "estate-items": (EstateItem, EstateItemResponse),
}


def _catalog(name: str):
    if name not in CATALOGS:
        raise HTTPException(status_code=404, detail="Unknown catalog")
    return CATALOGS[name]


@router.get("/massage-services", response_model=list[MassageServiceResponse])
@limiter.limit("60/minute")
def list_massage_services(request: Request, db: DbSession, current_user: CurrentUser):
    return RecordStore(db).find(MassageService, order_by=MassageService.name)


@router.post("/massage-services", response_model=MassageServiceResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_massage_service(request: Request, db: DbSession, current_user: RequireAdmin, body: MassageServiceCreate):
    values = body.model_dump()
    values["name"] = sanitize_text(values["name"])
    return RecordStore(db).insert(MassageService, values)


@router.get("/beverages", response_model=list[BeverageItemResponse])
@limiter.limit("60/minute")
def list_beverages(request: Request, db: DbSession, current_user: CurrentUser):
    return RecordStore(db).find(BeverageItem, order_by=BeverageItem.name)


@router.post("/beverages", response_model=BeverageItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_beverage(request: Request, db: DbSession, current_user: RequireAdmin, body: BeverageItemCreate):
    values = body.model_dump()
    values["name"] = sanitize_text(values["name"])
    return RecordStore(db).insert(BeverageItem, values)


@router.get("/estate-items", response_model=list[EstateItemResponse])
@limiter.limit("60/minute")
def list_estate_items(request: Request, db: DbSession, current_user: CurrentUser):
    return RecordStore(db).find(EstateItem, order_by=[EstateItem.category, EstateItem.name])


@router.post("/estate-items", response_model=EstateItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_estate_item(request: Request, db: DbSession, current_user: RequireAdmin, body: EstateItemCreate):
    values = body.model_dump()
    values["name"] = sanitize_text(values["name"])
    return RecordStore(db).insert(EstateItem, values)


@router.put("/{catalog}/{item_id}")
@limiter.limit("30/minute")
def update_catalog_item(
    request: Request, db: DbSession, current_user: RequireAdmin,
    catalog: str, item_id: int, body: CatalogItemUpdate,
):
    model, schema = _catalog(catalog)
    store = RecordStore(db)
    if store.get(model, item_id) is None:
        raise HTTPException(status_code=404, detail="Item not found")
    patch = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if key in schema.model_fields and key != "id"
    }
    if patch.get("name") is not None:
        patch["name"] = sanitize_text(patch["name"])
    return schema.model_validate(store.update(model, item_id, patch)).model_dump()


@router.delete("/{catalog}/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_catalog_item(request: Request, db: DbSession, current_user: RequireAdmin, catalog: str, item_id: int):
    model, _ = _catalog(catalog)
    store = RecordStore(db)
    if store.get(model, item_id) is None:
        raise HTTPException(status_code=404, detail="Item not found")
    store.delete(model, item_id)
    logger.info(f"{catalog} item {item_id} deleted by user {current_user.user_id}")
