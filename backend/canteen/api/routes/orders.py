"""Order routes: placement for every kind, my orders, admin management."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from canteen.core.clock import local_today
from canteen.core.exceptions import (
    AdvanceNoticeRequired,
    DeductionWriteFailure,
    InvalidStatusTransition,
    ItemUnavailable,
    OrderingClosed,
    StatusChangeConflict,
)
from canteen.core.rate_limit import limiter
from canteen.core.rbac import CurrentUser, RequireAdmin, RequireEmployee
from canteen.core.responses import list_response
from canteen.db.record_store import RecordStore
from canteen.db.session import DbSession
from canteen.models.orders import OrderKind, order_model
from canteen.schemas.billing import DeductionResponse
from canteen.schemas.orders import (
    AdminOrderCreate,
    BeverageOrderCreate,
    BeverageOrderResponse,
    EstateRequestCreate,
    EstateRequestResponse,
    GeneralOrderCreate,
    HomeMealOrderCreate,
    HomeMealOrderResponse,
    MassageBookingCreate,
    MassageBookingResponse,
    MealOrderResponse,
    OrderRow,
    PartyOrderCreate,
    PartyOrderResponse,
    RegularOrderCreate,
    StatusChangeResponse,
    StatusUpdate,
)
from canteen.services.order_lifecycle import OrderLifecycleService
from canteen.services.order_management import OrderManagementService
from canteen.services.order_placement import OrderPlacementService

logger = logging.getLogger(__name__)

router = APIRouter()

RESPONSE_SCHEMAS = {
    OrderKind.REGULAR: MealOrderResponse,
    OrderKind.GENERAL: MealOrderResponse,
    OrderKind.PARTY: PartyOrderResponse,
    OrderKind.MASSAGE: MassageBookingResponse,
    OrderKind.BEVERAGE: BeverageOrderResponse,
    OrderKind.HOME_MEAL: HomeMealOrderResponse,
    OrderKind.ESTATE: EstateRequestResponse,
}


def _serialize(kind: OrderKind, order) -> dict:
    return RESPONSE_SCHEMAS[kind].model_validate(order).model_dump()


def _cart(lines) -> list:
    return [line.model_dump() for line in lines]


# ==================== PLACEMENT ====================

@router.post("/regular", response_model=MealOrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def place_regular_order(request: Request, db: DbSession, current_user: RequireEmployee, body: RegularOrderCreate):
    """Checkout a meal session cart. Rejected once the session's ordering window closes."""
    try:
        return OrderPlacementService(db).place_regular_order(
            current_user, body.session_id, _cart(body.items),
            pickup_time=body.pickup_time, notes=body.notes,
        )
    except OrderingClosed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/general", response_model=MealOrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def place_general_order(request: Request, db: DbSession, current_user: RequireEmployee, body: GeneralOrderCreate):
    try:
        return OrderPlacementService(db).place_general_order(
            current_user, body.session_id, _cart(body.items),
            charge_account=body.charge_account, notes=body.notes,
        )
    except OrderingClosed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/on-behalf", response_model=MealOrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def place_order_for_employee(request: Request, db: DbSession, current_user: RequireAdmin, body: AdminOrderCreate):
    """Admin places a regular order for an employee, outside the ordering window if needed."""
    try:
        order = OrderPlacementService(db).place_order_for_employee(
            current_user, body.employee_id, body.session_id, _cart(body.items), notes=body.notes,
        )
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))
    logger.info(f"Admin {current_user.user_id} placed order {order.order_number} for employee {body.employee_id}")
    return order


@router.post("/party", response_model=PartyOrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def place_party_order(request: Request, db: DbSession, current_user: RequireEmployee, body: PartyOrderCreate):
    try:
        return OrderPlacementService(db).place_party_order(
            current_user,
            department=body.department,
            party_date=body.party_date,
            estimated_headcount=body.estimated_headcount,
            items=_cart(body.items),
            description=body.description,
        )
    except AdvanceNoticeRequired as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/massage", response_model=MassageBookingResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def book_massage(request: Request, db: DbSession, current_user: RequireEmployee, body: MassageBookingCreate):
    try:
        return OrderPlacementService(db).book_massage(
            current_user, body.service_id, body.booking_date, body.booking_time, notes=body.notes,
        )
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/beverages", response_model=list[BeverageOrderResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def order_beverages(request: Request, db: DbSession, current_user: RequireEmployee, body: BeverageOrderCreate):
    try:
        return OrderPlacementService(db).order_beverages(current_user, _cart(body.items))
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/home-meal", response_model=HomeMealOrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def place_home_meal_order(request: Request, db: DbSession, current_user: RequireEmployee, body: HomeMealOrderCreate):
    try:
        return OrderPlacementService(db).place_home_meal_order(
            current_user,
            _cart(body.items),
            building=body.building,
            flat_no=body.flat_no,
            landmark=body.landmark,
            pin_code=body.pin_code,
            notes=body.notes,
        )
    except OrderingClosed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/estate", response_model=EstateRequestResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def request_estate_item(request: Request, db: DbSession, current_user: RequireEmployee, body: EstateRequestCreate):
    try:
        return OrderPlacementService(db).request_estate_item(
            current_user, body.estate_item_id, body.quantity, body.room_flat, notes=body.notes,
        )
    except ItemUnavailable as e:
        raise HTTPException(status_code=422, detail=str(e))


# ==================== MY ORDERS ====================

@router.get("/mine")
@limiter.limit("60/minute")
def list_my_orders(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    kind: OrderKind = Query(OrderKind.REGULAR),
):
    orders = OrderPlacementService(db).my_orders(current_user, kind)
    return list_response([_serialize(kind, o) for o in orders], kind=kind.value)


# ==================== ADMIN MANAGEMENT ====================

@router.get("/")
@limiter.limit("60/minute")
def list_all_orders(
    request: Request,
    db: DbSession,
    current_user: RequireAdmin,
    kind: Optional[OrderKind] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    user_id: Optional[int] = None,
    order_status: Optional[str] = Query(None, alias="status"),
):
    """Every order of every kind, newest first, with optional filters."""
    rows = OrderManagementService(db).list_orders(
        kind=kind, date_from=date_from, date_to=date_to, user_id=user_id, status=order_status,
    )
    return list_response([OrderRow(**row).model_dump() for row in rows])


@router.get("/export")
@limiter.limit("10/minute")
def export_orders(
    request: Request,
    db: DbSession,
    current_user: RequireAdmin,
    kind: Optional[OrderKind] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    user_id: Optional[int] = None,
    order_status: Optional[str] = Query(None, alias="status"),
):
    """The admin listing as an Excel download."""
    service = OrderManagementService(db)
    rows = service.list_orders(
        kind=kind, date_from=date_from, date_to=date_to, user_id=user_id, status=order_status,
    )
    content = service.export_xlsx(rows)
    filename = f"all_orders_{local_today().isoformat()}.xlsx"
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/{kind}/{order_id}")
@limiter.limit("60/minute")
def get_order(request: Request, db: DbSession, current_user: CurrentUser, kind: OrderKind, order_id: int):
    order = RecordStore(db).get(order_model(kind), order_id)
    if order is None or (order.user_id != current_user.user_id and not current_user.is_admin):
        raise HTTPException(status_code=404, detail="Order not found")
    return _serialize(kind, order)


@router.patch("/{kind}/{order_id}/status", response_model=StatusChangeResponse)
@limiter.limit("30/minute")
def update_order_status(
    request: Request,
    db: DbSession,
    current_user: RequireAdmin,
    kind: OrderKind,
    order_id: int,
    body: StatusUpdate,
):
    """Change an order's status.

    Completing a payroll-deductible order records its salary deduction. If
    that write fails the status change still stands and the response
    carries a ``warning``.
    """
    try:
        change = OrderLifecycleService(db).apply_status_change(
            kind, order_id, body.status, current_user,
        )
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StatusChangeConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DeductionWriteFailure as e:
        return StatusChangeResponse(
            kind=kind.value,
            order_id=order_id,
            previous_status=e.previous_status or "",
            status=e.order.status,
            warning="Status updated, but the salary deduction could not be recorded. "
                    "Record it manually.",
        )

    return StatusChangeResponse(
        kind=kind.value,
        order_id=order_id,
        previous_status=change.previous_status,
        status=change.order.status,
        deduction=DeductionResponse.model_validate(change.deduction) if change.deduction else None,
    )
