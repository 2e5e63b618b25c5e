"""Order placement for every order kind.

Every order is created in its kind's initial status. Line prices are copied
from the menu at placement time so later menu edits never change an order's
total.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from canteen.core.clock import local_now
from canteen.core.config import settings
from canteen.core.exceptions import (
    AdvanceNoticeRequired,
    DuplicateRecord,
    ItemUnavailable,
    OrderingClosed,
    RecordNotFound,
    StoreUnavailable,
)
from canteen.core.rbac import TokenData
from canteen.core.sanitize import sanitize_text
from canteen.db.record_store import RecordStore
from canteen.models.menu import MealSession, MenuItem
from canteen.models.orders import (
    BeverageItem,
    BeverageOrder,
    EstateItem,
    EstateRequest,
    GeneralOrder,
    HomeMealOrder,
    HomeMealOrderItem,
    MassageBooking,
    MassageService,
    MealOrder,
    MealOrderItem,
    OrderKind,
    PartyOrder,
    PartyOrderItem,
    RegularOrder,
    order_model,
)
from canteen.models.user import User
from canteen.services.ordering_window import can_schedule_advance, is_ordering_active

logger = logging.getLogger(__name__)

CartLines = List[Dict[str, Any]]

ORDER_NUMBER_ATTEMPTS = 5


class OrderPlacementService:
    """Creates orders of every kind on behalf of the acting user."""

    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    # ===== HELPERS =====

    def _menu_lines(self, items: CartLines) -> List[Tuple[MenuItem, int]]:
        """Resolve ``{menu_item_id, quantity}`` lines to available menu items."""
        lines = []
        for line in items:
            menu_item = self.store.get(MenuItem, line["menu_item_id"])
            if menu_item is None:
                raise RecordNotFound(MenuItem.__tablename__, line["menu_item_id"])
            if not menu_item.available:
                raise ItemUnavailable(menu_item.name)
            lines.append((menu_item, int(line["quantity"])))
        return lines

    @staticmethod
    def _subtotal(lines: List[Tuple[MenuItem, int]]) -> Decimal:
        return sum((Decimal(item.price) * qty for item, qty in lines), Decimal("0"))

    def _next_order_number(self, order_date: date) -> str:
        """Next ``ORD-YYYYMMDD-NNNNN`` after the highest number used that day."""
        prefix = f"ORD-{order_date.strftime('%Y%m%d')}-"
        stmt = select(func.max(MealOrder.order_number)).where(MealOrder.order_number.like(f"{prefix}%"))
        try:
            latest = self.db.scalar(stmt)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable("Could not number the order") from e
        sequence = int(latest[len(prefix):]) if latest else 0
        return f"{prefix}{sequence + 1:05d}"

    def _session(self, session_id: int) -> MealSession:
        session = self.store.get(MealSession, session_id)
        if session is None:
            raise RecordNotFound(MealSession.__tablename__, session_id)
        return session

    # ===== MEAL ORDERS =====

    def _place_meal_order(
        self,
        model: Type[MealOrder],
        user_id: int,
        session_id: int,
        items: CartLines,
        now: datetime,
        enforce_window: bool = True,
        **fields: Any,
    ) -> MealOrder:
        session = self._session(session_id)
        if enforce_window and not is_ordering_active(session, now):
            raise OrderingClosed(f"Ordering for {session.name} is closed")

        lines = self._menu_lines(items)
        order_date = now.date()
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            order_number = self._next_order_number(order_date)
            order = model(
                order_number=order_number,
                user_id=user_id,
                session_id=session.id,
                status=model.initial_status,
                total_amount=self._subtotal(lines),
                order_date=order_date,
                items=[
                    MealOrderItem(
                        menu_item_id=item.id,
                        item_name=item.name,
                        quantity=qty,
                        price=item.price,
                    )
                    for item, qty in lines
                ],
                **fields,
            )
            try:
                order = self.store.insert(model, order)
                break
            except DuplicateRecord:
                # Another checkout took this number between our read and insert
                if attempt == ORDER_NUMBER_ATTEMPTS:
                    raise
                logger.warning(
                    f"Order number {order_number} already taken "
                    f"(attempt {attempt}/{ORDER_NUMBER_ATTEMPTS}), renumbering"
                )
        logger.info(
            f"{model.kind.value} order {order.order_number} placed for user {user_id}: "
            f"{len(lines)} lines, total {order.total_amount}"
        )
        return order

    def place_regular_order(
        self,
        actor: TokenData,
        session_id: int,
        items: CartLines,
        pickup_time: Optional[str] = None,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> RegularOrder:
        """Cart checkout for a meal session; only while its window is open."""
        return self._place_meal_order(
            RegularOrder, actor.user_id, session_id, items, now or local_now(),
            pickup_time=pickup_time, notes=sanitize_text(notes),
        )

    def place_general_order(
        self,
        actor: TokenData,
        session_id: int,
        items: CartLines,
        charge_account: str,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> GeneralOrder:
        """Meal order billed to a charge account instead of payroll."""
        return self._place_meal_order(
            GeneralOrder, actor.user_id, session_id, items, now or local_now(),
            charge_account=sanitize_text(charge_account), notes=sanitize_text(notes),
        )

    def place_order_for_employee(
        self,
        admin: TokenData,
        employee_id: str,
        session_id: int,
        items: CartLines,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> RegularOrder:
        """Admin places a regular order on an employee's behalf (not time-gated)."""
        matches = self.store.find(User, employee_id=employee_id, limit=1)
        if not matches:
            raise RecordNotFound(User.__tablename__, employee_id)
        employee = matches[0]
        return self._place_meal_order(
            RegularOrder, employee.id, session_id, items, now or local_now(),
            enforce_window=False,
            notes=sanitize_text(notes),
            ordered_by_admin_id=admin.user_id,
            ordered_for_employee_id=employee_id,
        )

    # ===== PARTY =====

    def place_party_order(
        self,
        actor: TokenData,
        department: str,
        party_date: date,
        estimated_headcount: int,
        items: CartLines,
        description: str = "",
        today: Optional[date] = None,
    ) -> PartyOrder:
        today = today or local_now().date()
        min_days = settings.party_min_advance_days
        if not can_schedule_advance(party_date, today, min_days):
            raise AdvanceNoticeRequired(min_days)

        lines = self._menu_lines(items)
        order = PartyOrder(
            user_id=actor.user_id,
            department=sanitize_text(department),
            party_date=party_date,
            order_date=today,
            description=sanitize_text(description),
            estimated_headcount=estimated_headcount,
            status=PartyOrder.initial_status,
            total_cost=self._subtotal(lines),
            items=[
                PartyOrderItem(
                    menu_item_id=item.id, item_name=item.name, quantity=qty, price=item.price,
                )
                for item, qty in lines
            ],
        )
        order = self.store.insert(PartyOrder, order)
        logger.info(f"Party order {order.id} for {order.department} on {party_date} placed")
        return order

    # ===== MASSAGE =====

    def book_massage(
        self,
        actor: TokenData,
        service_id: int,
        booking_date: date,
        booking_time: str,
        notes: str = "",
    ) -> MassageBooking:
        service = self.store.get(MassageService, service_id)
        if service is None:
            raise RecordNotFound(MassageService.__tablename__, service_id)
        if not service.active:
            raise ItemUnavailable(service.name)

        return self.store.insert(MassageBooking, {
            "user_id": actor.user_id,
            "service_id": service.id,
            "booking_date": booking_date,
            "booking_time": booking_time,
            "price": service.price,
            "notes": sanitize_text(notes),
            "status": MassageBooking.initial_status,
        })

    # ===== BEVERAGES =====

    def order_beverages(
        self,
        actor: TokenData,
        lines: CartLines,
        today: Optional[date] = None,
    ) -> List[BeverageOrder]:
        """One beverage order row per cart line."""
        today = today or local_now().date()
        orders = []
        for line in lines:
            beverage = self.store.get(BeverageItem, line["beverage_item_id"])
            if beverage is None:
                raise RecordNotFound(BeverageItem.__tablename__, line["beverage_item_id"])
            if not beverage.available:
                raise ItemUnavailable(beverage.name)
            quantity = int(line["quantity"])
            orders.append(BeverageOrder(
                user_id=actor.user_id,
                beverage_item_id=beverage.id,
                item_name=beverage.name,
                quantity=quantity,
                total_amount=Decimal(beverage.price) * quantity,
                order_date=today,
                status=BeverageOrder.initial_status,
            ))
        return self.store.insert_many(orders)

    # ===== HOME MEALS =====

    def place_home_meal_order(
        self,
        actor: TokenData,
        items: CartLines,
        building: str,
        flat_no: str,
        landmark: str = "",
        pin_code: str = "",
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> HomeMealOrder:
        """Home delivery order; closed from the cutoff hour onwards."""
        now = now or local_now()
        if now.hour >= settings.home_meal_cutoff_hour:
            raise OrderingClosed(
                f"Home meal orders close at {settings.home_meal_cutoff_hour:02d}:00"
            )

        lines = self._menu_lines(items)
        delivery_charge = Decimal(str(settings.home_meal_delivery_charge))
        order = HomeMealOrder(
            user_id=actor.user_id,
            total_amount=self._subtotal(lines) + delivery_charge,
            delivery_charge=delivery_charge,
            building=sanitize_text(building),
            flat_no=sanitize_text(flat_no),
            landmark=sanitize_text(landmark),
            pin_code=pin_code,
            notes=sanitize_text(notes),
            order_date=now.date(),
            status=HomeMealOrder.initial_status,
            items=[
                HomeMealOrderItem(
                    menu_item_id=item.id, item_name=item.name, quantity=qty, price=item.price,
                )
                for item, qty in lines
            ],
        )
        return self.store.insert(HomeMealOrder, order)

    # ===== ESTATE =====

    def request_estate_item(
        self,
        actor: TokenData,
        estate_item_id: int,
        quantity: int,
        room_flat: str,
        notes: str = "",
        today: Optional[date] = None,
    ) -> EstateRequest:
        item = self.store.get(EstateItem, estate_item_id)
        if item is None:
            raise RecordNotFound(EstateItem.__tablename__, estate_item_id)
        if not item.available:
            raise ItemUnavailable(item.name)

        return self.store.insert(EstateRequest, {
            "user_id": actor.user_id,
            "estate_item_id": item.id,
            "item_name": item.name,
            "quantity": quantity,
            "room_flat": sanitize_text(room_flat),
            "notes": sanitize_text(notes),
            "request_date": today or local_now().date(),
            "status": EstateRequest.initial_status,
        })

    # ===== MY ORDERS =====

    def my_orders(self, actor: TokenData, kind: OrderKind) -> list:
        """The acting user's orders of one kind, newest first."""
        model = order_model(kind)
        return self.store.find(
            model,
            user_id=actor.user_id,
            order_by=[model.created_at.desc(), model.id.desc()],
        )
