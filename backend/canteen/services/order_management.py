"""Unified order management across all order kinds.

Admins see every kind of order in one newest-first list and can export the
same list to Excel.
"""

import io
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from sqlalchemy.orm import Session

from canteen.core.clock import to_local
from canteen.db.record_store import RecordStore
from canteen.models.orders import ORDER_MODELS, OrderKind, OrderKindPolicy
from canteen.models.user import User

logger = logging.getLogger(__name__)

BASE_COLUMNS = ["Type", "Reference", "User", "Employee ID", "Status", "Date", "Amount"]


def order_row(order: OrderKindPolicy, user: Optional[User] = None) -> Dict[str, Any]:
    """Flatten an order of any kind into a listing row."""
    order_date = getattr(order, order.date_field)
    if isinstance(order_date, datetime):
        order_date = to_local(order_date).date()
    return {
        "kind": order.kind.value,
        "label": order.label,
        "id": order.id,
        "reference": order.reference,
        "user_id": order.user_id,
        "user_name": user.full_name if user else "N/A",
        "employee_id": (user.employee_id if user else None)
        or getattr(order, "ordered_for_employee_id", None) or "N/A",
        "status": order.status,
        "allowed_statuses": order.allowed_statuses(),
        "amount": order.amount,
        "order_date": order_date,
        "created_at": order.created_at,
        "details": order.details(),
    }


class OrderManagementService:
    """Cross-kind order listing and export for the back-office."""

    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    def list_orders(
        self,
        kind: Optional[OrderKind] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Orders of one or all kinds, newest first.

        The date range applies to each kind's own date column (order date,
        party date, booking date, request date).
        """
        kinds = [OrderKind(kind)] if kind else list(ORDER_MODELS)
        orders: List[OrderKindPolicy] = []
        for k in kinds:
            model = ORDER_MODELS[k]
            if status and not model.accepts_status(status):
                continue
            date_column = getattr(model, model.date_field)
            criteria = []
            if date_from:
                criteria.append(date_column >= date_from)
            if date_to:
                criteria.append(date_column <= date_to)
            equals = {}
            if user_id is not None:
                equals["user_id"] = user_id
            if status:
                equals["status"] = status
            orders.extend(self.store.find(model, *criteria, **equals))

        orders.sort(key=lambda o: (o.created_at, o.id), reverse=True)
        users = self._users({o.user_id for o in orders})
        return [order_row(o, users.get(o.user_id)) for o in orders]

    def _users(self, user_ids: Iterable[int]) -> Dict[int, User]:
        ids = list(user_ids)
        if not ids:
            return {}
        return {u.id: u for u in self.store.find(User, User.id.in_(ids))}

    def export_xlsx(self, rows: List[Dict[str, Any]]) -> bytes:
        """Excel workbook of listing rows; kind-specific columns follow the base ones."""
        detail_columns: List[str] = []
        for row in rows:
            for key in row["details"]:
                if key not in detail_columns:
                    detail_columns.append(key)
        headers = BASE_COLUMNS + detail_columns

        wb = Workbook()
        ws = wb.active
        ws.title = "Orders"

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )

        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.border = border
            cell.alignment = Alignment(horizontal="center")

        for idx, row in enumerate(rows, 2):
            data = [
                row["label"],
                row["reference"],
                row["user_name"],
                row["employee_id"],
                row["status"],
                row["order_date"].isoformat() if row["order_date"] else "",
                row["amount"] if row["amount"] is not None else "",
            ]
            data += [row["details"].get(key, "") for key in detail_columns]
            for col, value in enumerate(data, 1):
                cell = ws.cell(row=idx, column=col, value=value)
                cell.border = border

        for col in range(1, len(headers) + 1):
            ws.column_dimensions[ws.cell(row=1, column=col).column_letter].width = 18

        buffer = io.BytesIO()
        wb.save(buffer)
        logger.info(f"Exported {len(rows)} orders to XLSX")
        return buffer.getvalue()
