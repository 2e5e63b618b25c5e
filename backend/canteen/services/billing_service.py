"""Monthly salary deduction statements."""

import io
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from canteen.core.clock import month_start
from canteen.core.exceptions import RecordNotFound
from canteen.db.record_store import RecordStore
from canteen.models.billing import EmployeeDeduction
from canteen.models.user import User

logger = logging.getLogger(__name__)


def next_month(value: date) -> date:
    start = month_start(value)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


@dataclass
class BillingStatement:
    user: User
    month: date
    deductions: List[EmployeeDeduction] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((Decimal(d.amount) for d in self.deductions), Decimal("0"))


class BillingService:
    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    def statement(self, user_id: int, month: date) -> BillingStatement:
        """Deductions dated within the calendar month containing ``month``."""
        user = self.store.get(User, user_id)
        if user is None:
            raise RecordNotFound(User.__tablename__, user_id)
        start = month_start(month)
        deductions = self.store.find(
            EmployeeDeduction,
            EmployeeDeduction.deduction_date >= start,
            EmployeeDeduction.deduction_date < next_month(start),
            user_id=user_id,
            order_by=[EmployeeDeduction.deduction_date, EmployeeDeduction.id],
        )
        return BillingStatement(user=user, month=start, deductions=deductions)

    def statement_pdf(self, statement: BillingStatement) -> bytes:
        """Render a statement as a one-table A4 PDF."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=2 * cm, bottomMargin=2 * cm)

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "Title",
            parent=styles["Heading1"],
            fontSize=18,
            spaceAfter=20,
        )

        elements = [
            Paragraph(f"Billing Statement - {statement.month.strftime('%B %Y')}", title_style),
            Paragraph(f"<b>Employee:</b> {statement.user.full_name}", styles["Normal"]),
        ]
        if statement.user.employee_id:
            elements.append(
                Paragraph(f"<b>Employee ID:</b> {statement.user.employee_id}", styles["Normal"])
            )
        elements.append(Spacer(1, 1 * cm))

        table_data = [["#", "Date", "Description", "Amount"]]
        for idx, deduction in enumerate(statement.deductions, 1):
            table_data.append([
                str(idx),
                deduction.deduction_date.isoformat(),
                deduction.description[:50],
                f"{Decimal(deduction.amount):.2f}",
            ])
        table_data.append(["", "", "Total:", f"{statement.total:.2f}"])

        table = Table(table_data, colWidths=[1 * cm, 3 * cm, 9 * cm, 3 * cm])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 12),
            ("GRID", (0, 0), (-1, -1), 1, colors.black),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ]))
        elements.append(table)

        doc.build(elements)
        logger.info(
            f"Generated billing statement PDF for user {statement.user.id}, "
            f"{statement.month:%Y-%m}: {len(statement.deductions)} deductions"
        )
        return buffer.getvalue()
